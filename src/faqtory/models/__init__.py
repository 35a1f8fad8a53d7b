"""Data models for faqtory."""

from faqtory.models.faq import (
    APPROXIMATE_MEMBER_SIMILARITY,
    REPRESENTATIVE_SIMILARITY,
    Cluster,
    FAQGroup,
    QuestionGroupAssociation,
)
from faqtory.models.item import ItemStatus, WorkItem
from faqtory.models.question import ExtractedQuestion, ExtractionResult, Question
from faqtory.models.results import (
    AssemblyResult,
    FAQSearchResult,
    GenerationSummary,
    ItemResult,
    MemorySample,
    PipelineEvent,
    ProcessingSummary,
)

__all__ = [
    "APPROXIMATE_MEMBER_SIMILARITY",
    "REPRESENTATIVE_SIMILARITY",
    "AssemblyResult",
    "Cluster",
    "ExtractedQuestion",
    "ExtractionResult",
    "FAQGroup",
    "FAQSearchResult",
    "GenerationSummary",
    "ItemResult",
    "ItemStatus",
    "MemorySample",
    "PipelineEvent",
    "ProcessingSummary",
    "Question",
    "QuestionGroupAssociation",
    "WorkItem",
]
