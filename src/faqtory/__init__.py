"""faqtory - FAQ generation from customer questions.

Extracts questions from incoming messages, clusters similar ones by
embedding similarity, and assembles each cluster into a published FAQ.

Quick Start (LiteLLM + Local Storage):
    from faqtory import Faqtory, LiteLLMProvider, LocalStorage, WorkItem

    faqtory = Faqtory(
        provider=LiteLLMProvider(
            llm="openai/gpt-5-mini", embedding="openai/text-embedding-3-small"
        ),
        storage=LocalStorage("./data"),
    )

    # Extract questions from work items
    faqtory.submit_items([WorkItem(subject="Refund", body="How do I get a refund?")])
    summary = asyncio.run(faqtory.process_pending())

    # Cluster and assemble FAQs
    faqtory.generate_faqs(min_question_count=2)

    # Search published FAQs
    results = faqtory.search("refund policy")
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("faqtory")
except PackageNotFoundError:
    # Source tree without an installed distribution
    __version__ = "unknown"

from faqtory.assembly import FAQAssembler, FAQBuilder, FAQSearcher
from faqtory.configuration import LiteLLMProvider, LocalStorage, ProviderConfig, StorageConfig
from faqtory.embedder import ClientEmbedder, Embedder
from faqtory.exceptions import (
    AssemblyError,
    CircuitBreakerOpen,
    EmbeddingError,
    FaqtoryError,
    ItemTimeout,
    JobError,
    PipelineError,
    ResourceExhausted,
)
from faqtory.extractor import ClientQuestionExtractor, QuestionExtractor
from faqtory.faqtory import Faqtory
from faqtory.generator import ClientTextGenerator, TextGenerator
from faqtory.models import (
    AssemblyResult,
    Cluster,
    ExtractedQuestion,
    ExtractionResult,
    FAQGroup,
    FAQSearchResult,
    GenerationSummary,
    ItemStatus,
    PipelineEvent,
    ProcessingSummary,
    Question,
    QuestionGroupAssociation,
    WorkItem,
)
from faqtory.pipeline import BatchProcessor, JobQueue, Lane
from faqtory.settings import ProcessorConfig, Settings
from faqtory.similarity import AgglomerativeClusterer, SimilarityMatrix
from faqtory.stores import (
    FAQStore,
    ItemStore,
    QuestionStore,
    SQLiteFAQStore,
    SQLiteItemStore,
    SQLiteQuestionStore,
)

__all__ = [
    "__version__",
    # Central configuration
    "Faqtory",
    "LiteLLMProvider",
    "LocalStorage",
    "ProviderConfig",
    "StorageConfig",
    "Settings",
    "ProcessorConfig",
    # Models
    "AssemblyResult",
    "Cluster",
    "ExtractedQuestion",
    "ExtractionResult",
    "FAQGroup",
    "FAQSearchResult",
    "GenerationSummary",
    "ItemStatus",
    "PipelineEvent",
    "ProcessingSummary",
    "Question",
    "QuestionGroupAssociation",
    "WorkItem",
    # Components
    "Embedder",
    "ClientEmbedder",
    "TextGenerator",
    "ClientTextGenerator",
    "QuestionExtractor",
    "ClientQuestionExtractor",
    "AgglomerativeClusterer",
    "SimilarityMatrix",
    "FAQAssembler",
    "FAQBuilder",
    "FAQSearcher",
    "BatchProcessor",
    "JobQueue",
    "Lane",
    # Stores
    "QuestionStore",
    "FAQStore",
    "ItemStore",
    "SQLiteQuestionStore",
    "SQLiteFAQStore",
    "SQLiteItemStore",
    # Exceptions
    "FaqtoryError",
    "EmbeddingError",
    "AssemblyError",
    "PipelineError",
    "CircuitBreakerOpen",
    "ResourceExhausted",
    "ItemTimeout",
    "JobError",
]
