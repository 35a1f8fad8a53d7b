# src/faqtory/commands/__init__.py
"""UI-agnostic command layer for faqtory.

Commands return data structures, allowing the CLI (or any other UI) to
render results appropriately.

Usage:
    from faqtory.commands import generate, faqs, status

    result = generate.generate(min_question_count=3)
    result = faqs.list_faqs(published=True)
    result = status.status()
"""

from faqtory.commands import backfill, faqs, generate, process, search, status, worker
from faqtory.commands.base import (
    BackfillResult,
    CommandResult,
    CommandStage,
    ConfirmCallback,
    ConfirmRequest,
    FAQDeleteResult,
    FAQDetailResult,
    FAQInfo,
    FAQListResult,
    FAQUpdateResult,
    GenerateResult,
    MemberInfo,
    ProcessResult,
    ProgressCallback,
    ProgressUpdate,
    SearchHit,
    SearchResult,
    StatusResult,
    WorkerResult,
)

__all__ = [
    # Base types
    "CommandStage",
    "ProgressUpdate",
    "ProgressCallback",
    "ConfirmRequest",
    "ConfirmCallback",
    "CommandResult",
    # Result types
    "GenerateResult",
    "ProcessResult",
    "BackfillResult",
    "StatusResult",
    "FAQInfo",
    "FAQListResult",
    "FAQDetailResult",
    "FAQUpdateResult",
    "FAQDeleteResult",
    "MemberInfo",
    "SearchHit",
    "SearchResult",
    "WorkerResult",
    # Command modules
    "backfill",
    "faqs",
    "generate",
    "process",
    "search",
    "status",
    "worker",
]
