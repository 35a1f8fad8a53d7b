# src/faqtory/commands/base.py
"""Base types for the commands layer.

This module defines the data structures used by all commands:
- Progress callbacks for long-running operations
- Confirmation callbacks for destructive commands
- Result types for each command
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CommandStage(Enum):
    """Stages of command execution for progress reporting."""

    SUBMITTING = "Submitting"
    EXTRACTING = "Extracting"
    CLUSTERING = "Clustering"
    EMBEDDING = "Embedding"
    COMPLETE = "Complete"


@dataclass
class ProgressUpdate:
    """Progress update for long-running operations.

    Attributes:
        stage: Current stage of the operation
        current: Items done so far
        total: Total number of items (0 for indeterminate)
        message: Optional status message
    """

    stage: CommandStage
    current: int
    total: int
    message: str | None = None

    @property
    def is_indeterminate(self) -> bool:
        return self.total == 0

    @property
    def percentage(self) -> int:
        """Progress as percentage (0-100). Returns 0 if indeterminate."""
        if self.total == 0:
            return 0
        return int(100 * self.current / self.total)


ProgressCallback = Callable[[ProgressUpdate], None]


@dataclass
class ConfirmRequest:
    """Request for confirmation before a destructive operation."""

    message: str
    details: str | None = None


# Returns True to proceed
ConfirmCallback = Callable[[ConfirmRequest], bool]


@dataclass
class CommandResult:
    """Base result type for commands."""

    success: bool
    error: str | None = None


@dataclass
class GenerateResult(CommandResult):
    """Result of the generate command."""

    processed: int = 0
    clusters: int = 0
    generated: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    duration: float = 0.0


@dataclass
class ProcessResult(CommandResult):
    """Result of the process command.

    Attributes:
        submitted: New work items stored before processing
        status: Run status (completed, stopped, aborted, cancelled)
        stop_reason: Why a run ended early, if it did
        failures: (item_id, error) for items that failed
    """

    submitted: int = 0
    total_items: int = 0
    processed: int = 0
    questions_found: int = 0
    errors: int = 0
    status: str = "completed"
    stop_reason: str | None = None
    processing_time_ms: int = 0
    failures: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class BackfillResult(CommandResult):
    updated: int = 0


@dataclass
class StatusResult(CommandResult):
    """Result of the status command.

    Attributes:
        total_questions: Questions stored
        items: Work item counts by status
        total_groups: FAQ groups stored
        published_groups: FAQ groups visible to search
        grouped_questions: Sum of group question counts
        avg_group_size: Mean questions per group
        categories: Group counts by category
        jobs: Job counts by lane and status
        similarity: Question pair counts per similarity bucket
        duplicate_pairs: Question pairs at or above the duplicate threshold
    """

    total_questions: int = 0
    items: dict[str, int] = field(default_factory=dict)
    total_groups: int = 0
    published_groups: int = 0
    grouped_questions: int = 0
    avg_group_size: float = 0.0
    categories: dict[str, int] = field(default_factory=dict)
    jobs: dict[str, dict[str, int]] = field(default_factory=dict)
    similarity: dict[str, int] = field(default_factory=dict)
    duplicate_pairs: int = 0


@dataclass
class FAQInfo:
    """Summary of one FAQ group for listings."""

    id: str
    title: str
    question_count: int
    frequency_score: float
    is_published: bool
    category: str | None = None
    tags: list[str] = field(default_factory=list)


@dataclass
class FAQListResult(CommandResult):
    faqs: list[FAQInfo] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20


@dataclass
class MemberInfo:
    """A question attached to an FAQ group."""

    question_id: str
    text: str
    similarity_score: float
    is_representative: bool


@dataclass
class FAQDetailResult(CommandResult):
    """Result of the faqs show command."""

    faq: dict[str, Any] | None = None
    members: list[MemberInfo] = field(default_factory=list)


@dataclass
class FAQUpdateResult(CommandResult):
    faq_id: str = ""
    is_published: bool = False


@dataclass
class FAQDeleteResult(CommandResult):
    faq_id: str = ""
    questions_released: int = 0


@dataclass
class SearchHit:
    """A single search result."""

    faq_id: str
    title: str
    answer: str
    score: float
    category: str | None = None


@dataclass
class SearchResult(CommandResult):
    query: str = ""
    results: list[SearchHit] = field(default_factory=list)


@dataclass
class WorkerResult(CommandResult):
    """Result of a worker run.

    Attributes:
        lanes: Lanes the worker served
        jobs_run: Jobs run per lane
        enqueued: Id of the job enqueued at startup, if any
    """

    lanes: list[str] = field(default_factory=list)
    jobs_run: dict[str, int] = field(default_factory=dict)
    enqueued: str | None = None
