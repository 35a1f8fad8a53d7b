# src/faqtory/models/results.py
"""Result and event models produced by faqtory runs."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from faqtory.models.faq import FAQGroup
from faqtory.models.question import utcnow


class AssemblyResult(BaseModel):
    """Outcome of assembling one cluster."""

    faq: FAQGroup
    is_new: bool
    is_updated: bool


class GenerationSummary(BaseModel):
    """Summary of one FAQ generation run.

    Always returned, even when some clusters failed, so callers can tell
    "nothing to do" apart from "everything failed".
    """

    processed: int = 0  # Candidate questions considered
    clusters: int = 0  # Clusters meeting the minimum size
    generated: int = 0
    updated: int = 0
    skipped: int = 0  # Valid clusters that produced no change
    errors: int = 0
    duration: float = 0.0  # Seconds


class MemorySample(BaseModel):
    """Resident memory observed at a point in a run."""

    timestamp: datetime = Field(default_factory=utcnow)
    used_mb: int
    threshold_mb: int


class ItemResult(BaseModel):
    """Per-item outcome inside a processing run."""

    item_id: str
    status: Literal["success", "skipped", "error"]
    questions_found: int = 0
    error: str | None = None


RunStatus = Literal["completed", "stopped", "aborted"]


class ProcessingSummary(BaseModel):
    """Summary of one batch-processing run."""

    job_id: str | None = None
    total_items: int = 0
    processed: int = 0
    questions_found: int = 0
    errors: int = 0
    status: RunStatus = "completed"
    stop_reason: str | None = None  # memory | circuit_breaker | cancelled
    error: str | None = None
    processing_time_ms: int = 0
    avg_time_per_item_ms: int = 0
    memory_peaks: list[MemorySample] = Field(default_factory=list)
    results: list[ItemResult] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status == "completed" and self.errors == 0


EventType = Literal["progress", "batch", "complete", "warning", "error"]


class PipelineEvent(BaseModel):
    """Progress/completion/error event emitted to collaborators."""

    type: EventType
    job_id: str | None = None
    processed: int = 0
    questions_found: int = 0
    errors: int = 0
    total: int = 0
    current_batch: int = 0
    total_batches: int = 0
    current_item: str | None = None
    message: str | None = None


class FAQSearchResult(BaseModel):
    """A published FAQ matched by similarity search."""

    faq: FAQGroup
    score: float
