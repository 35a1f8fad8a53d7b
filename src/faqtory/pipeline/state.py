# src/faqtory/pipeline/state.py
"""Per-run counters for the batch processor."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from faqtory.models import ItemResult, MemorySample
from faqtory.models.question import utcnow


@dataclass
class RunState:
    """Mutable state of one processing run.

    A fresh instance is created per run, so concurrent runs never share
    counters.
    """

    total_items: int = 0
    total_batches: int = 0
    current_batch: int = 0
    processed: int = 0
    questions_found: int = 0
    consecutive_errors: int = 0
    total_errors: int = 0
    stop_requested: bool = False
    started_at: datetime = field(default_factory=utcnow)
    memory_peaks: list[MemorySample] = field(default_factory=list)
    results: list[ItemResult] = field(default_factory=list)

    def record_success(self, item_id: str, questions_found: int) -> None:
        self.processed += 1
        self.questions_found += questions_found
        self.consecutive_errors = 0
        self.results.append(
            ItemResult(item_id=item_id, status="success", questions_found=questions_found)
        )

    def record_failure(self, item_id: str, message: str) -> None:
        self.consecutive_errors += 1
        self.total_errors += 1
        self.results.append(ItemResult(item_id=item_id, status="error", error=message))

    def record_skip(self, item_id: str) -> None:
        self.results.append(ItemResult(item_id=item_id, status="skipped"))

    def counters(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "questions_found": self.questions_found,
            "consecutive_errors": self.consecutive_errors,
            "total_errors": self.total_errors,
            "current_batch": self.current_batch,
            "total_batches": self.total_batches,
        }
