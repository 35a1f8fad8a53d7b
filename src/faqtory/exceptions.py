# src/faqtory/exceptions.py
"""Exception hierarchy for faqtory."""

from __future__ import annotations

from typing import Any


class FaqtoryError(Exception):
    """Base class for all faqtory errors."""


class EmbeddingError(FaqtoryError):
    """Raised when the similarity provider fails to return embeddings.

    Embedding failures are retryable: callers may re-submit the same input.
    """

    retryable = True


class AssemblyError(FaqtoryError):
    """Raised when a single cluster cannot be turned into (or merged into) a FAQ."""

    def __init__(self, message: str, cluster_id: str | None = None) -> None:
        super().__init__(message)
        self.cluster_id = cluster_id


class PipelineError(FaqtoryError):
    """Base class for run-level processing errors.

    Attributes:
        counters: Snapshot of the run counters at the time of the error.
    """

    def __init__(self, message: str, counters: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.counters = counters or {}


class CircuitBreakerOpen(PipelineError):
    """Raised when consecutive or total error ceilings are reached."""


class ResourceExhausted(PipelineError):
    """Raised when memory stays above the threshold after reclamation."""


class ItemTimeout(FaqtoryError):
    """Raised when a single work item exceeds its processing timeout."""

    def __init__(self, item_id: str, timeout: float) -> None:
        super().__init__("Processing timeout")
        self.item_id = item_id
        self.timeout = timeout


class JobError(FaqtoryError):
    """Raised for job queue misuse (unknown lane, missing handler)."""
