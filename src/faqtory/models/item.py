# src/faqtory/models/item.py
"""Work item model for the processing pipeline."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from faqtory.models.question import utcnow


class ItemStatus(str, Enum):
    """Lifecycle of a work item: pending -> processing -> completed | failed."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.COMPLETED, ItemStatus.FAILED)


class WorkItem(BaseModel):
    """A raw message-like item waiting for question extraction."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    subject: str = ""
    body: str = ""
    sender: str | None = None
    status: ItemStatus = ItemStatus.PENDING
    error: str | None = None
    questions_found: int = 0
    source_metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    processed_at: datetime | None = None
