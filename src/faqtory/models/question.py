# src/faqtory/models/question.py
"""Question data models."""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(UTC)


class Question(BaseModel):
    """A customer question extracted from an incoming item.

    The embedding is attached once computed; after that the question is only
    changed by administrative edits.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    text: str
    answer_text: str | None = None
    confidence_score: float = Field(default=0.5, ge=0.0, le=1.0)
    embedding: list[float] | None = None
    item_id: str | None = None  # Work item the question was extracted from
    source_metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None and len(self.embedding) > 0


class ExtractedQuestion(BaseModel):
    """A question as returned by the extractor, before it is stored."""

    question: str
    answer: str | None = None
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    context: str | None = None
    category: str | None = None


class ExtractionResult(BaseModel):
    """Output of a QuestionExtractor for one item."""

    has_questions: bool
    questions: list[ExtractedQuestion] = Field(default_factory=list)
    overall_confidence: float = 0.0
    reasoning: str = ""
