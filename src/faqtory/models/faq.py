# src/faqtory/models/faq.py
"""FAQ group, association and cluster models."""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from faqtory.models.question import utcnow

# Similarity recorded for non-representative members when a group is created.
# Their exact score against the representative is not tracked at write time.
APPROXIMATE_MEMBER_SIMILARITY = 0.85
REPRESENTATIVE_SIMILARITY = 1.0


def normalize_tags(tags: list[str]) -> list[str]:
    """Trimmed, non-empty, de-duplicated tags in first-seen order."""
    return list(dict.fromkeys(t.strip() for t in tags if t and t.strip()))


class FAQGroup(BaseModel):
    """A published (or publishable) consolidated question/answer record."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    representative_question: str
    consolidated_answer: str
    question_count: int = 0
    frequency_score: float = 0.0
    avg_confidence: float = 0.0
    representative_embedding: list[float] | None = None
    is_published: bool = False
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: list[str]) -> list[str]:
        return normalize_tags(tags)


class QuestionGroupAssociation(BaseModel):
    """Junction row linking a question to the FAQ group it belongs to."""

    question_id: str
    group_id: str
    similarity_score: float = APPROXIMATE_MEMBER_SIMILARITY
    is_representative: bool = False


class Cluster(BaseModel):
    """Transient set of similar question ids produced by the clusterer."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    question_ids: list[str]

    @field_validator("question_ids")
    @classmethod
    def _dedupe_ids(cls, ids: list[str]) -> list[str]:
        return list(dict.fromkeys(ids))

    def __len__(self) -> int:
        return len(self.question_ids)
