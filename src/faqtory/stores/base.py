# src/faqtory/stores/base.py
"""Abstract base classes for storage."""

from abc import ABC, abstractmethod
from typing import Any

from faqtory.models import (
    FAQGroup,
    ItemStatus,
    Question,
    QuestionGroupAssociation,
    WorkItem,
)


class QuestionStore(ABC):
    """Abstract base class for the question corpus."""

    @abstractmethod
    def put_many(self, questions: list[Question]) -> int:
        """Store questions, ignoring duplicates of (item_id, text). Returns rows inserted."""
        ...

    @abstractmethod
    def get(self, question_id: str) -> Question | None:
        """Retrieve a question by ID. Returns None if not found."""
        ...

    @abstractmethod
    def get_many(self, question_ids: list[str]) -> list[Question]:
        """Retrieve multiple questions in input order. Skips missing ones."""
        ...

    @abstractmethod
    def get_embeddings(self, question_ids: list[str]) -> dict[str, list[float]]:
        """Batch lookup of embeddings. Questions without one are absent from the result."""
        ...

    @abstractmethod
    def list_for_generation(self, min_confidence: float, limit: int) -> list[Question]:
        """Embedded questions eligible for clustering.

        Ungrouped questions come first; grouped ones fill the rest of the
        limit. Within each part: best confidence first, then newest.
        """
        ...

    @abstractmethod
    def list_missing_embeddings(self, limit: int) -> list[Question]:
        """Questions that still need an embedding, oldest first."""
        ...

    @abstractmethod
    def set_embedding(self, question_id: str, embedding: list[float]) -> None:
        """Attach an embedding to a question."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Count all stored questions."""
        ...

    @abstractmethod
    def count_for_item(self, item_id: str) -> int:
        """Count questions extracted from one work item."""
        ...


class FAQStore(ABC):
    """Abstract base class for FAQ groups and their question associations."""

    @abstractmethod
    def create_group(
        self, group: FAQGroup, associations: list[QuestionGroupAssociation]
    ) -> None:
        """Insert a group and its associations in a single transaction."""
        ...

    @abstractmethod
    def save_group(
        self,
        group: FAQGroup,
        associations: list[QuestionGroupAssociation],
        replace_associations: bool = False,
    ) -> None:
        """Update an existing group and upsert associations in a single transaction.

        With replace_associations, the group's previous associations are
        removed first.
        """
        ...

    @abstractmethod
    def get(self, group_id: str) -> FAQGroup | None:
        """Retrieve a group by ID."""
        ...

    @abstractmethod
    def list_groups(
        self,
        page: int = 1,
        limit: int = 20,
        category: str | None = None,
        published: bool | None = None,
        search: str | None = None,
        sort_by: str = "frequency_score",
        descending: bool = True,
    ) -> tuple[list[FAQGroup], int]:
        """List groups with filters and pagination. Returns (page, total matching)."""
        ...

    @abstractmethod
    def list_published(self) -> list[FAQGroup]:
        """All published groups that carry a representative embedding."""
        ...

    @abstractmethod
    def find_group_for_questions(self, question_ids: list[str]) -> FAQGroup | None:
        """The group holding the most of the given questions, if any."""
        ...

    @abstractmethod
    def grouped_question_ids(self, question_ids: list[str]) -> dict[str, str]:
        """Map of question ID to group ID for the given questions that are grouped."""
        ...

    @abstractmethod
    def get_associations(self, group_id: str) -> list[QuestionGroupAssociation]:
        """Associations of one group, representative first."""
        ...

    @abstractmethod
    def get_member_questions(self, group_id: str) -> list[Question]:
        """Questions associated with a group, representative first."""
        ...

    @abstractmethod
    def update_fields(self, group_id: str, **fields: Any) -> FAQGroup | None:
        """Administrative edit of whitelisted fields. Returns the updated group."""
        ...

    @abstractmethod
    def delete(self, group_id: str) -> bool:
        """Delete a group and its associations. Returns False if it did not exist."""
        ...

    @abstractmethod
    def update_statistics(self) -> int:
        """Reconcile every group's aggregates with its associations. Returns groups changed."""
        ...

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        """Aggregate counts for reporting."""
        ...


class ItemStore(ABC):
    """Abstract base class for work items awaiting extraction."""

    @abstractmethod
    def put_many(self, items: list[WorkItem]) -> int:
        """Store new items, ignoring IDs that already exist. Returns rows inserted."""
        ...

    @abstractmethod
    def get(self, item_id: str) -> WorkItem | None:
        """Retrieve an item by ID."""
        ...

    @abstractmethod
    def list_pending(self, limit: int | None = None) -> list[WorkItem]:
        """Pending items, oldest first."""
        ...

    @abstractmethod
    def mark(
        self,
        item_id: str,
        status: ItemStatus,
        error: str | None = None,
        questions_found: int | None = None,
    ) -> bool:
        """Move an item to a new status. Terminal states never change. Returns True if moved."""
        ...

    @abstractmethod
    def count_by_status(self) -> dict[str, int]:
        """Number of items per status."""
        ...
