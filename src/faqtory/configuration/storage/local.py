# src/faqtory/configuration/storage/local.py
"""Local filesystem storage configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from faqtory.pipeline.queue import JobQueue
    from faqtory.stores import FAQStore, ItemStore, QuestionStore

DB_FILENAME = "faqtory.db"


@dataclass(frozen=True)
class LocalStorage:
    """Local storage in a single SQLite database file.

    Questions, FAQ groups, work items and queued jobs all live in
    <data_dir>/faqtory.db, so multi-table writes share one transaction scope.

    Args:
        data_dir: Base directory for the database file.
                  Created if it doesn't exist.

    Example:
        storage = LocalStorage("./data")

        # In combination with a provider:
        faqtory = Faqtory(
            provider=LiteLLMProvider(llm="openai/gpt-5-mini", embedding="openai/text-embedding-3-small"),
            storage=LocalStorage("./data"),
        )
    """

    data_dir: str

    @property
    def db_path(self) -> str:
        return os.path.join(self.data_dir, DB_FILENAME)

    def build_stores(self) -> tuple[QuestionStore, FAQStore, ItemStore]:
        """Build the question, FAQ and item stores on the shared database."""
        from faqtory.stores import SQLiteFAQStore, SQLiteItemStore, SQLiteQuestionStore

        return (
            SQLiteQuestionStore(self.db_path),
            SQLiteFAQStore(self.db_path),
            SQLiteItemStore(self.db_path),
        )

    def build_queue(self) -> JobQueue:
        from faqtory.pipeline.queue import JobQueue

        return JobQueue(self.db_path)
