# src/faqtory/stores/sqlite_question.py
"""SQLite question store implementation."""

import sqlite3
from typing import Any

from faqtory.models import Question
from faqtory.stores.base import QuestionStore
from faqtory.stores.sqlite_schema import from_json, init_schema, iso, to_json

COLUMNS = (
    "id, text, answer_text, confidence_score, embedding, item_id, source_metadata, created_at"
)


def row_to_question(row: tuple[Any, ...]) -> Question:
    return Question(
        id=row[0],
        text=row[1],
        answer_text=row[2],
        confidence_score=row[3],
        embedding=from_json(row[4]),
        item_id=row[5],
        source_metadata=from_json(row[6], {}),
        created_at=row[7],
    )


class SQLiteQuestionStore(QuestionStore):
    """SQLite-based question store."""

    def __init__(self, db_path: str) -> None:
        """Initialize the SQLite question store."""
        self.db_path = db_path
        init_schema(db_path)

    def put_many(self, questions: list[Question]) -> int:
        """Store questions. A repeated (item_id, text) pair is ignored."""
        if not questions:
            return 0
        with sqlite3.connect(self.db_path) as conn:
            before = conn.total_changes
            conn.executemany(
                f"INSERT OR IGNORE INTO questions ({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    (
                        q.id,
                        q.text,
                        q.answer_text,
                        q.confidence_score,
                        to_json(q.embedding),
                        q.item_id,
                        to_json(q.source_metadata),
                        iso(q.created_at),
                    )
                    for q in questions
                ],
            )
            return conn.total_changes - before

    def get(self, question_id: str) -> Question | None:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(f"SELECT {COLUMNS} FROM questions WHERE id = ?", (question_id,))
            row = cursor.fetchone()
            return row_to_question(row) if row else None

    def get_many(self, question_ids: list[str]) -> list[Question]:
        """Retrieve multiple questions by ID, in the order requested."""
        if not question_ids:
            return []
        placeholders = ",".join("?" * len(question_ids))
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                f"SELECT {COLUMNS} FROM questions WHERE id IN ({placeholders})",
                question_ids,
            )
            by_id = {row[0]: row_to_question(row) for row in cursor.fetchall()}
        return [by_id[qid] for qid in dict.fromkeys(question_ids) if qid in by_id]

    def get_embeddings(self, question_ids: list[str]) -> dict[str, list[float]]:
        if not question_ids:
            return {}
        placeholders = ",".join("?" * len(question_ids))
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                f"SELECT id, embedding FROM questions "
                f"WHERE id IN ({placeholders}) AND embedding IS NOT NULL",
                question_ids,
            )
            return {row[0]: from_json(row[1]) for row in cursor.fetchall()}

    def list_for_generation(self, min_confidence: float, limit: int) -> list[Question]:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                f"SELECT {COLUMNS} FROM questions "
                "WHERE embedding IS NOT NULL AND confidence_score >= ? "
                "ORDER BY id IN (SELECT question_id FROM question_groups), "
                "confidence_score DESC, created_at DESC LIMIT ?",
                (min_confidence, limit),
            )
            return [row_to_question(row) for row in cursor.fetchall()]

    def list_missing_embeddings(self, limit: int) -> list[Question]:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                f"SELECT {COLUMNS} FROM questions WHERE embedding IS NULL "
                "ORDER BY created_at LIMIT ?",
                (limit,),
            )
            return [row_to_question(row) for row in cursor.fetchall()]

    def set_embedding(self, question_id: str, embedding: list[float]) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "UPDATE questions SET embedding = ? WHERE id = ?",
                (to_json(embedding), question_id),
            )

    def count(self) -> int:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("SELECT COUNT(id) FROM questions").fetchone()
            return row[0] if row else 0

    def count_for_item(self, item_id: str) -> int:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT COUNT(id) FROM questions WHERE item_id = ?", (item_id,)
            ).fetchone()
            return row[0] if row else 0
