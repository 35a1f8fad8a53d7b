# src/faqtory/stores/sqlite_faq.py
"""SQLite FAQ group store implementation."""

import logging
import math
import sqlite3
from typing import Any

from faqtory.models import FAQGroup, Question, QuestionGroupAssociation
from faqtory.models.faq import normalize_tags
from faqtory.stores.base import FAQStore
from faqtory.stores.sqlite_question import COLUMNS as QUESTION_COLUMNS
from faqtory.stores.sqlite_question import row_to_question
from faqtory.stores.sqlite_schema import from_json, init_schema, iso, now_iso, to_json

logger = logging.getLogger(__name__)

COLUMNS = (
    "id, title, representative_question, consolidated_answer, question_count, "
    "frequency_score, avg_confidence, representative_embedding, is_published, "
    "category, tags, created_at, updated_at"
)

SORTABLE = {
    "frequency_score",
    "question_count",
    "avg_confidence",
    "created_at",
    "updated_at",
    "title",
}

EDITABLE = {
    "title",
    "representative_question",
    "consolidated_answer",
    "is_published",
    "category",
    "tags",
}


def row_to_group(row: tuple[Any, ...]) -> FAQGroup:
    return FAQGroup(
        id=row[0],
        title=row[1],
        representative_question=row[2],
        consolidated_answer=row[3],
        question_count=row[4],
        frequency_score=row[5],
        avg_confidence=row[6],
        representative_embedding=from_json(row[7]),
        is_published=bool(row[8]),
        category=row[9],
        tags=from_json(row[10], []),
        created_at=row[11],
        updated_at=row[12],
    )


def _group_params(group: FAQGroup) -> tuple[Any, ...]:
    return (
        group.title,
        group.representative_question,
        group.consolidated_answer,
        group.question_count,
        group.frequency_score,
        group.avg_confidence,
        to_json(group.representative_embedding),
        int(group.is_published),
        group.category,
        to_json(group.tags),
        iso(group.updated_at),
    )


def _association_params(associations: list[QuestionGroupAssociation]) -> list[tuple[Any, ...]]:
    created = now_iso()
    return [
        (a.question_id, a.group_id, a.similarity_score, int(a.is_representative), created)
        for a in associations
    ]


UPSERT_ASSOCIATION = """
    INSERT INTO question_groups
        (question_id, group_id, similarity_score, is_representative, created_at)
    VALUES (?, ?, ?, ?, ?)
    ON CONFLICT(question_id, group_id) DO UPDATE SET
        similarity_score = excluded.similarity_score,
        is_representative = excluded.is_representative
"""


class SQLiteFAQStore(FAQStore):
    """SQLite-based FAQ group store.

    Group rows and their associations are always written inside one
    transaction: the connection context manager commits on success and
    rolls back if any statement fails.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        init_schema(db_path)

    def create_group(
        self, group: FAQGroup, associations: list[QuestionGroupAssociation]
    ) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO faq_groups (
                    id, title, representative_question, consolidated_answer,
                    question_count, frequency_score, avg_confidence,
                    representative_embedding, is_published, category, tags,
                    updated_at, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (group.id, *_group_params(group), iso(group.created_at)),
            )
            conn.executemany(UPSERT_ASSOCIATION, _association_params(associations))

    def save_group(
        self,
        group: FAQGroup,
        associations: list[QuestionGroupAssociation],
        replace_associations: bool = False,
    ) -> None:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                """
                UPDATE faq_groups SET
                    title = ?, representative_question = ?, consolidated_answer = ?,
                    question_count = ?, frequency_score = ?, avg_confidence = ?,
                    representative_embedding = ?, is_published = ?, category = ?,
                    tags = ?, updated_at = ?
                WHERE id = ?
                """,
                (*_group_params(group), group.id),
            )
            if cursor.rowcount == 0:
                raise KeyError(f"FAQ group not found: {group.id}")
            if replace_associations:
                conn.execute("DELETE FROM question_groups WHERE group_id = ?", (group.id,))
            conn.executemany(UPSERT_ASSOCIATION, _association_params(associations))

    def get(self, group_id: str) -> FAQGroup | None:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM faq_groups WHERE id = ?", (group_id,)
            ).fetchone()
            return row_to_group(row) if row else None

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
        if sort_by not in SORTABLE:
            raise ValueError(f"Cannot sort by '{sort_by}'. Choose from: {sorted(SORTABLE)}")

        clauses: list[str] = []
        params: list[Any] = []
        if category is not None:
            clauses.append("category = ?")
            params.append(category)
        if published is not None:
            clauses.append("is_published = ?")
            params.append(int(published))
        if search:
            clauses.append(
                "(title LIKE ? OR representative_question LIKE ? OR consolidated_answer LIKE ?)"
            )
            params.extend([f"%{search}%"] * 3)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        order = "DESC" if descending else "ASC"
        offset = (max(page, 1) - 1) * limit

        with sqlite3.connect(self.db_path) as conn:
            total = conn.execute(f"SELECT COUNT(id) FROM faq_groups {where}", params).fetchone()[0]
            rows = conn.execute(
                f"SELECT {COLUMNS} FROM faq_groups {where} "
                f"ORDER BY {sort_by} {order}, id LIMIT ? OFFSET ?",
                [*params, limit, offset],
            ).fetchall()
        return [row_to_group(row) for row in rows], total

    def list_published(self) -> list[FAQGroup]:
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT {COLUMNS} FROM faq_groups "
                "WHERE is_published = 1 AND representative_embedding IS NOT NULL"
            ).fetchall()
        return [row_to_group(row) for row in rows]

    def find_group_for_questions(self, question_ids: list[str]) -> FAQGroup | None:
        if not question_ids:
            return None
        placeholders = ",".join("?" * len(question_ids))
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                f"""
                SELECT group_id, COUNT(*) AS overlap FROM question_groups
                WHERE question_id IN ({placeholders})
                GROUP BY group_id
                ORDER BY overlap DESC, group_id
                LIMIT 1
                """,
                question_ids,
            ).fetchone()
        return self.get(row[0]) if row else None

    def grouped_question_ids(self, question_ids: list[str]) -> dict[str, str]:
        if not question_ids:
            return {}
        placeholders = ",".join("?" * len(question_ids))
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT question_id, group_id FROM question_groups "
                f"WHERE question_id IN ({placeholders})",
                question_ids,
            ).fetchall()
        return {row[0]: row[1] for row in rows}

    def get_associations(self, group_id: str) -> list[QuestionGroupAssociation]:
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT question_id, group_id, similarity_score, is_representative
                FROM question_groups WHERE group_id = ?
                ORDER BY is_representative DESC, created_at, question_id
                """,
                (group_id,),
            ).fetchall()
        return [
            QuestionGroupAssociation(
                question_id=row[0],
                group_id=row[1],
                similarity_score=row[2],
                is_representative=bool(row[3]),
            )
            for row in rows
        ]

    def get_member_questions(self, group_id: str) -> list[Question]:
        columns = ", ".join(f"q.{c.strip()}" for c in QUESTION_COLUMNS.split(","))
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                f"""
                SELECT {columns} FROM questions q
                JOIN question_groups qg ON qg.question_id = q.id
                WHERE qg.group_id = ?
                ORDER BY qg.is_representative DESC, qg.created_at, q.id
                """,
                (group_id,),
            ).fetchall()
        return [row_to_question(row) for row in rows]

    def update_fields(self, group_id: str, **fields: Any) -> FAQGroup | None:
        """Apply an administrative edit.

        Raises:
            ValueError: If a field is not editable.
        """
        unknown = set(fields) - EDITABLE
        if unknown:
            raise ValueError(f"Fields not editable: {sorted(unknown)}")
        if not fields:
            return self.get(group_id)

        values: dict[str, Any] = dict(fields)
        if "tags" in values:
            # Normalize through the model so tags keep set semantics
            values["tags"] = to_json(normalize_tags(values["tags"]))
        if "is_published" in values:
            values["is_published"] = int(bool(values["is_published"]))

        assignments = ", ".join(f"{name} = ?" for name in values)
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                f"UPDATE faq_groups SET {assignments}, updated_at = ? WHERE id = ?",
                [*values.values(), now_iso(), group_id],
            )
            if cursor.rowcount == 0:
                return None
        return self.get(group_id)

    def delete(self, group_id: str) -> bool:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM question_groups WHERE group_id = ?", (group_id,))
            cursor = conn.execute("DELETE FROM faq_groups WHERE id = ?", (group_id,))
            return cursor.rowcount > 0

    def update_statistics(self) -> int:
        """Recompute count, average confidence and frequency score for every group.

        Only rows whose stored values differ are written, so repeated calls
        leave the table unchanged.
        """
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT g.id, g.question_count, g.avg_confidence, g.frequency_score,
                       COUNT(q.id), COALESCE(AVG(q.confidence_score), 0)
                FROM faq_groups g
                LEFT JOIN question_groups qg ON qg.group_id = g.id
                LEFT JOIN questions q ON q.id = qg.question_id
                GROUP BY g.id
                """
            ).fetchall()

            changes = []
            for group_id, count, avg, freq, actual_count, actual_avg in rows:
                actual_freq = actual_count * actual_avg
                if (
                    count != actual_count
                    or not math.isclose(avg, actual_avg, abs_tol=1e-9)
                    or not math.isclose(freq, actual_freq, abs_tol=1e-9)
                ):
                    changes.append((actual_count, actual_avg, actual_freq, now_iso(), group_id))

            conn.executemany(
                """
                UPDATE faq_groups
                SET question_count = ?, avg_confidence = ?, frequency_score = ?, updated_at = ?
                WHERE id = ?
                """,
                changes,
            )

        if changes:
            logger.info("Reconciled statistics for %d FAQ groups", len(changes))
        return len(changes)

    def stats(self) -> dict[str, Any]:
        with sqlite3.connect(self.db_path) as conn:
            total, published, questions, avg_size = conn.execute(
                """
                SELECT COUNT(id), COALESCE(SUM(is_published), 0),
                       COALESCE(SUM(question_count), 0), COALESCE(AVG(question_count), 0)
                FROM faq_groups
                """
            ).fetchone()
            categories = dict(
                conn.execute(
                    "SELECT COALESCE(category, 'Uncategorized'), COUNT(id) "
                    "FROM faq_groups GROUP BY category ORDER BY COUNT(id) DESC"
                ).fetchall()
            )
        return {
            "total_groups": total,
            "published_groups": published,
            "grouped_questions": questions,
            "avg_group_size": round(avg_size, 2),
            "categories": categories,
        }
