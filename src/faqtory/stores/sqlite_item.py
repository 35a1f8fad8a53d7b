# src/faqtory/stores/sqlite_item.py
"""SQLite work item store implementation."""

import sqlite3
from typing import Any

from faqtory.models import ItemStatus, WorkItem
from faqtory.stores.base import ItemStore
from faqtory.stores.sqlite_schema import from_json, init_schema, iso, now_iso, to_json

COLUMNS = (
    "id, subject, body, sender, status, error, questions_found, "
    "source_metadata, created_at, processed_at"
)


def row_to_item(row: tuple[Any, ...]) -> WorkItem:
    return WorkItem(
        id=row[0],
        subject=row[1],
        body=row[2],
        sender=row[3],
        status=ItemStatus(row[4]),
        error=row[5],
        questions_found=row[6],
        source_metadata=from_json(row[7], {}),
        created_at=row[8],
        processed_at=row[9],
    )


class SQLiteItemStore(ItemStore):
    """SQLite-based work item store."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        init_schema(db_path)

    def put_many(self, items: list[WorkItem]) -> int:
        if not items:
            return 0
        with sqlite3.connect(self.db_path) as conn:
            before = conn.total_changes
            conn.executemany(
                f"INSERT OR IGNORE INTO items ({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    (
                        item.id,
                        item.subject,
                        item.body,
                        item.sender,
                        item.status.value,
                        item.error,
                        item.questions_found,
                        to_json(item.source_metadata),
                        iso(item.created_at),
                        iso(item.processed_at) if item.processed_at else None,
                    )
                    for item in items
                ],
            )
            return conn.total_changes - before

    def get(self, item_id: str) -> WorkItem | None:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(f"SELECT {COLUMNS} FROM items WHERE id = ?", (item_id,)).fetchone()
            return row_to_item(row) if row else None

    def list_pending(self, limit: int | None = None) -> list[WorkItem]:
        query = f"SELECT {COLUMNS} FROM items WHERE status = ? ORDER BY created_at"
        params: list[Any] = [ItemStatus.PENDING.value]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        with sqlite3.connect(self.db_path) as conn:
            return [row_to_item(row) for row in conn.execute(query, params).fetchall()]

    def mark(
        self,
        item_id: str,
        status: ItemStatus,
        error: str | None = None,
        questions_found: int | None = None,
    ) -> bool:
        """Move an item to a new status.

        Completed and failed are terminal: the update only applies while the
        item is pending or processing.
        """
        processed_at = now_iso() if status.is_terminal else None
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                """
                UPDATE items
                SET status = ?,
                    error = ?,
                    questions_found = COALESCE(?, questions_found),
                    processed_at = COALESCE(?, processed_at)
                WHERE id = ? AND status IN ('pending', 'processing')
                """,
                (status.value, error, questions_found, processed_at, item_id),
            )
            return cursor.rowcount > 0

    def count_by_status(self) -> dict[str, int]:
        counts = {status.value: 0 for status in ItemStatus}
        with sqlite3.connect(self.db_path) as conn:
            for status, count in conn.execute(
                "SELECT status, COUNT(id) FROM items GROUP BY status"
            ).fetchall():
                counts[status] = count
        return counts
