# src/faqtory/stores/sqlite_schema.py
"""Shared SQLite schema.

All SQLite stores live in one database file, next to the job queue's broker
and result tables, so the store tables are created together regardless of
which store is opened first.
"""

import json
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

SCHEMA = """
CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    subject TEXT NOT NULL DEFAULT '',
    body TEXT NOT NULL DEFAULT '',
    sender TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    error TEXT,
    questions_found INTEGER NOT NULL DEFAULT 0,
    source_metadata TEXT NOT NULL DEFAULT '{}',
    created_at TEXT NOT NULL,
    processed_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_items_status ON items(status);

CREATE TABLE IF NOT EXISTS questions (
    id TEXT PRIMARY KEY,
    text TEXT NOT NULL,
    answer_text TEXT,
    confidence_score REAL NOT NULL DEFAULT 0.5,
    embedding TEXT,
    item_id TEXT,
    source_metadata TEXT NOT NULL DEFAULT '{}',
    created_at TEXT NOT NULL,
    UNIQUE (item_id, text)
);
CREATE INDEX IF NOT EXISTS idx_questions_item ON questions(item_id);
CREATE INDEX IF NOT EXISTS idx_questions_confidence ON questions(confidence_score);

CREATE TABLE IF NOT EXISTS faq_groups (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    representative_question TEXT NOT NULL,
    consolidated_answer TEXT NOT NULL,
    question_count INTEGER NOT NULL DEFAULT 0,
    frequency_score REAL NOT NULL DEFAULT 0,
    avg_confidence REAL NOT NULL DEFAULT 0,
    representative_embedding TEXT,
    is_published INTEGER NOT NULL DEFAULT 0,
    category TEXT,
    tags TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_faq_groups_published ON faq_groups(is_published);
CREATE INDEX IF NOT EXISTS idx_faq_groups_category ON faq_groups(category);

CREATE TABLE IF NOT EXISTS question_groups (
    question_id TEXT NOT NULL REFERENCES questions(id),
    group_id TEXT NOT NULL REFERENCES faq_groups(id),
    similarity_score REAL NOT NULL,
    is_representative INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    PRIMARY KEY (question_id, group_id)
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_question_groups_question ON question_groups(question_id);
CREATE INDEX IF NOT EXISTS idx_question_groups_group ON question_groups(group_id);
"""


def init_schema(db_path: str) -> None:
    """Create the database file and every table if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.executescript(SCHEMA)


def iso(value: datetime) -> str:
    """Fixed-width ISO timestamp so stored values sort as text."""
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def now_iso() -> str:
    return iso(datetime.now(UTC))


def to_json(value: object) -> str | None:
    return None if value is None else json.dumps(value)


def from_json(value: str | None, default: object = None) -> object:
    return default if value is None else json.loads(value)
