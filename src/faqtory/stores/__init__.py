"""Storage abstractions for faqtory."""

from faqtory.stores.base import FAQStore, ItemStore, QuestionStore
from faqtory.stores.sqlite_faq import SQLiteFAQStore
from faqtory.stores.sqlite_item import SQLiteItemStore
from faqtory.stores.sqlite_question import SQLiteQuestionStore
from faqtory.stores.sqlite_schema import init_schema

__all__ = [
    "FAQStore",
    "ItemStore",
    "QuestionStore",
    "SQLiteFAQStore",
    "SQLiteItemStore",
    "SQLiteQuestionStore",
    "init_schema",
]
