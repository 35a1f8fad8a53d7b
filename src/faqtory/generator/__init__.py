"""Text generation collaborator for FAQ assembly."""

from faqtory.generator.base import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    FALLBACK_ANSWER,
    TextGenerator,
    fallback_answer,
)
from faqtory.generator.client import ClientTextGenerator

__all__ = [
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "FALLBACK_ANSWER",
    "ClientTextGenerator",
    "TextGenerator",
    "fallback_answer",
]
