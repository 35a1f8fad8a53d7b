# src/faqtory/generator/base.py
"""TextGenerator abstract base class."""

from abc import ABC, abstractmethod

DEFAULT_CATEGORY = "General Inquiry"
FALLBACK_ANSWER = "Please contact support for assistance with this question."

CATEGORIES = (
    "Account & Billing",
    "Technical Support",
    "Product Information",
    "Shipping & Delivery",
    "Returns & Refunds",
    "General Inquiry",
    "Other",
)


class TextGenerator(ABC):
    """Text-generation collaborator used while assembling FAQs.

    Every operation is best-effort: implementations return a deterministic
    default instead of raising when the underlying model fails.
    """

    @abstractmethod
    def consolidate(self, questions: list[str], answers: list[str]) -> str:
        """Write one answer that covers all the given questions."""
        ...

    @abstractmethod
    def categorize(self, text: str) -> str:
        """Pick a topic category for a question."""
        ...

    @abstractmethod
    def extract_tags(self, text: str) -> list[str]:
        """Extract a few search tags from a question."""
        ...

    @abstractmethod
    def improve(self, text: str, context: str = "") -> str:
        """Rewrite a question so it reads well as a FAQ entry."""
        ...


def fallback_answer(answers: list[str]) -> str:
    """First non-empty answer, or the fixed support message."""
    for answer in answers:
        if answer and answer.strip():
            return answer.strip()
    return FALLBACK_ANSWER
