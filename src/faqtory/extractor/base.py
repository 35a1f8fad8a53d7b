# src/faqtory/extractor/base.py
"""QuestionExtractor abstract base class."""

from abc import ABC, abstractmethod

from faqtory.models import ExtractionResult


class QuestionExtractor(ABC):
    """Abstract base class for pulling customer questions out of a message."""

    @abstractmethod
    def extract(self, body: str, subject: str = "") -> ExtractionResult:
        """Extract FAQ-worthy questions from a message body and subject."""
        ...

    async def aextract(self, body: str, subject: str = "") -> ExtractionResult:
        """Extract questions (async).

        Default implementation calls sync extract(). Override in subclasses
        for true async behavior.
        """
        return self.extract(body, subject)
