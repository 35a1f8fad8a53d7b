"""Question extraction from incoming messages."""

from faqtory.extractor.base import QuestionExtractor
from faqtory.extractor.client import ClientQuestionExtractor

__all__ = ["ClientQuestionExtractor", "QuestionExtractor"]
