# src/faqtory/configuration/providers/litellm.py
"""LiteLLM provider configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from faqtory.embedder import Embedder
    from faqtory.extractor import QuestionExtractor
    from faqtory.generator import TextGenerator
    from faqtory.providers import LLMClient
    from faqtory.settings import Settings


@dataclass(frozen=True)
class LiteLLMProvider:
    """Provider configuration using LiteLLM for LLM and embedding calls.

    Args:
        llm: LiteLLM model identifier for text generation and extraction.
             Examples: "openai/gpt-5-mini", "anthropic/claude-haiku-4-5-20251001"
        embedding: LiteLLM model identifier for embeddings.
                   Examples: "openai/text-embedding-3-small"

    Example:
        provider = LiteLLMProvider(
            llm="openai/gpt-5-mini",
            embedding="openai/text-embedding-3-small",
        )
    """

    llm: str
    embedding: str

    def build_embedder(self, settings: Settings) -> Embedder:
        """Build a caching ClientEmbedder over a LiteLLM embedding client."""
        from faqtory.embedder import ClientEmbedder
        from faqtory.providers.litellm import LiteLLMEmbeddingClient

        embedding_client = LiteLLMEmbeddingClient(
            model=self.embedding,
            num_retries=settings.num_retries,
        )
        return ClientEmbedder(
            embedding_client=embedding_client,
            cache_size=settings.embedding_cache_size,
        )

    def build_text_generator(self, settings: Settings) -> TextGenerator:
        from faqtory.generator import ClientTextGenerator

        return ClientTextGenerator(llm_client=self.build_llm_client(settings))

    def build_extractor(self, settings: Settings) -> QuestionExtractor:
        from faqtory.extractor import ClientQuestionExtractor

        return ClientQuestionExtractor(
            llm_client=self.build_llm_client(settings),
            min_confidence=settings.question_confidence_threshold,
            min_length=settings.min_question_length,
            max_length=settings.max_question_length,
        )

    def build_llm_client(self, settings: Settings | None = None) -> LLMClient:
        """Build a LiteLLMClient for general-purpose LLM calls.

        Args:
            settings: Optional settings containing num_retries. If None,
                     uses default retry value.
        """
        from faqtory.providers.litellm import LiteLLMClient

        num_retries = settings.num_retries if settings else 3
        return LiteLLMClient(model=self.llm, num_retries=num_retries)
