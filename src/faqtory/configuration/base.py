# src/faqtory/configuration/base.py
"""Protocol definitions for configuration objects.

Provider and storage configurations are structural: any frozen dataclass
with the right build methods satisfies them, no inheritance needed. Stores,
by contrast, are ABCs in faqtory.stores.base.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from faqtory.embedder import Embedder
    from faqtory.extractor import QuestionExtractor
    from faqtory.generator import TextGenerator
    from faqtory.pipeline.queue import JobQueue
    from faqtory.providers import LLMClient
    from faqtory.settings import Settings
    from faqtory.stores import FAQStore, ItemStore, QuestionStore


@runtime_checkable
class ProviderConfig(Protocol):
    """Protocol for provider configurations.

    Provider configurations build the AI components:
    - Embedder: the similarity provider
    - TextGenerator: consolidates answers, categorizes, tags, rewrites
    - QuestionExtractor: pulls questions out of work items

    Example implementation:
        @dataclass(frozen=True)
        class LiteLLMProvider:
            llm: str
            embedding: str

            def build_embedder(self, settings: Settings) -> Embedder: ...
            def build_text_generator(self, settings: Settings) -> TextGenerator: ...
            def build_extractor(self, settings: Settings) -> QuestionExtractor: ...
    """

    def build_embedder(self, settings: Settings) -> Embedder:
        """Build an embedder (cache size and retries come from settings)."""
        ...

    def build_text_generator(self, settings: Settings) -> TextGenerator:
        """Build the text-generation collaborator used by FAQ assembly."""
        ...

    def build_extractor(self, settings: Settings) -> QuestionExtractor:
        """Build a question extractor honoring the question filters in settings."""
        ...

    def build_llm_client(self, settings: Settings | None = None) -> LLMClient:
        """Build an LLM client for general-purpose completions."""
        ...


@runtime_checkable
class StorageConfig(Protocol):
    """Protocol for storage configurations.

    Example implementation:
        @dataclass(frozen=True)
        class LocalStorage:
            data_dir: str

            def build_stores(self) -> tuple[QuestionStore, FAQStore, ItemStore]: ...
            def build_queue(self) -> JobQueue: ...
    """

    def build_stores(self) -> tuple[QuestionStore, FAQStore, ItemStore]:
        """Build the question, FAQ and item stores.

        Returns:
            Tuple of (question_store, faq_store, item_store)
        """
        ...

    def build_queue(self) -> JobQueue:
        """Build the persistent job queue."""
        ...
