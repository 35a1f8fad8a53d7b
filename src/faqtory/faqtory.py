# src/faqtory/faqtory.py
"""Central configuration class for faqtory."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

if TYPE_CHECKING:
    from faqtory.assembly import FAQAssembler, FAQBuilder, FAQSearcher
    from faqtory.configuration import ProviderConfig, StorageConfig
    from faqtory.models import FAQSearchResult, GenerationSummary, ProcessingSummary, WorkItem
    from faqtory.pipeline import BatchProcessor, EventCallback, ExtractionHandler, JobQueue
    from faqtory.stores import FAQStore, ItemStore, QuestionStore

from faqtory.settings import ProcessorConfig, Settings


class Faqtory:
    """Central configuration for faqtory stores and components.

    Faqtory bundles the stores and AI components together so you can
    configure once and create builders, processors and searchers from it.

    There are two ways to create a Faqtory instance:

    1. With a storage bundle (developer-friendly):

        from faqtory import Faqtory, LiteLLMProvider, LocalStorage

        faqtory = Faqtory(
            provider=LiteLLMProvider(
                llm="openai/gpt-5-mini",
                embedding="openai/text-embedding-3-small",
            ),
            storage=LocalStorage("./data"),
        )
        summary = faqtory.generate_faqs()

    2. With explicit stores:

        from faqtory.stores import SQLiteFAQStore, SQLiteItemStore, SQLiteQuestionStore

        faqtory = Faqtory.from_stores(
            provider=LiteLLMProvider(...),
            question_store=SQLiteQuestionStore("./data/faqtory.db"),
            faq_store=SQLiteFAQStore("./data/faqtory.db"),
            item_store=SQLiteItemStore("./data/faqtory.db"),
        )
    """

    def __init__(
        self,
        *,
        provider: ProviderConfig,
        # EITHER storage bundle...
        storage: StorageConfig | None = None,
        # ...OR explicit stores
        question_store: QuestionStore | None = None,
        faq_store: FAQStore | None = None,
        item_store: ItemStore | None = None,
        job_queue: JobQueue | None = None,
        # Common
        settings: Settings | None = None,
        processor_config: ProcessorConfig | None = None,
    ) -> None:
        """Create a Faqtory instance.

        Args:
            provider: Provider configuration (builds embedder, text generator, extractor).
            storage: Storage bundle (convenience). Mutually exclusive with explicit stores.
            question_store: Explicit question store. Use with the other explicit stores.
            faq_store: Explicit FAQ store.
            item_store: Explicit work item store.
            job_queue: Optional job queue for the explicit-stores path.
            settings: Clustering and assembly settings.
            processor_config: Batch processing settings.

        Raises:
            ValueError: If neither storage bundle nor all explicit stores are provided,
                       or if both are provided.
        """
        self.settings = settings if settings is not None else Settings()
        self.processor_config = (
            processor_config if processor_config is not None else ProcessorConfig()
        )

        # Path 1: Storage bundle (convenience)
        if storage is not None:
            if any([question_store, faq_store, item_store, job_queue]):
                raise ValueError("Cannot mix 'storage' bundle with explicit stores")
            self.question_store, self.faq_store, self.item_store = storage.build_stores()
            self._job_queue: JobQueue | None = storage.build_queue()

        # Path 2: Explicit stores
        elif all([question_store, faq_store, item_store]):
            self.question_store = cast("QuestionStore", question_store)
            self.faq_store = cast("FAQStore", faq_store)
            self.item_store = cast("ItemStore", item_store)
            self._job_queue = job_queue

        else:
            raise ValueError(
                "Must provide either 'storage' bundle or all explicit stores "
                "(question_store, faq_store, item_store)"
            )

        self.embedder = provider.build_embedder(self.settings)
        self.text_generator = provider.build_text_generator(self.settings)
        self.extractor = provider.build_extractor(self.settings)

    @classmethod
    def from_stores(
        cls,
        *,
        provider: ProviderConfig,
        question_store: QuestionStore,
        faq_store: FAQStore,
        item_store: ItemStore,
        job_queue: JobQueue | None = None,
        settings: Settings | None = None,
        processor_config: ProcessorConfig | None = None,
    ) -> Faqtory:
        """Create Faqtory with explicit stores."""
        return cls(
            provider=provider,
            question_store=question_store,
            faq_store=faq_store,
            item_store=item_store,
            job_queue=job_queue,
            settings=settings,
            processor_config=processor_config,
        )

    def assembler(self) -> FAQAssembler:
        from faqtory.assembly import FAQAssembler

        return FAQAssembler(
            question_store=self.question_store,
            faq_store=self.faq_store,
            embedder=self.embedder,
            generator=self.text_generator,
            settings=self.settings,
        )

    def builder(self) -> FAQBuilder:
        from faqtory.assembly import FAQBuilder

        return FAQBuilder(
            question_store=self.question_store,
            faq_store=self.faq_store,
            assembler=self.assembler(),
            settings=self.settings,
        )

    def searcher(self) -> FAQSearcher:
        from faqtory.assembly import FAQSearcher

        return FAQSearcher(
            faq_store=self.faq_store,
            embedder=self.embedder,
            min_similarity=self.settings.search_min_similarity,
        )

    def processor(self, config: ProcessorConfig | None = None) -> BatchProcessor:
        """Create a BatchProcessor that records item status in the item store."""
        from faqtory.pipeline import BatchProcessor

        return BatchProcessor(config or self.processor_config, item_store=self.item_store)

    def extraction_handler(self) -> ExtractionHandler:
        from faqtory.pipeline import ExtractionHandler, ItemQualifier

        return ExtractionHandler(
            extractor=self.extractor,
            embedder=self.embedder,
            question_store=self.question_store,
            max_body_chars=self.processor_config.max_body_chars,
            qualifier=ItemQualifier(
                self.settings.internal_senders, min_quality=self.settings.min_item_quality
            ),
        )

    def queue(self) -> JobQueue:
        """The job queue, with every lane handler registered.

        Raises:
            ValueError: If this instance was built from explicit stores without a queue.
        """
        if self._job_queue is None:
            raise ValueError("No job queue configured; pass job_queue or use a storage bundle")
        from faqtory.pipeline.lanes import register_lanes

        register_lanes(self._job_queue, self)
        return self._job_queue

    def submit_items(self, items: list[WorkItem]) -> int:
        """Store new work items for extraction. Returns how many were new."""
        return self.item_store.put_many(items)

    def generate_faqs(
        self,
        *,
        min_question_count: int | None = None,
        max_faqs: int | None = None,
        similarity_threshold: float | None = None,
        force_regenerate: bool = False,
    ) -> GenerationSummary:
        """Run one FAQ generation pass over the stored questions."""
        return self.builder().generate_faqs(
            min_question_count=min_question_count,
            max_faqs=max_faqs,
            similarity_threshold=similarity_threshold,
            force_regenerate=force_regenerate,
        )

    async def process_pending(
        self,
        *,
        limit: int | None = None,
        on_event: EventCallback | None = None,
        job_id: str | None = None,
        config: ProcessorConfig | None = None,
    ) -> ProcessingSummary:
        """Extract questions from pending work items."""
        items = self.item_store.list_pending(limit)
        return await self.processor(config).process_items(
            items, self.extraction_handler(), on_event=on_event, job_id=job_id
        )

    def backfill_embeddings(self, batch_size: int = 50, max_batches: int | None = None) -> int:
        """Embed stored questions that are missing an embedding."""
        from faqtory.pipeline import backfill_embeddings

        return backfill_embeddings(
            self.question_store, self.embedder, batch_size=batch_size, max_batches=max_batches
        )

    def search(
        self, text: str, limit: int = 10, min_similarity: float | None = None
    ) -> list[FAQSearchResult]:
        """Find published FAQs similar to the given text."""
        return self.searcher().search(text, limit=limit, min_similarity=min_similarity)
