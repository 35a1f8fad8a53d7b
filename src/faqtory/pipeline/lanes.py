# src/faqtory/pipeline/lanes.py
"""Lane handlers that chain ingestion, extraction and FAQ generation."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

from faqtory.models import WorkItem
from faqtory.pipeline.queue import JobContext, JobQueue, Lane

if TYPE_CHECKING:
    from faqtory.faqtory import Faqtory

logger = logging.getLogger(__name__)

# Seconds before a downstream job becomes due, so the upstream writes are visible
EXTRACTION_DELAY = 1.0
FAQ_GENERATION_DELAY = 5.0


class ItemSource(Protocol):
    """Fetches new work items for an ingestion job (e.g. a mailbox sync)."""

    def fetch(self, payload: dict[str, Any]) -> list[WorkItem]: ...


class PayloadItemSource:
    """Reads work items embedded in the job payload under "items"."""

    def fetch(self, payload: dict[str, Any]) -> list[WorkItem]:
        return [WorkItem.model_validate(raw) for raw in payload.get("items", [])]


def register_lanes(
    queue: JobQueue,
    faqtory: Faqtory,
    item_source: ItemSource | None = None,
) -> None:
    """Register a handler for every lane of the queue.

    Handlers run inside a Celery task, so they are synchronous; the
    extraction lane drives the async batch processor to completion.
    """
    source = item_source or PayloadItemSource()

    def ingestion(ctx: JobContext) -> dict[str, Any]:
        ctx.progress(10)
        items = source.fetch(ctx.payload)
        stored = faqtory.submit_items(items)
        ctx.progress(80)
        logger.info("Ingestion job %s stored %d new items", ctx.job_id, stored)
        if stored > 0:
            ctx.enqueue(
                Lane.EXTRACTION,
                {"source_job": ctx.job_id, "item_count": stored},
                delay=EXTRACTION_DELAY,
            )
        return {"fetched": len(items), "stored": stored}

    def extraction(ctx: JobContext) -> dict[str, Any]:
        def on_event(event: Any) -> None:
            if event.type == "progress" and event.total:
                ctx.progress(int(event.processed / event.total * 80))

        job_id = ctx.job_id
        summary = asyncio.run(
            faqtory.process_pending(
                limit=ctx.payload.get("limit", 100), on_event=on_event, job_id=job_id
            )
        )
        ctx.progress(90)
        if summary.processed > 0:
            ctx.enqueue(
                Lane.FAQ_GENERATION,
                {"source_job": job_id, "questions_found": summary.questions_found},
                delay=FAQ_GENERATION_DELAY,
            )
        return summary.model_dump(mode="json", exclude={"results"})

    def faq_generation(ctx: JobContext) -> dict[str, Any]:
        ctx.progress(20)
        payload = ctx.payload
        summary = faqtory.generate_faqs(
            min_question_count=payload.get("min_question_count"),
            max_faqs=payload.get("max_faqs"),
            similarity_threshold=payload.get("similarity_threshold"),
            force_regenerate=bool(payload.get("force_regenerate", False)),
        )
        return summary.model_dump(mode="json")

    def embedding_backfill(ctx: JobContext) -> dict[str, Any]:
        return {"updated": faqtory.backfill_embeddings(ctx.payload.get("batch_size", 50))}

    queue.register(Lane.INGESTION, ingestion)
    queue.register(Lane.EXTRACTION, extraction)
    queue.register(Lane.FAQ_GENERATION, faq_generation)
    queue.register(Lane.EMBEDDING_BACKFILL, embedding_backfill)
