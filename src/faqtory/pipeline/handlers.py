# src/faqtory/pipeline/handlers.py
"""Item handlers and maintenance jobs run by the pipeline."""

import asyncio
import logging

from faqtory.embedder.base import Embedder
from faqtory.extractor.base import QuestionExtractor
from faqtory.models import Question, WorkItem
from faqtory.pipeline.qualifier import ItemQualifier
from faqtory.stores.base import QuestionStore

logger = logging.getLogger(__name__)


class ExtractionHandler:
    """Turns one work item into stored, embedded questions.

    Items that already have questions are left alone, so re-submitting an
    item never duplicates its questions. Items the qualifier rejects
    complete with zero questions. Embedding failures propagate and fail the
    item.
    """

    def __init__(
        self,
        extractor: QuestionExtractor,
        embedder: Embedder,
        question_store: QuestionStore,
        max_body_chars: int = 8000,
        qualifier: ItemQualifier | None = None,
    ) -> None:
        self.extractor = extractor
        self.embedder = embedder
        self.question_store = question_store
        self.max_body_chars = max_body_chars
        self.qualifier = qualifier

    async def __call__(self, item: WorkItem) -> int:
        if self.question_store.count_for_item(item.id) > 0:
            logger.debug("Item %s already has questions, skipping extraction", item.id)
            return 0

        if self.qualifier is not None:
            verdict = self.qualifier.qualify(item)
            if not verdict.qualifies:
                logger.info("Skipping item %s: %s", item.id, verdict.reason)
                return 0

        body = item.body[: self.max_body_chars]
        result = await self.extractor.aextract(body, item.subject)
        if not result.has_questions:
            return 0

        questions = [
            Question(
                text=q.question,
                answer_text=q.answer,
                confidence_score=q.confidence,
                item_id=item.id,
                source_metadata={
                    k: v
                    for k, v in {
                        "context": q.context,
                        "category": q.category,
                        "sender": item.sender,
                        "subject": item.subject,
                    }.items()
                    if v
                },
            )
            for q in result.questions
        ]
        embedded = await asyncio.to_thread(self.embedder.embed_questions, questions)
        stored = self.question_store.put_many(embedded)
        logger.info("Stored %d questions from item %s", stored, item.id)
        return stored


def backfill_embeddings(
    question_store: QuestionStore,
    embedder: Embedder,
    batch_size: int = 50,
    max_batches: int | None = None,
) -> int:
    """Embed stored questions that have no embedding yet.

    Runs batch after batch until none are missing (or max_batches is hit).
    EmbeddingError propagates so the caller can retry.

    Returns:
        Number of questions updated.
    """
    updated = 0
    batches = 0
    while max_batches is None or batches < max_batches:
        missing = question_store.list_missing_embeddings(batch_size)
        if not missing:
            break
        vectors = embedder.embed_texts([q.text for q in missing])
        for question, vector in zip(missing, vectors, strict=True):
            question_store.set_embedding(question.id, vector)
        updated += len(missing)
        batches += 1
        logger.info("Backfilled embeddings for %d questions", len(missing))
    return updated
