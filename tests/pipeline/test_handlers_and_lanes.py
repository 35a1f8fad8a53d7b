# tests/pipeline/test_handlers_and_lanes.py
"""Tests for the extraction handler, embedding backfill and lane chaining."""

import pytest
from fakes import KeywordEmbedder

from faqtory.exceptions import EmbeddingError
from faqtory.models import ItemStatus, Question, WorkItem
from faqtory.pipeline import (
    ExtractionHandler,
    ItemQualifier,
    JobStatus,
    Lane,
    backfill_embeddings,
)
from faqtory.pipeline.lanes import PayloadItemSource


@pytest.fixture
def handler(question_store, mock_extractor, mock_embedder):
    return ExtractionHandler(mock_extractor, mock_embedder, question_store)


class TestExtractionHandler:
    @pytest.mark.asyncio
    async def test_stores_embedded_questions(self, handler, question_store):
        item = WorkItem(
            subject="Login",
            sender="a@example.com",
            body="Hi team\nHow do I reset my password?\nWhere is my invoice?",
        )

        found = await handler(item)

        assert found == 2
        assert question_store.count_for_item(item.id) == 2
        stored = question_store.list_for_generation(0.0, 10)
        assert all(q.has_embedding for q in stored)
        assert all(q.item_id == item.id for q in stored)
        assert stored[0].source_metadata["sender"] == "a@example.com"

    @pytest.mark.asyncio
    async def test_item_without_questions(self, handler, question_store):
        assert await handler(WorkItem(body="Thanks for the update.")) == 0
        assert question_store.count() == 0

    @pytest.mark.asyncio
    async def test_resubmitted_item_is_not_duplicated(self, handler, question_store):
        item = WorkItem(body="How do I reset my password?")
        await handler(item)

        assert await handler(item) == 0
        assert question_store.count() == 1

    @pytest.mark.asyncio
    async def test_body_is_truncated(self, question_store, mock_extractor, mock_embedder):
        handler = ExtractionHandler(
            mock_extractor, mock_embedder, question_store, max_body_chars=10
        )
        item = WorkItem(body="No question here\nHow do I reset my password?")
        assert await handler(item) == 0

    @pytest.mark.asyncio
    async def test_unqualified_item_yields_no_questions(
        self, question_store, mock_extractor, mock_embedder
    ):
        handler = ExtractionHandler(
            mock_extractor, mock_embedder, question_store, qualifier=ItemQualifier()
        )
        item = WorkItem(sender="noreply@shop.com", body="How do I reset my password?")

        assert await handler(item) == 0
        assert question_store.count() == 0
        assert mock_embedder.calls == []

    @pytest.mark.asyncio
    async def test_embedding_failure_propagates(self, question_store, mock_extractor):
        handler = ExtractionHandler(mock_extractor, KeywordEmbedder(fail=True), question_store)
        with pytest.raises(EmbeddingError):
            await handler(WorkItem(body="How do I reset my password?"))
        assert question_store.count() == 0


class TestBackfillEmbeddings:
    def test_embeds_missing_questions(self, question_store, mock_embedder):
        question_store.put_many([Question(text=f"Password question {i}?") for i in range(5)])

        updated = backfill_embeddings(question_store, mock_embedder, batch_size=2)

        assert updated == 5
        assert question_store.list_missing_embeddings(10) == []
        assert [len(call) for call in mock_embedder.calls] == [2, 2, 1]

    def test_max_batches(self, question_store, mock_embedder):
        question_store.put_many([Question(text=f"Question {i}?") for i in range(5)])

        assert backfill_embeddings(question_store, mock_embedder, batch_size=2, max_batches=1) == 2
        assert len(question_store.list_missing_embeddings(10)) == 3

    def test_failure_propagates(self, question_store):
        question_store.put_many([Question(text="Question?")])
        with pytest.raises(EmbeddingError):
            backfill_embeddings(question_store, KeywordEmbedder(fail=True))


class TestPayloadItemSource:
    def test_reads_items(self):
        items = PayloadItemSource().fetch(
            {"items": [{"subject": "Hi", "body": "Where is my refund?"}]}
        )
        assert items[0].body == "Where is my refund?"
        assert items[0].status == ItemStatus.PENDING

    def test_no_items(self):
        assert PayloadItemSource().fetch({}) == []


class TestLaneChaining:
    """Lane jobs run eagerly, so each upstream job runs its downstream chain."""

    @pytest.fixture
    def queue(self, faqtory):
        queue = faqtory.queue()
        queue.eager = True
        return queue

    def test_ingestion_to_extraction_to_generation(self, faqtory, queue):
        completed = {}
        queue.on("completed", lambda job: completed.setdefault(job.lane, job))

        ingestion = queue.enqueue(
            Lane.INGESTION,
            {
                "items": [
                    {"body": "How do I reset my password?"},
                    {"body": "I forgot my password, help?"},
                    {"body": "Password reset email missing?"},
                ]
            },
        )

        assert ingestion.status == JobStatus.COMPLETED
        assert ingestion.result == {"fetched": 3, "stored": 3}

        extraction = completed[Lane.EXTRACTION]
        assert extraction.result["processed"] == 3
        assert extraction.result["questions_found"] == 3

        generation = completed[Lane.FAQ_GENERATION]
        assert generation.result["generated"] == 1
        assert faqtory.faq_store.stats()["total_groups"] == 1

    def test_empty_ingestion_does_not_chain(self, queue):
        lanes = []
        queue.on("completed", lambda job: lanes.append(job.lane))

        queue.enqueue(Lane.INGESTION, {"items": []})

        assert lanes == [Lane.INGESTION]

    def test_extraction_reports_progress(self, faqtory, queue):
        faqtory.submit_items([WorkItem(body="Where is my refund?")])
        progress = []

        def record(job):
            if job.lane is Lane.EXTRACTION:
                progress.append(job.progress)

        queue.on("progress", record)

        queue.enqueue(Lane.EXTRACTION)

        assert progress[-1] == 90
        assert progress == sorted(progress)

    def test_embedding_backfill_lane(self, faqtory, queue):
        faqtory.question_store.put_many([Question(text="Password question?")])

        job = queue.enqueue(Lane.EMBEDDING_BACKFILL, {"batch_size": 10})

        assert job.result == {"updated": 1}
