# tests/assembly/test_assembler.py
"""Tests for FAQAssembler create, merge and regenerate paths."""

import pytest
from fakes import FakeTextGenerator, KeywordEmbedder

from faqtory.assembly import FAQAssembler, make_title
from faqtory.exceptions import AssemblyError
from faqtory.models import Cluster, Question
from faqtory.settings import Settings


def store_questions(question_store, embedder, specs):
    """Store (text, confidence) pairs with embeddings attached."""
    questions = embedder.embed_questions(
        [Question(text=text, confidence_score=conf) for text, conf in specs]
    )
    question_store.put_many(questions)
    return questions


def cluster_of(questions):
    return Cluster(question_ids=[q.id for q in questions])


@pytest.fixture
def assembler(question_store, faq_store, mock_embedder, mock_generator):
    return FAQAssembler(
        question_store, faq_store, mock_embedder, mock_generator, Settings()
    )


@pytest.fixture
def password_questions(question_store):
    # The first vector sits between the other two, so it is the most central
    questions = [
        Question(text="How do I reset my password?", confidence_score=0.9,
                 embedding=[1.0, 0.0, 0.0, 0.0, 0.1]),
        Question(text="I forgot my password, what now?", confidence_score=0.8,
                 embedding=[1.0, 0.2, 0.0, 0.0, 0.1]),
        Question(text="Password reset link not working?", confidence_score=0.7,
                 embedding=[1.0, 0.0, 0.2, 0.0, 0.1]),
    ]
    question_store.put_many(questions)
    return questions


class TestMakeTitle:
    def test_strips_question_mark(self):
        assert make_title("  How do I reset my password?  ") == "How do I reset my password"

    def test_caps_length(self):
        title = make_title("x" * 150 + "?")
        assert len(title) == 100
        assert title.endswith("...")


class TestCreate:
    def test_new_group_from_cluster(self, assembler, faq_store, password_questions):
        result = assembler.assemble(cluster_of(password_questions))

        assert result.is_new is True
        faq = faq_store.get(result.faq.id)
        assert faq.question_count == 3
        assert faq.avg_confidence == pytest.approx(0.8)
        assert faq.frequency_score == pytest.approx(2.4)
        assert faq.representative_question == "How do I reset my password?"
        assert faq.title == "How do I reset my password"
        assert faq.category == "Technical Support"
        assert faq.tags == ["reset", "password"]
        assert faq.representative_embedding is not None
        assert faq.is_published is False

    def test_single_representative_association(self, assembler, faq_store, password_questions):
        result = assembler.assemble(cluster_of(password_questions))

        associations = faq_store.get_associations(result.faq.id)
        representatives = [a for a in associations if a.is_representative]
        assert len(associations) == 3
        assert [a.question_id for a in representatives] == [password_questions[0].id]
        assert representatives[0].similarity_score == 1.0
        assert all(a.similarity_score == 0.85 for a in associations if not a.is_representative)

    def test_auto_publish(self, question_store, faq_store, mock_embedder, mock_generator,
                          password_questions):
        assembler = FAQAssembler(
            question_store, faq_store, mock_embedder, mock_generator,
            Settings(auto_publish_threshold=3),
        )
        assert assembler.assemble(cluster_of(password_questions)).faq.is_published is True

    def test_cluster_below_minimum_is_discarded(self, assembler, faq_store, password_questions):
        assert assembler.assemble(cluster_of(password_questions[:1])) is None
        assert assembler.assemble(cluster_of(password_questions), min_question_count=4) is None
        assert faq_store.stats()["total_groups"] == 0

    def test_answers_are_consolidated(self, question_store, assembler, mock_embedder):
        questions = store_questions(
            question_store, mock_embedder,
            [("Where is my refund?", 0.9), ("When will my refund arrive?", 0.8)],
        )
        result = assembler.assemble(cluster_of(questions))
        assert result.faq.consolidated_answer == "Answer covering 2 questions"


class TestMerge:
    def test_new_question_merges_into_existing_group(
        self, assembler, faq_store, question_store, mock_embedder, password_questions
    ):
        first, second, _ = password_questions
        created = assembler.assemble(cluster_of([first, second])).faq
        (late,) = store_questions(
            question_store, mock_embedder, [("Can't log in, password rejected?", 0.3)]
        )

        result = assembler.assemble(cluster_of([first, late]))

        assert result.is_new is False
        assert result.is_updated is True
        assert result.faq.id == created.id
        faq = faq_store.get(created.id)
        assert faq.question_count == 3
        # Mean over old and new members together
        assert faq.avg_confidence == pytest.approx((0.9 + 0.8 + 0.3) / 3)
        assert faq.frequency_score == pytest.approx(0.9 + 0.8 + 0.3)
        assert faq.representative_question == created.representative_question

        associations = {a.question_id: a for a in faq_store.get_associations(created.id)}
        assert associations[first.id].is_representative is True
        assert associations[late.id].is_representative is False
        assert associations[late.id].similarity_score == 0.85

    def test_merge_without_new_questions_is_a_no_op(
        self, assembler, faq_store, mock_generator, password_questions
    ):
        created = assembler.assemble(cluster_of(password_questions)).faq
        calls = mock_generator.count("consolidate")

        result = assembler.assemble(cluster_of(password_questions))

        assert result.is_new is False
        assert result.is_updated is False
        assert mock_generator.count("consolidate") == calls
        assert faq_store.get(created.id).updated_at == created.updated_at

    def test_questions_grouped_elsewhere_are_not_moved(
        self, assembler, faq_store, question_store, mock_embedder, password_questions
    ):
        refunds = store_questions(
            question_store, mock_embedder,
            [("Where is my refund?", 0.9), ("When will my refund arrive?", 0.8)],
        )
        password_group = assembler.assemble(cluster_of(password_questions[:2])).faq
        refund_group = assembler.assemble(cluster_of(refunds)).faq

        assembler.assemble(cluster_of([password_questions[0], *refunds]))

        grouped = faq_store.grouped_question_ids([password_questions[0].id])
        assert grouped == {password_questions[0].id: password_group.id}
        assert faq_store.get(refund_group.id).question_count == 2


class TestRegenerate:
    def test_force_regenerate_rebuilds_in_place(
        self, assembler, faq_store, mock_generator, password_questions
    ):
        created = assembler.assemble(cluster_of(password_questions[:2])).faq

        result = assembler.assemble(cluster_of(password_questions), force_regenerate=True)

        assert result.is_updated is True
        assert result.faq.id == created.id
        associations = faq_store.get_associations(created.id)
        assert len(associations) == 3
        assert sum(a.is_representative for a in associations) == 1
        assert mock_generator.count("improve") == 2
        assert faq_store.stats()["total_groups"] == 1


class TestFailures:
    def test_generator_failure_raises_assembly_error(
        self, question_store, faq_store, mock_embedder, password_questions
    ):
        generator = FakeTextGenerator(fail_texts={password_questions[1].text})
        assembler = FAQAssembler(question_store, faq_store, mock_embedder, generator)
        cluster = cluster_of(password_questions)

        with pytest.raises(AssemblyError) as exc_info:
            assembler.assemble(cluster)

        assert exc_info.value.cluster_id == cluster.id
        assert faq_store.stats()["total_groups"] == 0

    def test_embedding_failure_raises_assembly_error(
        self, question_store, faq_store, mock_generator, password_questions
    ):
        assembler = FAQAssembler(
            question_store, faq_store, KeywordEmbedder(fail=True), mock_generator
        )
        with pytest.raises(AssemblyError):
            assembler.assemble(cluster_of(password_questions))
