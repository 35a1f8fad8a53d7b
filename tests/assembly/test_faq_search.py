# tests/assembly/test_faq_search.py
"""Tests for FAQSearcher."""

import pytest

from faqtory.assembly import FAQSearcher
from faqtory.models import FAQGroup


def add_group(faq_store, embedder, question, published=True):
    group = FAQGroup(
        title=question.rstrip("?"),
        representative_question=question,
        consolidated_answer="See the help center.",
        representative_embedding=embedder.embed_text(question),
        is_published=published,
    )
    faq_store.create_group(group, [])
    return group


@pytest.fixture
def searcher(faq_store, mock_embedder):
    return FAQSearcher(faq_store, mock_embedder, min_similarity=0.7)


class TestFAQSearcher:
    def test_finds_matching_published_faq(self, searcher, faq_store, mock_embedder):
        group = add_group(faq_store, mock_embedder, "How do I reset my password?")
        add_group(faq_store, mock_embedder, "Where is my refund?")

        results = searcher.search("password not accepted")

        assert [r.faq.id for r in results] == [group.id]
        assert results[0].score == pytest.approx(1.0)

    def test_unpublished_faqs_are_hidden(self, searcher, faq_store, mock_embedder):
        add_group(faq_store, mock_embedder, "How do I reset my password?", published=False)
        assert searcher.search("password") == []

    def test_results_best_first(self, searcher, faq_store, mock_embedder):
        exact = add_group(faq_store, mock_embedder, "Password and invoice questions?")
        partial = add_group(faq_store, mock_embedder, "How do I reset my password?")

        results = searcher.search("invoice password", min_similarity=0.0)

        assert [r.faq.id for r in results][:2] == [exact.id, partial.id]
        assert results[0].score > results[1].score

    def test_floor_and_limit(self, searcher, faq_store, mock_embedder):
        add_group(faq_store, mock_embedder, "How do I reset my password?")
        add_group(faq_store, mock_embedder, "Where is my refund?")
        add_group(faq_store, mock_embedder, "Shipping times?")

        assert len(searcher.search("password", min_similarity=0.0)) == 3
        assert len(searcher.search("password", limit=2, min_similarity=0.0)) == 2
        assert len(searcher.search("password")) == 1

    def test_empty_store_or_query(self, searcher, faq_store, mock_embedder):
        assert searcher.search("password") == []
        add_group(faq_store, mock_embedder, "How do I reset my password?")
        assert searcher.search("   ") == []
