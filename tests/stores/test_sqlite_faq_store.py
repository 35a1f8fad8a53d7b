# tests/stores/test_sqlite_faq_store.py
"""Tests for the SQLite FAQ group store."""

import sqlite3

import pytest

from faqtory.models import FAQGroup, Question, QuestionGroupAssociation
from faqtory.stores import FAQStore


def make_group(**overrides) -> FAQGroup:
    fields = {
        "title": "How do I reset my password",
        "representative_question": "How do I reset my password?",
        "consolidated_answer": "Use the reset link.",
    }
    fields.update(overrides)
    return FAQGroup(**fields)


def associate(group: FAQGroup, questions: list[Question]) -> list[QuestionGroupAssociation]:
    return [
        QuestionGroupAssociation(
            question_id=q.id,
            group_id=group.id,
            similarity_score=1.0 if i == 0 else 0.85,
            is_representative=i == 0,
        )
        for i, q in enumerate(questions)
    ]


@pytest.fixture
def questions(question_store):
    stored = [
        Question(text="How do I reset my password?", confidence_score=0.9),
        Question(text="I forgot my password, help?", confidence_score=0.7),
        Question(text="Where is my refund?", confidence_score=0.8),
    ]
    question_store.put_many(stored)
    return stored


class TestCreateAndGet:
    def test_is_faq_store(self, faq_store):
        assert isinstance(faq_store, FAQStore)

    def test_create_group_with_associations(self, faq_store, questions):
        group = make_group(
            question_count=2,
            representative_embedding=[0.1, 0.9],
            tags=["password", "reset"],
            category="Account & Billing",
        )
        faq_store.create_group(group, associate(group, questions[:2]))

        stored = faq_store.get(group.id)
        assert stored.title == group.title
        assert stored.representative_embedding == [0.1, 0.9]
        assert stored.tags == ["password", "reset"]
        assert stored.is_published is False

        associations = faq_store.get_associations(group.id)
        assert [a.question_id for a in associations] == [questions[0].id, questions[1].id]
        assert associations[0].is_representative is True
        assert associations[1].similarity_score == 0.85

    def test_get_missing(self, faq_store):
        assert faq_store.get("missing") is None

    def test_failed_association_rolls_back_group(self, faq_store, questions):
        first = make_group()
        faq_store.create_group(first, associate(first, questions[:1]))

        # A question may belong to only one group
        second = make_group(title="Duplicate")
        with pytest.raises(sqlite3.IntegrityError):
            faq_store.create_group(second, associate(second, questions[:1]))

        assert faq_store.get(second.id) is None
        assert faq_store.grouped_question_ids([questions[0].id]) == {questions[0].id: first.id}

    def test_member_questions_representative_first(self, faq_store, questions):
        group = make_group()
        faq_store.create_group(group, associate(group, [questions[1], questions[0]]))

        members = faq_store.get_member_questions(group.id)

        assert [q.id for q in members] == [questions[1].id, questions[0].id]


class TestSaveGroup:
    def test_save_updates_and_adds_associations(self, faq_store, questions):
        group = make_group(question_count=1)
        faq_store.create_group(group, associate(group, questions[:1]))

        updated = group.model_copy(update={"question_count": 2, "consolidated_answer": "New"})
        faq_store.save_group(
            updated,
            [QuestionGroupAssociation(question_id=questions[1].id, group_id=group.id)],
        )

        assert faq_store.get(group.id).consolidated_answer == "New"
        assert len(faq_store.get_associations(group.id)) == 2

    def test_save_with_replace_drops_old_associations(self, faq_store, questions):
        group = make_group()
        faq_store.create_group(group, associate(group, questions[:2]))

        faq_store.save_group(group, associate(group, questions[2:]), replace_associations=True)

        assert [a.question_id for a in faq_store.get_associations(group.id)] == [questions[2].id]

    def test_save_missing_group_raises(self, faq_store):
        with pytest.raises(KeyError):
            faq_store.save_group(make_group(), [])

    def test_save_group_updates_existing_association(self, faq_store, questions):
        group = make_group()
        faq_store.create_group(group, associate(group, questions[:2]))

        faq_store.save_group(
            group,
            [
                QuestionGroupAssociation(
                    question_id=questions[1].id, group_id=group.id, similarity_score=0.93
                )
            ]
        )

        scores = {a.question_id: a.similarity_score for a in faq_store.get_associations(group.id)}
        assert scores[questions[1].id] == 0.93
        assert len(scores) == 2


class TestLookups:
    def test_find_group_for_questions_prefers_largest_overlap(self, faq_store, questions):
        small = make_group(title="Small")
        large = make_group(title="Large")
        faq_store.create_group(small, associate(small, questions[2:]))
        faq_store.create_group(large, associate(large, questions[:2]))

        found = faq_store.find_group_for_questions([q.id for q in questions])

        assert found.id == large.id

    def test_find_group_for_ungrouped_questions(self, faq_store, questions):
        assert faq_store.find_group_for_questions([questions[0].id]) is None
        assert faq_store.find_group_for_questions([]) is None

    def test_grouped_question_ids(self, faq_store, questions):
        group = make_group()
        faq_store.create_group(group, associate(group, questions[:1]))

        ids = [q.id for q in questions]
        assert faq_store.grouped_question_ids(ids) == {questions[0].id: group.id}


class TestListGroups:
    @pytest.fixture
    def groups(self, faq_store):
        created = [
            make_group(title="Reset password", frequency_score=3.0, category="Account & Billing",
                       is_published=True, representative_embedding=[1.0, 0.0]),
            make_group(title="Track shipping", frequency_score=5.0, category="Shipping & Delivery",
                       consolidated_answer="Use the tracking page."),
            make_group(title="Refund timing", frequency_score=1.0, category="Returns & Refunds",
                       is_published=True),
        ]
        for group in created:
            faq_store.create_group(group, [])
        return created

    def test_sorted_by_frequency(self, faq_store, groups):
        page, total = faq_store.list_groups()
        assert total == 3
        assert [g.title for g in page] == ["Track shipping", "Reset password", "Refund timing"]

    def test_ascending_sort(self, faq_store, groups):
        page, _ = faq_store.list_groups(sort_by="title", descending=False)
        assert [g.title for g in page] == ["Refund timing", "Reset password", "Track shipping"]

    def test_pagination(self, faq_store, groups):
        page, total = faq_store.list_groups(page=2, limit=2)
        assert total == 3
        assert [g.title for g in page] == ["Refund timing"]

    def test_filters(self, faq_store, groups):
        published, total = faq_store.list_groups(published=True)
        assert total == 2
        assert {g.title for g in published} == {"Reset password", "Refund timing"}

        by_category, _ = faq_store.list_groups(category="Shipping & Delivery")
        assert [g.title for g in by_category] == ["Track shipping"]

        searched, _ = faq_store.list_groups(search="tracking")
        assert [g.title for g in searched] == ["Track shipping"]

    def test_unknown_sort_field(self, faq_store, groups):
        with pytest.raises(ValueError, match="Cannot sort"):
            faq_store.list_groups(sort_by="id; DROP TABLE faq_groups")

    def test_list_published_requires_embedding(self, faq_store, groups):
        assert [g.title for g in faq_store.list_published()] == ["Reset password"]


class TestAdministration:
    def test_update_fields(self, faq_store):
        group = make_group()
        faq_store.create_group(group, [])

        updated = faq_store.update_fields(
            group.id, is_published=True, tags=["a", " a ", "b"], category="Other"
        )

        assert updated.is_published is True
        assert updated.tags == ["a", "b"]
        assert updated.category == "Other"
        assert updated.updated_at >= group.updated_at

    def test_update_fields_rejects_derived_fields(self, faq_store):
        group = make_group()
        faq_store.create_group(group, [])
        with pytest.raises(ValueError, match="not editable"):
            faq_store.update_fields(group.id, question_count=10)

    def test_update_fields_missing_group(self, faq_store):
        assert faq_store.update_fields("missing", title="New") is None

    def test_delete_releases_questions(self, faq_store, questions):
        group = make_group()
        faq_store.create_group(group, associate(group, questions[:2]))

        assert faq_store.delete(group.id) is True
        assert faq_store.get(group.id) is None
        assert faq_store.grouped_question_ids([q.id for q in questions]) == {}
        assert faq_store.delete(group.id) is False


class TestStatistics:
    def test_update_statistics_reconciles_and_is_idempotent(self, faq_store, questions):
        group = make_group(question_count=99, avg_confidence=0.1, frequency_score=0.0)
        faq_store.create_group(group, associate(group, questions[:2]))

        assert faq_store.update_statistics() == 1

        stored = faq_store.get(group.id)
        assert stored.question_count == 2
        assert stored.avg_confidence == pytest.approx(0.8)
        assert stored.frequency_score == pytest.approx(1.6)

        assert faq_store.update_statistics() == 0
        assert faq_store.get(group.id).updated_at == stored.updated_at

    def test_stats(self, faq_store):
        faq_store.create_group(make_group(question_count=2, category="Other"), [])
        faq_store.create_group(
            make_group(question_count=4, category="Other", is_published=True), []
        )
        faq_store.create_group(make_group(question_count=3), [])

        stats = faq_store.stats()

        assert stats["total_groups"] == 3
        assert stats["published_groups"] == 1
        assert stats["grouped_questions"] == 9
        assert stats["avg_group_size"] == 3.0
        assert stats["categories"] == {"Other": 2, "Uncategorized": 1}
