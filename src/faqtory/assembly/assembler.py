# src/faqtory/assembly/assembler.py
"""Turn one cluster into a new FAQ group or merge it into an existing one."""

from __future__ import annotations

import logging

from faqtory.embedder.base import Embedder
from faqtory.exceptions import AssemblyError
from faqtory.generator.base import TextGenerator
from faqtory.models import (
    APPROXIMATE_MEMBER_SIMILARITY,
    REPRESENTATIVE_SIMILARITY,
    AssemblyResult,
    Cluster,
    FAQGroup,
    Question,
    QuestionGroupAssociation,
)
from faqtory.models.faq import normalize_tags
from faqtory.models.question import utcnow
from faqtory.settings import Settings
from faqtory.similarity import SimilarityMatrix, select_representative
from faqtory.stores.base import FAQStore, QuestionStore

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100


def make_title(text: str) -> str:
    """Title from question text: trailing '?' removed, capped at 100 characters."""
    title = text.strip().rstrip("?").strip()
    if len(title) > MAX_TITLE_LENGTH:
        title = title[: MAX_TITLE_LENGTH - 3] + "..."
    return title


def _stats(questions: list[Question], auto_publish_threshold: int) -> dict[str, object]:
    count = len(questions)
    avg = sum(q.confidence_score for q in questions) / count if count else 0.0
    return {
        "question_count": count,
        "avg_confidence": avg,
        "frequency_score": count * avg,
        "is_published": count >= auto_publish_threshold,
    }


class FAQAssembler:
    """Builds and incrementally merges FAQ groups.

    A cluster that overlaps an existing group is merged into it: the group's
    representative stays, the answer is regenerated over the full membership
    and only the newly added questions get associations. Otherwise a new
    group is created. Questions that already belong to a different group are
    never moved.

    Any collaborator or store failure is raised as AssemblyError for that
    cluster alone.
    """

    def __init__(
        self,
        question_store: QuestionStore,
        faq_store: FAQStore,
        embedder: Embedder,
        generator: TextGenerator,
        settings: Settings | None = None,
    ) -> None:
        self.question_store = question_store
        self.faq_store = faq_store
        self.embedder = embedder
        self.generator = generator
        self.settings = settings or Settings()

    def assemble(
        self,
        cluster: Cluster,
        min_question_count: int | None = None,
        force_regenerate: bool = False,
    ) -> AssemblyResult | None:
        """Create or merge a FAQ group for one cluster.

        Args:
            cluster: Questions to assemble
            min_question_count: Clusters smaller than this are discarded.
                Defaults to settings.min_question_count.
            force_regenerate: Rebuild an overlapping group from scratch
                instead of merging into it.

        Returns:
            AssemblyResult, or None if the cluster is too small.

        Raises:
            AssemblyError: If the cluster could not be assembled.
        """
        minimum = (
            self.settings.min_question_count if min_question_count is None else min_question_count
        )
        if len(cluster) < minimum:
            return None

        try:
            existing = self.faq_store.find_group_for_questions(cluster.question_ids)
            questions = self._eligible_questions(cluster, existing)
            if len(questions) < minimum and existing is None:
                return None

            if existing is None:
                return self._create(questions)
            if force_regenerate:
                return self._regenerate(existing, questions)
            return self._merge(existing, questions)
        except AssemblyError:
            raise
        except Exception as e:
            logger.error("Failed to assemble cluster %s: %s", cluster.id, e)
            raise AssemblyError(f"Failed to assemble cluster: {e}", cluster_id=cluster.id) from e

    def _eligible_questions(
        self, cluster: Cluster, existing: FAQGroup | None
    ) -> list[Question]:
        questions = self.question_store.get_many(cluster.question_ids)
        grouped = self.faq_store.grouped_question_ids([q.id for q in questions])
        allowed = existing.id if existing else None
        kept = [q for q in questions if grouped.get(q.id, allowed) == allowed]
        if len(kept) < len(questions):
            logger.debug(
                "Skipping %d questions already grouped elsewhere", len(questions) - len(kept)
            )
        return kept

    def _representative(self, questions: list[Question]) -> Question:
        ids = [q.id for q in questions]
        matrix = SimilarityMatrix(ids, {q.id: q.embedding for q in questions if q.embedding})
        rep_id = select_representative(
            ids, matrix, {q.id: q.confidence_score for q in questions}
        )
        return next(q for q in questions if q.id == rep_id)

    def _consolidate(self, questions: list[Question]) -> str:
        return self.generator.consolidate(
            [q.text for q in questions], [q.answer_text or "" for q in questions]
        )

    def _build_content(self, questions: list[Question]) -> tuple[Question, dict[str, object]]:
        """Generate every text field of a group from its questions."""
        representative = self._representative(questions)
        improved = self.generator.improve(
            representative.text, context=representative.answer_text or ""
        )
        fields: dict[str, object] = {
            "title": make_title(improved),
            "representative_question": improved,
            "consolidated_answer": self._consolidate(questions),
            "category": self.generator.categorize(improved),
            "tags": normalize_tags(self.generator.extract_tags(improved)),
            "representative_embedding": self.embedder.embed_text(improved),
            **_stats(questions, self.settings.auto_publish_threshold),
        }
        return representative, fields

    @staticmethod
    def _associations(
        group_id: str, questions: list[Question], representative_id: str | None
    ) -> list[QuestionGroupAssociation]:
        return [
            QuestionGroupAssociation(
                question_id=q.id,
                group_id=group_id,
                similarity_score=(
                    REPRESENTATIVE_SIMILARITY
                    if q.id == representative_id
                    else APPROXIMATE_MEMBER_SIMILARITY
                ),
                is_representative=q.id == representative_id,
            )
            for q in questions
        ]

    def _create(self, questions: list[Question]) -> AssemblyResult:
        representative, fields = self._build_content(questions)
        group = FAQGroup(**fields)  # type: ignore[arg-type]
        self.faq_store.create_group(
            group, self._associations(group.id, questions, representative.id)
        )
        logger.info("Created FAQ group %s with %d questions", group.id, group.question_count)
        return AssemblyResult(faq=group, is_new=True, is_updated=False)

    def _merge(self, existing: FAQGroup, questions: list[Question]) -> AssemblyResult:
        members = self.faq_store.get_member_questions(existing.id)
        member_ids = {q.id for q in members}
        added = [q for q in questions if q.id not in member_ids]
        if not added:
            return AssemblyResult(faq=existing, is_new=False, is_updated=False)

        union = members + added
        group = existing.model_copy(
            update={
                "consolidated_answer": self._consolidate(union),
                "updated_at": utcnow(),
                **_stats(union, self.settings.auto_publish_threshold),
            }
        )
        self.faq_store.save_group(group, self._associations(group.id, added, None))
        logger.info(
            "Merged %d questions into FAQ group %s (now %d)",
            len(added),
            group.id,
            group.question_count,
        )
        return AssemblyResult(faq=group, is_new=False, is_updated=True)

    def _regenerate(self, existing: FAQGroup, questions: list[Question]) -> AssemblyResult:
        members = self.faq_store.get_member_questions(existing.id)
        union = list({q.id: q for q in members + questions}.values())
        representative, fields = self._build_content(union)
        group = existing.model_copy(update={**fields, "updated_at": utcnow()})
        self.faq_store.save_group(
            group,
            self._associations(group.id, union, representative.id),
            replace_associations=True,
        )
        logger.info("Regenerated FAQ group %s with %d questions", group.id, len(union))
        return AssemblyResult(faq=group, is_new=False, is_updated=True)
