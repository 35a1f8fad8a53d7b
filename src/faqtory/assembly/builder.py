# src/faqtory/assembly/builder.py
"""FAQ generation run: select, cluster, assemble, reconcile."""

from __future__ import annotations

import logging
import time

from faqtory.assembly.assembler import FAQAssembler
from faqtory.exceptions import AssemblyError
from faqtory.models import GenerationSummary
from faqtory.settings import Settings
from faqtory.similarity import AgglomerativeClusterer, SimilarityMatrix
from faqtory.stores.base import FAQStore, QuestionStore

logger = logging.getLogger(__name__)


class FAQBuilder:
    """Runs one end-to-end FAQ generation pass.

    Example:
        builder = FAQBuilder(question_store, faq_store, assembler, settings)
        summary = builder.generate_faqs()
        print(f"{summary.generated} new, {summary.updated} updated")
    """

    def __init__(
        self,
        question_store: QuestionStore,
        faq_store: FAQStore,
        assembler: FAQAssembler,
        settings: Settings | None = None,
        clusterer: AgglomerativeClusterer | None = None,
    ) -> None:
        self.question_store = question_store
        self.faq_store = faq_store
        self.assembler = assembler
        self.settings = settings or Settings()
        self.clusterer = clusterer or AgglomerativeClusterer(question_store)

    def generate_faqs(
        self,
        min_question_count: int | None = None,
        max_faqs: int | None = None,
        similarity_threshold: float | None = None,
        force_regenerate: bool = False,
    ) -> GenerationSummary:
        """Cluster eligible questions and turn qualifying clusters into FAQs.

        A failing cluster is counted in `errors` and the run continues, as is
        a failed statistics reconciliation. The summary is always returned.
        """
        started = time.monotonic()
        minimum = (
            self.settings.min_question_count if min_question_count is None else min_question_count
        )
        limit = self.settings.max_faqs if max_faqs is None else max_faqs
        threshold = (
            self.settings.similarity_threshold
            if similarity_threshold is None
            else similarity_threshold
        )

        candidates = self.question_store.list_for_generation(
            self.settings.question_confidence_threshold, self.settings.max_candidates
        )
        summary = GenerationSummary(processed=len(candidates))
        if not candidates:
            logger.info("No questions available for FAQ generation")
            summary.duration = time.monotonic() - started
            return summary

        ids = [q.id for q in candidates]
        matrix = SimilarityMatrix(ids, {q.id: q.embedding for q in candidates if q.embedding})
        clusters = [
            c for c in self.clusterer.cluster(ids, threshold, matrix=matrix) if len(c) >= minimum
        ]
        summary.clusters = len(clusters)
        logger.info(
            "Found %d clusters of %d+ questions among %d candidates",
            len(clusters),
            minimum,
            len(candidates),
        )

        for cluster in clusters[:limit]:
            try:
                result = self.assembler.assemble(
                    cluster, min_question_count=minimum, force_regenerate=force_regenerate
                )
            except AssemblyError as e:
                logger.warning("Skipping cluster %s: %s", e.cluster_id, e)
                summary.errors += 1
                continue

            if result is None or not (result.is_new or result.is_updated):
                summary.skipped += 1
            elif result.is_new:
                summary.generated += 1
            else:
                summary.updated += 1

        try:
            self.faq_store.update_statistics()
        except Exception:
            logger.exception("Failed to reconcile FAQ group statistics")
            summary.errors += 1
        summary.duration = time.monotonic() - started
        logger.info(
            "FAQ generation finished: %d generated, %d updated, %d skipped, %d errors",
            summary.generated,
            summary.updated,
            summary.skipped,
            summary.errors,
        )
        return summary
