# src/faqtory/similarity/clusterer.py
"""Average-linkage agglomerative clustering with a similarity threshold."""

from __future__ import annotations

import logging

import numpy as np

from faqtory.models import Cluster
from faqtory.similarity.matrix import SimilarityMatrix
from faqtory.stores.base import QuestionStore

logger = logging.getLogger(__name__)


class AgglomerativeClusterer:
    """Groups questions whose average pairwise similarity meets a threshold.

    Starts from singletons and repeatedly merges the two clusters with the
    highest average similarity over their known pairs. Unknown pairs are left
    out of the average (not counted as zero), and two clusters with no known
    pair between them never merge. Merging stops at the first best pair below
    the threshold.

    Ties go to the pair that comes first in input order; a merged cluster
    takes the position of its earlier half. Because the merge sequence does
    not depend on the threshold, raising the threshold never yields fewer
    clusters.

    Example:
        clusterer = AgglomerativeClusterer(question_store)
        clusters = clusterer.cluster(["q1", "q2", "q3"], threshold=0.8)
    """

    def __init__(self, question_store: QuestionStore | None = None) -> None:
        self._store = question_store

    def cluster(
        self,
        question_ids: list[str],
        threshold: float,
        matrix: SimilarityMatrix | None = None,
    ) -> list[Cluster]:
        """Cluster questions, returning every cluster including singletons.

        Args:
            question_ids: Questions to cluster, in priority order
            threshold: Minimum average similarity for a merge
            matrix: Pre-built similarity matrix. When omitted, embeddings are
                fetched from the question store in one batch.
        """
        ids = list(dict.fromkeys(question_ids))
        if not ids:
            return []
        if matrix is None:
            if self._store is None:
                raise ValueError("A similarity matrix or a question store is required")
            matrix = SimilarityMatrix.from_store(ids, self._store)

        members = self._merge(matrix.submatrix(ids), threshold)
        clusters = [Cluster(question_ids=[ids[k] for k in sorted(m)]) for m in members]
        logger.debug(
            "Clustered %d questions into %d clusters at threshold %.2f",
            len(ids),
            len(clusters),
            threshold,
        )
        return clusters

    @staticmethod
    def _merge(values: np.ndarray, threshold: float) -> list[list[int]]:
        known = ~np.isnan(values)
        sums = np.where(known, values, 0.0)
        counts = known.astype(np.int64)
        members = [[i] for i in range(len(values))]

        while len(members) > 1:
            averages = np.full(sums.shape, -np.inf)
            np.divide(sums, counts, out=averages, where=counts > 0)
            averages[np.tril_indices(len(members))] = -np.inf

            # argmax returns the first maximum in row-major order
            i, j = divmod(int(np.argmax(averages)), len(members))
            best = averages[i, j]
            if not np.isfinite(best) or best < threshold:
                break

            sums[i, :] += sums[j, :]
            sums[:, i] += sums[:, j]
            counts[i, :] += counts[j, :]
            counts[:, i] += counts[:, j]
            sums = np.delete(np.delete(sums, j, axis=0), j, axis=1)
            counts = np.delete(np.delete(counts, j, axis=0), j, axis=1)
            members[i].extend(members.pop(j))

        return members


def select_representative(
    question_ids: list[str],
    matrix: SimilarityMatrix,
    confidences: dict[str, float],
) -> str:
    """Pick the question that best stands for a cluster.

    Highest average similarity to the other members wins, then highest
    confidence, then input order. Members with no known pair are only
    considered when no member has one, in which case confidence decides.

    Raises:
        ValueError: If question_ids is empty.
    """
    ids = list(dict.fromkeys(question_ids))
    if not ids:
        raise ValueError("Cannot select a representative from an empty cluster")
    if len(ids) == 1:
        return ids[0]

    in_matrix = [qid for qid in ids if qid in matrix]
    averages: dict[str, float] = {}
    if in_matrix:
        values = matrix.submatrix(in_matrix)
        known = ~np.isnan(values)
        for row, qid in enumerate(in_matrix):
            if known[row].any():
                averages[qid] = float(values[row][known[row]].mean())

    best = ids[0]
    if not averages:
        for qid in ids[1:]:
            if confidences.get(qid, 0.0) > confidences.get(best, 0.0):
                best = qid
        return best

    best_key: tuple[float, float] | None = None
    for qid in ids:
        if qid not in averages:
            continue
        key = (averages[qid], confidences.get(qid, 0.0))
        if best_key is None or key > best_key:
            best, best_key = qid, key
    return best
