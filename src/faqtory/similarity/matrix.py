# src/faqtory/similarity/matrix.py
"""Pairwise cosine similarity over stored question embeddings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from faqtory.stores.base import QuestionStore

DISTRIBUTION_BUCKETS = (
    ("0.9-1.0", 0.9),
    ("0.8-0.9", 0.8),
    ("0.7-0.8", 0.7),
    ("0.6-0.7", 0.6),
    ("0.5-0.6", 0.5),
    ("0.0-0.5", 0.0),
)


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity clipped to [0, 1]. Zero vectors score 0."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm = np.linalg.norm(va) * np.linalg.norm(vb)
    if norm == 0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / norm, 0.0, 1.0))


class SimilarityMatrix:
    """Symmetric similarity matrix computed once for a set of questions.

    Entries are NaN ("unknown") on the diagonal and for any pair where one
    side has no usable embedding. Known entries are cosine similarities
    clipped to [0, 1].

    Example:
        matrix = SimilarityMatrix(["q1", "q2"], {"q1": [1.0, 0.0], "q2": [0.8, 0.6]})
        matrix.similarity("q1", "q2")  # 0.8
    """

    def __init__(self, question_ids: list[str], embeddings: dict[str, list[float]]) -> None:
        self.ids = list(dict.fromkeys(question_ids))
        self._index = {qid: i for i, qid in enumerate(self.ids)}
        n = len(self.ids)
        self.values = np.full((n, n), np.nan)
        if n == 0:
            return

        present = [i for i, qid in enumerate(self.ids) if embeddings.get(qid)]
        if not present:
            return

        dims = {len(embeddings[self.ids[i]]) for i in present}
        if len(dims) > 1:
            raise ValueError(f"Embedding dimension mismatch: {sorted(dims)}")

        vectors = np.asarray([embeddings[self.ids[i]] for i in present], dtype=np.float64)
        norms = np.linalg.norm(vectors, axis=1)
        usable = norms > 0
        idx = np.asarray(present)[usable]
        unit = vectors[usable] / norms[usable][:, None]
        block = np.clip(unit @ unit.T, 0.0, 1.0)
        self.values[np.ix_(idx, idx)] = block
        np.fill_diagonal(self.values, np.nan)

    @classmethod
    def from_store(cls, question_ids: list[str], store: QuestionStore) -> SimilarityMatrix:
        """Build a matrix from a single batch embedding lookup."""
        return cls(question_ids, store.get_embeddings(list(dict.fromkeys(question_ids))))

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._index

    def similarity(self, a: str, b: str) -> float | None:
        """Similarity of two questions, or None when the pair is unknown."""
        value = self.values[self._index[a], self._index[b]]
        return None if np.isnan(value) else float(value)

    def submatrix(self, question_ids: list[str]) -> np.ndarray:
        """Rows and columns for the given questions, in the given order."""
        idx = [self._index[qid] for qid in question_ids]
        return self.values[np.ix_(idx, idx)]

    def known_pairs(self) -> list[tuple[str, str, float]]:
        """Every known pair once, as (earlier id, later id, similarity)."""
        rows, cols = np.triu_indices(len(self.ids), k=1)
        values = self.values[rows, cols]
        known = ~np.isnan(values)
        return [
            (self.ids[r], self.ids[c], float(v))
            for r, c, v in zip(rows[known], cols[known], values[known], strict=True)
        ]


def find_duplicate_pairs(
    matrix: SimilarityMatrix, threshold: float = 0.95
) -> list[tuple[str, str, float]]:
    """Near-duplicate question pairs, most similar first."""
    pairs = [p for p in matrix.known_pairs() if p[2] >= threshold]
    return sorted(pairs, key=lambda p: p[2], reverse=True)


def similarity_distribution(matrix: SimilarityMatrix) -> dict[str, int]:
    """Count known pairs per similarity bucket."""
    counts = {label: 0 for label, _ in DISTRIBUTION_BUCKETS}
    for _, _, value in matrix.known_pairs():
        for label, floor in DISTRIBUTION_BUCKETS:
            if value >= floor:
                counts[label] += 1
                break
    return counts
