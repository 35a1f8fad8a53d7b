# src/faqtory/assembly/search.py
"""Similarity search over published FAQs."""

import numpy as np

from faqtory.embedder.base import Embedder
from faqtory.models import FAQSearchResult
from faqtory.stores.base import FAQStore


class FAQSearcher:
    """Finds published FAQs whose representative question is close to a query."""

    def __init__(self, faq_store: FAQStore, embedder: Embedder, min_similarity: float = 0.7) -> None:
        self.faq_store = faq_store
        self.embedder = embedder
        self.min_similarity = min_similarity

    def search(
        self, text: str, limit: int = 10, min_similarity: float | None = None
    ) -> list[FAQSearchResult]:
        """Return up to `limit` published FAQs, best match first."""
        floor = self.min_similarity if min_similarity is None else min_similarity
        groups = self.faq_store.list_published()
        if not groups or not text.strip():
            return []

        query = np.asarray(self.embedder.embed_text(text), dtype=np.float64)
        vectors = np.asarray([g.representative_embedding for g in groups], dtype=np.float64)
        norms = np.linalg.norm(vectors, axis=1) * np.linalg.norm(query)
        scores = np.divide(
            vectors @ query, norms, out=np.zeros(len(groups)), where=norms > 0
        )
        scores = np.clip(scores, 0.0, 1.0)

        order = np.argsort(-scores, kind="stable")
        return [
            FAQSearchResult(faq=groups[i], score=float(scores[i]))
            for i in order[:limit]
            if scores[i] >= floor
        ]
