"""Similarity matrix and question clustering."""

from faqtory.similarity.clusterer import AgglomerativeClusterer, select_representative
from faqtory.similarity.matrix import (
    SimilarityMatrix,
    cosine_similarity,
    find_duplicate_pairs,
    similarity_distribution,
)

__all__ = [
    "AgglomerativeClusterer",
    "SimilarityMatrix",
    "cosine_similarity",
    "find_duplicate_pairs",
    "select_representative",
    "similarity_distribution",
]
