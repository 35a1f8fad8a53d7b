# src/faqtory/embedder/base.py
"""Embedder abstract base class."""

from abc import ABC, abstractmethod

from faqtory.models import Question


class Embedder(ABC):
    """Abstract base class for embedding generation (the similarity provider).

    Subclasses must implement embed_text and embed_texts. Implementations
    must be deterministic for identical input.
    """

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text."""
        ...

    @abstractmethod
    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts (batched)."""
        ...

    def embed_questions(self, questions: list[Question]) -> list[Question]:
        """Return copies of the questions with embeddings attached."""
        if not questions:
            return []
        embeddings = self.embed_texts([q.text for q in questions])
        return [
            q.model_copy(update={"embedding": emb})
            for q, emb in zip(questions, embeddings, strict=True)
        ]
