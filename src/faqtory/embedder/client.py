# src/faqtory/embedder/client.py
"""Client-based embedder implementation."""

import logging
from collections import OrderedDict

from faqtory.embedder.base import Embedder
from faqtory.exceptions import EmbeddingError
from faqtory.providers.base import EmbeddingClient

logger = logging.getLogger(__name__)


class ClientEmbedder(Embedder):
    """Embedder that uses an EmbeddingClient, with a bounded per-text cache.

    Provider failures are re-raised as EmbeddingError so callers can treat
    them as retryable.

    Example:
        from faqtory.providers.litellm import LiteLLMEmbeddingClient
        from faqtory.embedder import ClientEmbedder

        client = LiteLLMEmbeddingClient(model="openai/text-embedding-3-small")
        embedder = ClientEmbedder(embedding_client=client, cache_size=1024)
    """

    def __init__(self, embedding_client: EmbeddingClient, cache_size: int = 1024) -> None:
        """Initialize the embedder.

        Args:
            embedding_client: Any EmbeddingClient implementation
            cache_size: Maximum number of cached texts (0 disables caching)
        """
        self._client = embedding_client
        self.cache_size = cache_size
        self._cache: OrderedDict[str, list[float]] = OrderedDict()

    def _remember(self, text: str, embedding: list[float]) -> None:
        if self.cache_size <= 0:
            return
        self._cache[text] = embedding
        self._cache.move_to_end(text)
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)

    def embed_text(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text."""
        return self.embed_texts([text])[0]

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts, reusing cached ones."""
        if not texts:
            return []

        unique = list(dict.fromkeys(texts))
        known = {t: self._cache[t] for t in unique if t in self._cache}
        missing = [t for t in unique if t not in known]
        if missing:
            try:
                vectors = self._client.embed(missing)
            except Exception as e:
                logger.error("Embedding request failed for %d texts: %s", len(missing), e)
                raise EmbeddingError(f"Failed to generate embeddings: {e}") from e
            if len(vectors) != len(missing):
                raise EmbeddingError(
                    f"Embedding count mismatch: {len(missing)} texts, {len(vectors)} embeddings"
                )
            known.update(zip(missing, vectors, strict=True))

        for text in unique:
            self._remember(text, known[text])
        return [known[text] for text in texts]
