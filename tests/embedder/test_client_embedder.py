# tests/embedder/test_client_embedder.py
"""Tests for ClientEmbedder."""

import pytest

from faqtory.embedder import ClientEmbedder, Embedder
from faqtory.exceptions import EmbeddingError
from faqtory.models import Question
from faqtory.providers import EmbeddingClient


class CountingClient(EmbeddingClient):
    def __init__(self, fail: bool = False, short: bool = False):
        self.fail = fail
        self.short = short
        self.requests: list[list[str]] = []

    def embed(self, texts: list[str]) -> list[list[float]]:
        self.requests.append(list(texts))
        if self.fail:
            raise ConnectionError("provider down")
        vectors = [[float(len(t)), 1.0] for t in texts]
        return vectors[:-1] if self.short else vectors


class TestClientEmbedder:
    def test_is_embedder(self):
        assert isinstance(ClientEmbedder(CountingClient()), Embedder)

    def test_embed_text(self):
        assert ClientEmbedder(CountingClient()).embed_text("abc") == [3.0, 1.0]

    def test_embed_texts_keeps_order_and_duplicates(self):
        client = CountingClient()
        embedder = ClientEmbedder(client)

        result = embedder.embed_texts(["aa", "b", "aa"])

        assert result == [[2.0, 1.0], [1.0, 1.0], [2.0, 1.0]]
        assert client.requests == [["aa", "b"]]

    def test_cached_texts_are_not_requested_again(self):
        client = CountingClient()
        embedder = ClientEmbedder(client)
        embedder.embed_texts(["one", "two"])

        embedder.embed_texts(["two", "three"])

        assert client.requests == [["one", "two"], ["three"]]

    def test_cache_is_bounded(self):
        client = CountingClient()
        embedder = ClientEmbedder(client, cache_size=2)
        embedder.embed_texts(["a", "bb", "ccc"])

        embedder.embed_text("a")

        # "a" was evicted as least recently used
        assert client.requests[-1] == ["a"]

    def test_cache_disabled(self):
        client = CountingClient()
        embedder = ClientEmbedder(client, cache_size=0)
        embedder.embed_text("a")
        embedder.embed_text("a")
        assert len(client.requests) == 2

    def test_provider_failure_raises_embedding_error(self):
        embedder = ClientEmbedder(CountingClient(fail=True))
        with pytest.raises(EmbeddingError) as exc_info:
            embedder.embed_text("hello")
        assert exc_info.value.retryable is True

    def test_count_mismatch_raises(self):
        with pytest.raises(EmbeddingError, match="mismatch"):
            ClientEmbedder(CountingClient(short=True)).embed_texts(["a", "b"])

    def test_empty_input(self):
        client = CountingClient()
        assert ClientEmbedder(client).embed_texts([]) == []
        assert client.requests == []

    def test_embed_questions_returns_copies(self):
        question = Question(text="abcd")
        embedded = ClientEmbedder(CountingClient()).embed_questions([question])
        assert embedded[0].embedding == [4.0, 1.0]
        assert embedded[0].id == question.id
        assert question.embedding is None
