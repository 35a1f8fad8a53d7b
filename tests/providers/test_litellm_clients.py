# tests/providers/test_litellm_clients.py
"""Tests for the LiteLLM client wrappers."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from faqtory.providers import EmbeddingClient, LLMClient
from faqtory.providers.litellm import LiteLLMClient, LiteLLMEmbeddingClient


def mock_completion_response(content):
    response = MagicMock()
    choice = MagicMock()
    choice.message.content = content
    response.choices = [choice]
    return response


def mock_embedding_response(embeddings: list[list[float]]):
    """Create a mock LiteLLM embedding response (deliberately out of order)."""
    response = MagicMock()
    response.data = [
        {"index": i, "embedding": emb} for i, emb in reversed(list(enumerate(embeddings)))
    ]
    return response


class TestLiteLLMClient:
    def test_is_llm_client(self):
        assert isinstance(LiteLLMClient(model="openai/gpt-5-mini"), LLMClient)

    @patch("faqtory.providers.litellm.client.litellm.completion")
    def test_complete(self, mock_completion):
        mock_completion.return_value = mock_completion_response("Hello!")
        client = LiteLLMClient(model="openai/gpt-5-mini", num_retries=2)

        result = client.complete([{"role": "user", "content": "Hi"}], temperature=0.1)

        assert result == "Hello!"
        kwargs = mock_completion.call_args.kwargs
        assert kwargs["model"] == "openai/gpt-5-mini"
        assert kwargs["temperature"] == 0.1
        assert kwargs["num_retries"] == 2
        assert kwargs["drop_params"] is True
        assert "max_tokens" not in kwargs

    @patch("faqtory.providers.litellm.client.litellm.completion")
    def test_none_content_raises(self, mock_completion):
        mock_completion.return_value = mock_completion_response(None)
        with pytest.raises(ValueError, match="None content"):
            LiteLLMClient().complete([{"role": "user", "content": "Hi"}])

    @patch("faqtory.providers.litellm.client.litellm.completion")
    def test_no_choices_raises(self, mock_completion):
        response = MagicMock()
        response.choices = []
        mock_completion.return_value = response
        with pytest.raises(ValueError, match="no choices"):
            LiteLLMClient().complete([{"role": "user", "content": "Hi"}])

    @pytest.mark.asyncio
    @patch("faqtory.providers.litellm.client.litellm.acompletion", new_callable=AsyncMock)
    async def test_acomplete(self, mock_acompletion):
        mock_acompletion.return_value = mock_completion_response("Async hello")
        result = await LiteLLMClient().acomplete(
            [{"role": "user", "content": "Hi"}], max_tokens=10
        )
        assert result == "Async hello"
        assert mock_acompletion.call_args.kwargs["max_tokens"] == 10


class TestLiteLLMEmbeddingClient:
    def test_is_embedding_client(self):
        assert isinstance(LiteLLMEmbeddingClient(), EmbeddingClient)

    @patch("faqtory.providers.litellm.client.litellm.embedding")
    def test_embed_preserves_order(self, mock_embedding):
        mock_embedding.return_value = mock_embedding_response([[1.0, 0.0], [0.0, 1.0]])

        result = LiteLLMEmbeddingClient(model="openai/text-embedding-3-small").embed(["a", "b"])

        assert result == [[1.0, 0.0], [0.0, 1.0]]
        mock_embedding.assert_called_once_with(
            model="openai/text-embedding-3-small", input=["a", "b"], num_retries=3
        )

    @patch("faqtory.providers.litellm.client.litellm.embedding")
    def test_embed_empty_skips_call(self, mock_embedding):
        assert LiteLLMEmbeddingClient().embed([]) == []
        mock_embedding.assert_not_called()

    @patch("faqtory.providers.litellm.client.litellm.embedding")
    def test_large_input_is_sliced(self, mock_embedding):
        mock_embedding.side_effect = lambda model, input, num_retries: mock_embedding_response(
            [[float(len(t))] for t in input]
        )
        texts = ["x" * (i % 7) for i in range(LiteLLMEmbeddingClient.MAX_BATCH + 5)]

        result = LiteLLMEmbeddingClient().embed(texts)

        assert mock_embedding.call_count == 2
        assert result == [[float(len(t))] for t in texts]
