# src/faqtory/providers/litellm/client.py
"""LiteLLM client implementations for LLM and embedding APIs."""

from typing import Any

import litellm

from faqtory.providers.base import EmbeddingClient, LLMClient
from faqtory.providers.litellm.models import ChatModels, EmbeddingModels


class LiteLLMClient(LLMClient):
    """LiteLLM-based LLM client for text generation.

    Supports any model available through LiteLLM (OpenAI, Anthropic, Gemini,
    Bedrock, etc.).

    Example:
        from faqtory.providers.litellm import LiteLLMClient, ChatModels

        client = LiteLLMClient(model=ChatModels.GPT_5_MINI)
        response = client.complete([{"role": "user", "content": "Hello"}])
    """

    def __init__(
        self,
        model: str = ChatModels.GPT_5_MINI,
        num_retries: int = 3,
        timeout: float | None = 30.0,
    ) -> None:
        """Initialize the LiteLLM client.

        Args:
            model: LiteLLM model identifier.
            num_retries: Number of retries on rate limit errors. LiteLLM handles
                        exponential backoff automatically. Default: 3.
            timeout: Per-request timeout in seconds (None for provider default).
        """
        self.model = model
        self.num_retries = num_retries
        self.timeout = timeout

    def _completion_kwargs(
        self,
        messages: list[dict],
        temperature: float | None,
        max_tokens: int | None,
    ) -> dict[str, Any]:
        completion_kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "drop_params": True,
            "num_retries": self.num_retries,
        }
        if temperature is not None:
            completion_kwargs["temperature"] = temperature
        if max_tokens is not None:
            completion_kwargs["max_tokens"] = max_tokens
        if self.timeout is not None:
            completion_kwargs["timeout"] = self.timeout
        return completion_kwargs

    def _extract_content(self, response: Any) -> str:
        if not response.choices:
            raise ValueError(f"LLM returned no choices for model {self.model}")
        content = response.choices[0].message.content
        if content is None:
            raise ValueError(f"LLM returned None content for model {self.model}")
        return str(content)

    def complete(
        self,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a completion using LiteLLM."""
        response = litellm.completion(**self._completion_kwargs(messages, temperature, max_tokens))
        return self._extract_content(response)

    async def acomplete(
        self,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a completion using LiteLLM (async)."""
        response = await litellm.acompletion(
            **self._completion_kwargs(messages, temperature, max_tokens)
        )
        return self._extract_content(response)


class LiteLLMEmbeddingClient(EmbeddingClient):
    """LiteLLM-based embedding client.

    Example:
        from faqtory.providers.litellm import LiteLLMEmbeddingClient, EmbeddingModels

        client = LiteLLMEmbeddingClient(model=EmbeddingModels.TEXT_3_SMALL)
        embeddings = client.embed(["How do I reset my password?"])
    """

    # Provider-side limit on inputs per request
    MAX_BATCH = 100

    def __init__(
        self,
        model: str = EmbeddingModels.TEXT_3_SMALL,
        num_retries: int = 3,
    ) -> None:
        """Initialize the LiteLLM embedding client.

        Args:
            model: LiteLLM embedding model identifier.
            num_retries: Number of retries on rate limit errors. Default: 3.
        """
        self.model = model
        self.num_retries = num_retries

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings using LiteLLM, in slices of MAX_BATCH."""
        if not texts:
            return []

        embeddings: list[list[float]] = []
        for start in range(0, len(texts), self.MAX_BATCH):
            response = litellm.embedding(
                model=self.model,
                input=texts[start : start + self.MAX_BATCH],
                num_retries=self.num_retries,
            )
            # Sort by index to maintain order
            sorted_data = sorted(response.data, key=lambda x: x["index"])
            embeddings.extend(item["embedding"] for item in sorted_data)
        return embeddings
