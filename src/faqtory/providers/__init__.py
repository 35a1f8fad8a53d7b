"""Provider implementations for faqtory.

- LLMClient: Abstract base class for LLM completion providers
- EmbeddingClient: Abstract base class for embedding providers
- LiteLLM implementations

Usage:
    from faqtory.providers import LLMClient, EmbeddingClient
    from faqtory.providers.litellm import LiteLLMClient, ChatModels
"""

from faqtory.providers.base import EmbeddingClient, LLMClient
from faqtory.providers.litellm import (
    ChatModels,
    EmbeddingModels,
    LiteLLMClient,
    LiteLLMEmbeddingClient,
)

__all__ = [
    # ABCs
    "LLMClient",
    "EmbeddingClient",
    # Model constants
    "ChatModels",
    "EmbeddingModels",
    # LiteLLM clients
    "LiteLLMClient",
    "LiteLLMEmbeddingClient",
]
