"""LiteLLM provider clients for faqtory.

Usage:
    from faqtory.providers.litellm import LiteLLMClient, ChatModels

    client = LiteLLMClient(model=ChatModels.GPT_5_MINI)
"""

from faqtory.providers.litellm.client import LiteLLMClient, LiteLLMEmbeddingClient
from faqtory.providers.litellm.models import ChatModels, EmbeddingModels

__all__ = [
    # Model constants
    "ChatModels",
    "EmbeddingModels",
    # Clients
    "LiteLLMClient",
    "LiteLLMEmbeddingClient",
]
