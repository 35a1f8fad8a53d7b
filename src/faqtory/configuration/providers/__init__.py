"""Provider configurations for faqtory."""

from faqtory.configuration.providers.litellm import LiteLLMProvider

__all__ = ["LiteLLMProvider"]
