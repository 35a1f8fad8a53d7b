"""Configuration objects for faqtory.

Instead of factory methods, you pass configuration objects that know how to
build their components.

Provider configurations (build AI components):
- LiteLLMProvider: Uses LiteLLM for LLM and embedding calls

Storage configurations (build data stores):
- LocalStorage: One SQLite database in a local directory

Example:
    from faqtory import Faqtory, LiteLLMProvider, LocalStorage

    faqtory = Faqtory(
        provider=LiteLLMProvider(llm="openai/gpt-5-mini", embedding="openai/text-embedding-3-small"),
        storage=LocalStorage("./data"),
    )
"""

from faqtory.configuration.base import ProviderConfig, StorageConfig
from faqtory.configuration.providers import LiteLLMProvider
from faqtory.configuration.storage import LocalStorage

__all__ = [
    "ProviderConfig",
    "StorageConfig",
    "LiteLLMProvider",
    "LocalStorage",
]
