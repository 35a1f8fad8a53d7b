# src/faqtory/providers/litellm/models.py
"""Curated model constants for the LiteLLM provider.

These are convenience constants for IDE autocomplete. Any valid LiteLLM
model string can be passed directly instead.
"""


class ChatModels:
    """Chat models for the text generator and question extractor."""

    # OpenAI
    GPT_5_MINI = "openai/gpt-5-mini"
    GPT_5_NANO = "openai/gpt-5-nano"
    GPT_4O_MINI = "openai/gpt-4o-mini"

    # Anthropic
    CLAUDE_HAIKU_45 = "anthropic/claude-haiku-4-5-20251001"
    CLAUDE_SONNET_45 = "anthropic/claude-sonnet-4-5-20250929"

    # Google Gemini
    GEMINI_3_FLASH = "gemini/gemini-3-flash-preview"

    # Local
    OLLAMA_LLAMA32 = "ollama/llama3.2"


class EmbeddingModels:
    """Embedding models for LiteLLMEmbeddingClient / ClientEmbedder."""

    # OpenAI
    TEXT_3_SMALL = "openai/text-embedding-3-small"
    TEXT_3_LARGE = "openai/text-embedding-3-large"
    ADA_002 = "openai/text-embedding-ada-002"

    # Google Gemini
    GEMINI_EMBEDDING_001 = "gemini/gemini-embedding-001"
