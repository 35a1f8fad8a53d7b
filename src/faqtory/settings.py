# src/faqtory/settings.py
"""Configuration management for faqtory.

This module contains behavioral settings that apply regardless of which
LLM provider is used. Settings are passed programmatically - the library
does not read from environment variables. Applications that want env-based
config read env vars at the application layer (see faqtory.config) and pass
values explicitly.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

# Processing profile definitions
# - "constrained": small hosts (about 2 GB RAM), strictly sequential
# - "standard": more headroom, still bounded
PROCESSING_PROFILES: dict[str, dict[str, Any]] = {
    "constrained": {
        "batch_size": 2,
        "max_concurrency": 1,
        "memory_threshold_bytes": int(1.5 * 1024**3),
        "gc_interval": 5,
    },
    "standard": {
        "batch_size": 5,
        "max_concurrency": 2,
        "memory_threshold_bytes": 4 * 1024**3,
        "gc_interval": 10,
    },
}


class Settings(BaseModel):
    """Behavioral settings for clustering and FAQ assembly.

    Example:
        settings = Settings(similarity_threshold=0.85, min_question_count=3)
    """

    # Clustering
    similarity_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    max_candidates: int = Field(default=200, ge=1)  # Questions clustered per run

    # Assembly
    min_question_count: int = Field(default=2, ge=1)
    max_faqs: int = Field(default=100, ge=1)  # Clusters assembled per run
    auto_publish_threshold: int = Field(default=5, ge=1)

    # Question filtering
    question_confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    min_question_length: int = Field(default=10, ge=1)
    max_question_length: int = Field(default=500, ge=1)

    # Item qualification
    min_item_quality: float = Field(default=0.3, ge=0.0, le=1.0)
    internal_senders: list[str] = Field(default_factory=list)  # Own mailboxes, never customers

    # Search
    search_min_similarity: float = Field(default=0.7, ge=0.0, le=1.0)
    default_k: int = Field(default=10, ge=1)

    # Providers
    embedding_cache_size: int = Field(default=1024, ge=0)
    num_retries: int = Field(default=3, ge=0)

    @model_validator(mode="after")
    def _check_lengths(self) -> Settings:
        if self.min_question_length > self.max_question_length:
            raise ValueError("min_question_length must not exceed max_question_length")
        return self


class ProcessorConfig(BaseModel):
    """Configuration for the batch processor.

    Defaults target a host with roughly 2 GB of memory: tiny batches,
    sequential items, and a reclamation pass every few batches.

    Example:
        config = ProcessorConfig(batch_size=1, item_timeout=10.0)

        # Or start from a profile
        config = ProcessorConfig.with_profile("standard", item_timeout=60.0)
    """

    batch_size: int = Field(default=2, ge=1)
    max_concurrency: int = Field(default=1, ge=1)  # Items in flight inside one batch
    memory_threshold_bytes: int = Field(default=int(1.5 * 1024**3), gt=0)
    gc_interval: int = Field(default=5, ge=1)  # Batches between proactive reclamation
    item_timeout: float = Field(default=25.0, gt=0)  # Seconds
    max_consecutive_errors: int = Field(default=10, ge=1)
    max_total_errors: int = Field(default=25, ge=1)
    batch_delay: float = Field(default=0.1, ge=0)  # Seconds between batches
    max_body_chars: int = Field(default=8000, ge=1)

    @model_validator(mode="after")
    def _check_concurrency(self) -> ProcessorConfig:
        if self.max_concurrency > self.batch_size:
            raise ValueError("max_concurrency cannot exceed batch_size")
        return self

    @classmethod
    def with_profile(
        cls,
        profile: Literal["constrained", "standard"],
        **overrides: Any,
    ) -> ProcessorConfig:
        """Create a ProcessorConfig from a named profile.

        Args:
            profile: The processing profile to use.
            **overrides: Additional fields to override profile defaults.

        Returns:
            ProcessorConfig with profile values applied.
        """
        if profile not in PROCESSING_PROFILES:
            raise ValueError(
                f"Unknown profile '{profile}'. "
                f"Available profiles: {list(PROCESSING_PROFILES.keys())}"
            )

        profile_settings: dict[str, Any] = PROCESSING_PROFILES[profile].copy()
        profile_settings.update(overrides)
        return cls(**profile_settings)
