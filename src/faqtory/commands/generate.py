# src/faqtory/commands/generate.py
"""Generate command - cluster stored questions into FAQ groups."""

from __future__ import annotations

from pathlib import Path

from faqtory.commands.base import GenerateResult
from faqtory.config import ConfigError, create_faqtory, get_faqtory_config


def generate(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    min_question_count: int | None = None,
    max_faqs: int | None = None,
    similarity_threshold: float | None = None,
    force_regenerate: bool = False,
) -> GenerateResult:
    """Run one FAQ generation pass.

    Args:
        data_dir: Override data directory
        config_path: Override config file path
        min_question_count: Smallest cluster that becomes an FAQ (None for settings)
        max_faqs: Most clusters assembled in this run (None for settings)
        similarity_threshold: Merge threshold for clustering (None for settings)
        force_regenerate: Rebuild content of groups that already exist

    Returns:
        GenerateResult with the run counters
    """
    faqtory_config = get_faqtory_config(data_dir, config_path)
    if isinstance(faqtory_config, ConfigError):
        return GenerateResult(success=False, error=faqtory_config.message)

    try:
        faqtory = create_faqtory(faqtory_config)
    except Exception as e:
        return GenerateResult(success=False, error=f"Failed to create Faqtory: {e}")

    try:
        summary = faqtory.generate_faqs(
            min_question_count=min_question_count,
            max_faqs=max_faqs,
            similarity_threshold=similarity_threshold,
            force_regenerate=force_regenerate,
        )
    except Exception as e:
        return GenerateResult(success=False, error=f"Generation failed: {e}")

    return GenerateResult(
        success=True,
        processed=summary.processed,
        clusters=summary.clusters,
        generated=summary.generated,
        updated=summary.updated,
        skipped=summary.skipped,
        errors=summary.errors,
        duration=summary.duration,
    )
