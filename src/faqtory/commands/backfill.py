# src/faqtory/commands/backfill.py
"""Backfill command - embed stored questions that lack an embedding."""

from __future__ import annotations

from pathlib import Path

from faqtory.commands.base import BackfillResult
from faqtory.config import ConfigError, create_faqtory, get_faqtory_config


def backfill(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    batch_size: int = 50,
    max_batches: int | None = None,
) -> BackfillResult:
    faqtory_config = get_faqtory_config(data_dir, config_path)
    if isinstance(faqtory_config, ConfigError):
        return BackfillResult(success=False, error=faqtory_config.message)

    try:
        faqtory = create_faqtory(faqtory_config)
    except Exception as e:
        return BackfillResult(success=False, error=f"Failed to create Faqtory: {e}")

    try:
        updated = faqtory.backfill_embeddings(batch_size=batch_size, max_batches=max_batches)
    except Exception as e:
        return BackfillResult(success=False, error=f"Backfill failed: {e}")

    return BackfillResult(success=True, updated=updated)
