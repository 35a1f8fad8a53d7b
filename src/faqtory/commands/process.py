# src/faqtory/commands/process.py
"""Process command - extract questions from pending work items.

Optionally submits new work items from a JSON or JSON Lines file first.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from faqtory.commands.base import CommandStage, ProcessResult, ProgressCallback, ProgressUpdate
from faqtory.config import ConfigError, create_faqtory, get_faqtory_config
from faqtory.models import PipelineEvent, WorkItem


def load_items(path: str | Path) -> list[WorkItem]:
    """Read work items from a JSON array or a JSON Lines file.

    Raises:
        ValueError: If the file holds neither.
    """
    text = Path(path).read_text(encoding="utf-8").strip()
    if not text:
        return []

    raw: list[Any]
    if text.startswith("["):
        raw = json.loads(text)
    else:
        raw = [json.loads(line) for line in text.splitlines() if line.strip()]

    if not all(isinstance(entry, dict) for entry in raw):
        raise ValueError(f"{path} must contain JSON objects")
    return [WorkItem.model_validate(entry) for entry in raw]


def process(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    items_path: str | Path | None = None,
    limit: int | None = None,
    profile: str | None = None,
    on_progress: ProgressCallback | None = None,
) -> ProcessResult:
    """Submit work items (optional) and extract questions from pending ones.

    Args:
        data_dir: Override data directory
        config_path: Override config file path
        items_path: JSON / JSON Lines file of work items to submit first
        limit: Most pending items to process in this run
        profile: Processing profile ("constrained" or "standard") to override config
        on_progress: Callback for progress updates

    Returns:
        ProcessResult with run counters and per-item failures
    """
    faqtory_config = get_faqtory_config(data_dir, config_path)
    if isinstance(faqtory_config, ConfigError):
        return ProcessResult(success=False, error=faqtory_config.message)

    processor_config = None
    if profile:
        from faqtory.settings import ProcessorConfig

        try:
            processor_config = ProcessorConfig.with_profile(profile)  # type: ignore[arg-type]
        except ValueError as e:
            return ProcessResult(success=False, error=str(e))

    try:
        faqtory = create_faqtory(faqtory_config)
    except Exception as e:
        return ProcessResult(success=False, error=f"Failed to create Faqtory: {e}")

    submitted = 0
    if items_path is not None:
        try:
            items = load_items(items_path)
        except (OSError, ValueError) as e:
            return ProcessResult(success=False, error=f"Failed to read items: {e}")
        if on_progress:
            on_progress(ProgressUpdate(CommandStage.SUBMITTING, 0, len(items)))
        submitted = faqtory.submit_items(items)

    def on_event(event: PipelineEvent) -> None:
        if on_progress and event.type == "progress":
            on_progress(
                ProgressUpdate(
                    CommandStage.EXTRACTING,
                    event.processed,
                    event.total,
                    message=event.current_item,
                )
            )

    summary = asyncio.run(
        faqtory.process_pending(limit=limit, on_event=on_event, config=processor_config)
    )

    if on_progress:
        on_progress(ProgressUpdate(CommandStage.COMPLETE, summary.processed, summary.total_items))

    return ProcessResult(
        success=summary.status == "completed",
        error=summary.error,
        submitted=submitted,
        total_items=summary.total_items,
        processed=summary.processed,
        questions_found=summary.questions_found,
        errors=summary.errors,
        status=summary.status,
        stop_reason=summary.stop_reason,
        processing_time_ms=summary.processing_time_ms,
        failures=[(r.item_id, r.error or "") for r in summary.results if r.status == "error"],
    )
