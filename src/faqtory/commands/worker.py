# src/faqtory/commands/worker.py
"""Worker command - run job queue lanes.

A worker consumes one or more lanes through Celery until it receives a
shutdown signal. Inline mode instead runs the enqueued job, and every job
it chains, in this process and returns once they finish.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from faqtory.commands.base import WorkerResult
from faqtory.config import ConfigError, create_faqtory, get_faqtory_config
from faqtory.pipeline.queue import Job, Lane

logger = logging.getLogger(__name__)


def worker(
    lanes: list[str] | None = None,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    enqueue: str | None = None,
    payload: str | None = None,
    inline: bool = False,
    loglevel: str = "INFO",
) -> WorkerResult:
    """Run queue workers.

    Args:
        lanes: Lane names to serve (None for all)
        data_dir: Override data directory
        config_path: Override config file path
        enqueue: Lane to enqueue one job on before starting
        payload: JSON object payload for the enqueued job
        inline: Run jobs in this process instead of starting a worker
        loglevel: Celery worker log level

    Returns:
        WorkerResult with jobs run per lane
    """
    try:
        selected = [Lane(name) for name in lanes] if lanes else list(Lane)
        job_payload: dict[str, Any] = json.loads(payload) if payload else {}
    except ValueError as e:
        return WorkerResult(success=False, error=f"Invalid worker options: {e}")
    if not isinstance(job_payload, dict):
        return WorkerResult(success=False, error="Payload must be a JSON object")

    faqtory_config = get_faqtory_config(data_dir, config_path)
    if isinstance(faqtory_config, ConfigError):
        return WorkerResult(success=False, error=faqtory_config.message)

    try:
        faqtory = create_faqtory(faqtory_config)
        queue = faqtory.queue()
    except Exception as e:
        return WorkerResult(success=False, error=f"Failed to create Faqtory: {e}")

    lane_names = [lane.value for lane in selected]
    runs = dict.fromkeys(lane_names, 0)

    def count(job: Job) -> None:
        if job.lane is not None:
            runs[job.lane.value] = runs.get(job.lane.value, 0) + 1

    queue.on("completed", count)
    queue.on("failed", count)
    queue.eager = inline
    queue.clean()

    enqueued = None
    if enqueue:
        try:
            enqueued = queue.enqueue(enqueue, job_payload).id
        except ValueError as e:
            return WorkerResult(success=False, error=f"Invalid lane: {e}")

    if not inline:
        logger.info("Starting worker for lanes: %s", ", ".join(lane_names))
        exit_code = queue.run_worker(selected, loglevel=loglevel)
        if exit_code:
            return WorkerResult(
                success=False,
                error=f"Worker exited with code {exit_code}",
                lanes=lane_names,
                jobs_run=runs,
                enqueued=enqueued,
            )

    return WorkerResult(success=True, lanes=lane_names, jobs_run=runs, enqueued=enqueued)
