# src/faqtory/pipeline/queue.py
"""Job queue with named lanes, run by Celery.

Messages travel through a SQLAlchemy broker and results land in the
SQLAlchemy result backend, both kept in the shared SQLite database.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Literal

from celery import Celery, Task, states
from celery.backends.database import session_cleanup
from celery.backends.database.models import TaskExtended
from kombu import Exchange, Queue
from pydantic import BaseModel
from sqlalchemy import func

from faqtory.exceptions import JobError

logger = logging.getLogger(__name__)

PROGRESS = "PROGRESS"


class Lane(str, Enum):
    """Named job lanes, chained ingestion -> extraction -> faq-generation."""

    INGESTION = "ingestion"
    EXTRACTION = "extraction"
    FAQ_GENERATION = "faq-generation"
    EMBEDDING_BACKFILL = "embedding-backfill"

    @property
    def task_name(self) -> str:
        return f"faqtory.{self.value}"


class JobStatus(str, Enum):
    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


STATE_STATUS = {
    states.PENDING: JobStatus.WAITING,
    states.RECEIVED: JobStatus.WAITING,
    states.RETRY: JobStatus.WAITING,
    states.STARTED: JobStatus.ACTIVE,
    PROGRESS: JobStatus.ACTIVE,
    states.SUCCESS: JobStatus.COMPLETED,
    states.FAILURE: JobStatus.FAILED,
    states.REVOKED: JobStatus.FAILED,
}


class Job(BaseModel):
    """Snapshot of a queued job."""

    id: str
    lane: Lane | None = None
    status: JobStatus = JobStatus.WAITING
    progress: int = 0
    result: dict[str, Any] | None = None
    error: str | None = None


@dataclass
class JobContext:
    """Handed to a lane handler while its job runs."""

    task: Task
    queue: JobQueue
    lane: Lane
    payload: dict[str, Any]

    @property
    def job_id(self) -> str:
        return self.task.request.id

    def progress(self, value: int) -> None:
        value = max(0, min(100, int(value)))
        self.task.update_state(state=PROGRESS, meta={"progress": value})
        self.queue._emit(
            "progress",
            Job(id=self.job_id, lane=self.lane, status=JobStatus.ACTIVE, progress=value),
        )

    def enqueue(self, lane: Lane | str, payload: dict[str, Any] | None = None, **options: Any) -> Job:
        return self.queue.enqueue(lane, payload, **options)


JobHandler = Callable[[JobContext], dict[str, Any] | None]
QueueEvent = Literal["completed", "failed", "progress"]
Listener = Callable[[Job], None]


class LaneTask(Task):
    """Celery task bound to one lane of a JobQueue."""

    job_queue: JobQueue
    lane: Lane

    def on_success(self, retval, task_id, args, kwargs):
        logger.info("Job %s on %s completed", task_id, self.lane.value)
        self.job_queue._emit(
            "completed",
            Job(
                id=task_id,
                lane=self.lane,
                status=JobStatus.COMPLETED,
                progress=100,
                result=retval if isinstance(retval, dict) else None,
            ),
        )

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        logger.error(
            "Job %s on %s failed after %d attempts: %s",
            task_id,
            self.lane.value,
            self.request.retries + 1,
            exc,
        )
        self.job_queue._emit(
            "failed",
            Job(id=task_id, lane=self.lane, status=JobStatus.FAILED, error=_error_text(exc)),
        )

    def on_retry(self, exc, task_id, args, kwargs, einfo):
        logger.warning(
            "Job %s on %s failed (attempt %d/%d), retrying: %s",
            task_id,
            self.lane.value,
            self.request.retries + 1,
            self.max_retries + 1,
            exc,
        )


def run_job(task: LaneTask, payload: dict[str, Any] | None = None) -> dict[str, Any] | None:
    """Celery entry point shared by every lane."""
    return task.job_queue._run(task, payload or {})


def _error_text(exc: Any) -> str:
    return str(exc) or type(exc).__name__


def _sqlite_url(scheme: str, db_path: str) -> str:
    return f"{scheme}:///{os.path.abspath(db_path)}"


class JobQueue:
    """Celery-backed job queue persisted in the shared SQLite database.

    Each lane is a Celery task routed to a queue of the same name, with one
    registered handler. A failing job is retried with exponential backoff
    until its attempts run out; a JobError fails it at once. In eager mode
    enqueued jobs run in the calling process.

    Example:
        queue = JobQueue("./data/faqtory.db")
        queue.register(Lane.FAQ_GENERATION, generate_handler)
        queue.on("completed", lambda job: print(job.result))
        queue.enqueue(Lane.FAQ_GENERATION, {"min_question_count": 2}, delay=5.0)
        queue.run_worker([Lane.FAQ_GENERATION])
    """

    def __init__(
        self,
        db_path: str,
        default_attempts: int = 3,
        backoff_base: float = 2.0,
        eager: bool = False,
    ) -> None:
        self.db_path = db_path
        self.default_attempts = default_attempts
        self.backoff_base = backoff_base
        self._handlers: dict[Lane, JobHandler] = {}
        self._listeners: dict[str, list[Listener]] = {
            "completed": [],
            "failed": [],
            "progress": [],
        }

        self.app = Celery("faqtory", set_as_current=False)
        self.app.conf.update(
            broker_url=_sqlite_url("sqla+sqlite", db_path),
            result_backend=_sqlite_url("db+sqlite", db_path),
            broker_connection_retry_on_startup=True,
            task_serializer="json",
            accept_content=["json"],
            result_serializer="json",
            timezone="UTC",
            enable_utc=True,
            task_track_started=True,
            task_acks_late=True,
            task_always_eager=eager,
            task_store_eager_result=True,
            result_extended=True,
            worker_prefetch_multiplier=1,  # One job at a time per worker
            worker_pool="solo",
            worker_concurrency=1,
            worker_hijack_root_logger=False,
            worker_enable_remote_control=False,  # The SQLAlchemy broker has no fanout
            task_routes={lane.task_name: {"queue": lane.value} for lane in Lane},
            task_queues=tuple(
                Queue(lane.value, Exchange(lane.value), routing_key=lane.value) for lane in Lane
            ),
        )
        self._tasks = {
            lane: self.app.task(
                bind=True,
                base=LaneTask,
                name=lane.task_name,
                shared=False,
                lazy=False,
                job_queue=self,
                lane=lane,
                autoretry_for=(Exception,),
                dont_autoretry_for=(JobError,),
                max_retries=max(0, default_attempts - 1),
                retry_backoff=backoff_base,
                retry_jitter=False,
                default_retry_delay=0,
            )(run_job)
            for lane in Lane
        }
        self._lanes_by_task = {lane.task_name: lane for lane in Lane}

    @property
    def eager(self) -> bool:
        return bool(self.app.conf.task_always_eager)

    @eager.setter
    def eager(self, value: bool) -> None:
        self.app.conf.task_always_eager = value

    def register(self, lane: Lane | str, handler: JobHandler) -> None:
        self._handlers[Lane(lane)] = handler

    def on(self, event: QueueEvent, listener: Listener) -> None:
        if event not in self._listeners:
            raise JobError(f"Unknown queue event: {event}")
        self._listeners[event].append(listener)

    def _emit(self, event: str, job: Job) -> None:
        for listener in self._listeners[event]:
            try:
                listener(job)
            except Exception:
                logger.exception("Queue listener failed for %s event on job %s", event, job.id)

    def _run(self, task: LaneTask, payload: dict[str, Any]) -> dict[str, Any] | None:
        handler = self._handlers.get(task.lane)
        if handler is None:
            raise JobError(f"No handler registered for lane '{task.lane.value}'")
        logger.info(
            "Running job %s on %s (attempt %d)",
            task.request.id,
            task.lane.value,
            task.request.retries + 1,
        )
        return handler(JobContext(task=task, queue=self, lane=task.lane, payload=payload))

    def enqueue(
        self,
        lane: Lane | str,
        payload: dict[str, Any] | None = None,
        delay: float = 0.0,
        priority: int = 0,
    ) -> Job:
        """Send a job to its lane. It becomes due after `delay` seconds.

        In eager mode the job, and any job it chains, runs before this
        returns and the snapshot carries its outcome.
        """
        lane = Lane(lane)
        result = self._tasks[lane].apply_async(
            kwargs={"payload": payload or {}},
            countdown=delay or None,
            priority=priority,
        )
        logger.debug("Enqueued job %s on %s (delay %.1fs)", result.id, lane.value, delay)
        if self.eager:
            return self._snapshot(result, lane)
        return Job(id=result.id, lane=lane)

    def get(self, job_id: str) -> Job:
        """Current state of a job. Unknown ids read as waiting."""
        return self._snapshot(self.app.AsyncResult(job_id))

    def _snapshot(self, result: Any, lane: Lane | None = None) -> Job:
        state = result.state
        status = STATE_STATUS.get(state, JobStatus.WAITING)
        info = result.info
        progress = 0
        if status is JobStatus.COMPLETED:
            progress = 100
        elif state == PROGRESS and isinstance(info, dict):
            progress = int(info.get("progress", 0))
        return Job(
            id=result.id,
            lane=lane or self._lanes_by_task.get(result.name),
            status=status,
            progress=progress,
            result=info if status is JobStatus.COMPLETED and isinstance(info, dict) else None,
            error=_error_text(info) if status is JobStatus.FAILED else None,
        )

    def run_worker(self, lanes: Iterable[Lane | str] | None = None, loglevel: str = "INFO") -> int:
        """Consume the given lanes one job at a time until a shutdown signal.

        Returns:
            The worker's exit code.
        """
        selected = [Lane(lane).value for lane in lanes] if lanes else [lane.value for lane in Lane]
        logger.info("Worker started for lanes: %s", ", ".join(selected))
        worker = self.app.Worker(
            queues=selected,
            loglevel=loglevel,
            without_gossip=True,
            without_mingle=True,
            without_heartbeat=True,
        )
        worker.start()
        logger.info("Worker stopped for lanes: %s", ", ".join(selected))
        return worker.exitcode or 0

    def stats(self) -> dict[str, dict[str, int]]:
        """Job counts per lane and status.

        Waiting counts come from the broker; the rest from stored results.
        """
        counts = {lane.value: {status.value: 0 for status in JobStatus} for lane in Lane}

        session = self.app.backend.ResultSession()
        with session_cleanup(session):
            rows = (
                session.query(TaskExtended.name, TaskExtended.status, func.count(TaskExtended.id))
                .group_by(TaskExtended.name, TaskExtended.status)
                .all()
            )
        for name, state, count in rows:
            lane = self._lanes_by_task.get(name)
            status = STATE_STATUS.get(state, JobStatus.WAITING)
            # Waiting and retrying jobs are still messages on the broker
            if lane is None or status is JobStatus.WAITING:
                continue
            counts[lane.value][status.value] += count

        with self.app.connection_for_read() as conn:
            channel = conn.default_channel
            for lane in Lane:
                waiting = channel.queue_declare(queue=lane.value).message_count
                counts[lane.value][JobStatus.WAITING.value] = waiting
        return counts

    def clean(
        self,
        completed_age: timedelta = timedelta(hours=24),
        failed_age: timedelta = timedelta(days=7),
    ) -> int:
        """Delete finished job results older than the given ages. Returns rows removed."""
        now = datetime.now(UTC).replace(tzinfo=None)
        session = self.app.backend.ResultSession()
        with session_cleanup(session):
            removed = 0
            for finished, age in (
                ([states.SUCCESS], completed_age),
                ([states.FAILURE, states.REVOKED], failed_age),
            ):
                removed += (
                    session.query(TaskExtended)
                    .filter(TaskExtended.status.in_(finished), TaskExtended.date_done < now - age)
                    .delete(synchronize_session=False)
                )
            session.commit()
        if removed:
            logger.info("Cleaned %d old jobs", removed)
        return removed
