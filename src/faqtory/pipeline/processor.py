# src/faqtory/pipeline/processor.py
"""Memory- and error-supervised batch processing of work items."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from uuid import uuid4

from faqtory.exceptions import CircuitBreakerOpen, ItemTimeout, ResourceExhausted
from faqtory.models import ItemStatus, PipelineEvent, ProcessingSummary, WorkItem
from faqtory.pipeline.memory import MemoryMonitor
from faqtory.pipeline.state import RunState
from faqtory.settings import ProcessorConfig
from faqtory.stores.base import ItemStore

logger = logging.getLogger(__name__)

# A handler returns the number of questions found for an item, or raises.
ItemHandler = Callable[[WorkItem], Awaitable[int] | int]
EventCallback = Callable[[PipelineEvent], None]


def _is_async(handler: ItemHandler) -> bool:
    return inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(
        getattr(handler, "__call__", None)
    )


def _discard_late_result(task: asyncio.Future) -> None:
    """Consume the outcome of a call that already timed out."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug("Timed-out item finished later with error: %s", error)


class BatchProcessor:
    """Runs a handler over work items in small supervised batches.

    Per batch, memory is checked (with one forced collection before giving
    up) and the circuit breaker is consulted. Each item runs under a
    timeout; a timed-out call is not cancelled and its late result is
    discarded. A failing item is marked failed and never stops its batch;
    only the run-level checks end a run early.

    Example:
        processor = BatchProcessor(ProcessorConfig(batch_size=2), item_store=items)
        summary = await processor.process_items(items.list_pending(), handler)
    """

    def __init__(
        self,
        config: ProcessorConfig | None = None,
        item_store: ItemStore | None = None,
        memory: MemoryMonitor | None = None,
    ) -> None:
        self.config = config or ProcessorConfig()
        self.item_store = item_store
        self.memory = memory or MemoryMonitor(self.config.memory_threshold_bytes)
        self._active: list[RunState] = []

    def request_stop(self) -> None:
        """Stop every active run once its in-flight items finish."""
        for state in self._active:
            state.stop_requested = True

    async def process_items(
        self,
        items: list[WorkItem],
        handler: ItemHandler,
        on_event: EventCallback | None = None,
        job_id: str | None = None,
    ) -> ProcessingSummary:
        """Process items batch by batch and report how the run ended.

        Never raises for item or run-level failures; those are reflected in
        the returned summary's status, error and counters.
        """
        job_id = job_id or str(uuid4())
        cfg = self.config
        batches = [items[i : i + cfg.batch_size] for i in range(0, len(items), cfg.batch_size)]
        state = RunState(total_items=len(items), total_batches=len(batches))
        summary = ProcessingSummary(job_id=job_id, total_items=len(items))
        started = time.monotonic()
        self._active.append(state)

        def emit(event_type: str, message: str | None = None, item: str | None = None) -> None:
            if on_event is None:
                return
            event = PipelineEvent(
                type=event_type,  # type: ignore[arg-type]
                job_id=job_id,
                processed=state.processed,
                questions_found=state.questions_found,
                errors=state.total_errors,
                total=state.total_items,
                current_batch=state.current_batch,
                total_batches=state.total_batches,
                current_item=item,
                message=message,
            )
            try:
                on_event(event)
            except Exception:
                logger.exception("Event callback failed for %s event", event_type)

        logger.info(
            "Starting job %s: %d items in %d batches of %d",
            job_id,
            len(items),
            len(batches),
            cfg.batch_size,
        )
        try:
            for number, batch in enumerate(batches, start=1):
                state.current_batch = number
                if state.stop_requested:
                    summary.status, summary.stop_reason = "stopped", "cancelled"
                    break

                self._check_memory(state)
                self._check_breaker(state)

                await self._process_batch(batch, handler, state, emit)
                emit("batch", f"Batch {number}/{state.total_batches} complete")

                if number % cfg.gc_interval == 0:
                    self.memory.reclaim()
                if number < len(batches) and not state.stop_requested:
                    await asyncio.sleep(cfg.batch_delay)
            else:
                if state.stop_requested and len(state.results) < len(items):
                    summary.status, summary.stop_reason = "stopped", "cancelled"
        except ResourceExhausted as e:
            summary.status, summary.stop_reason, summary.error = "stopped", "memory", str(e)
            logger.warning("Job %s stopped: %s", job_id, e)
            emit("warning", str(e))
        except CircuitBreakerOpen as e:
            summary.status, summary.stop_reason, summary.error = (
                "aborted",
                "circuit_breaker",
                str(e),
            )
            logger.error("Job %s aborted: %s (%s)", job_id, e, e.counters)
            emit("error", str(e))
        finally:
            self._active.remove(state)

        elapsed_ms = int((time.monotonic() - started) * 1000)
        attempted = state.processed + state.total_errors
        summary.processed = state.processed
        summary.questions_found = state.questions_found
        summary.errors = state.total_errors
        summary.processing_time_ms = elapsed_ms
        summary.avg_time_per_item_ms = elapsed_ms // attempted if attempted else 0
        summary.memory_peaks = state.memory_peaks
        summary.results = state.results

        logger.info(
            "Job %s %s: %d processed, %d questions, %d errors in %dms",
            job_id,
            summary.status,
            summary.processed,
            summary.questions_found,
            summary.errors,
            elapsed_ms,
        )
        emit("complete", summary.status)
        return summary

    def _check_memory(self, state: RunState) -> None:
        sample = self.memory.check()
        if sample is None:
            return
        state.memory_peaks.append(sample)
        raise ResourceExhausted(
            f"Memory usage {sample.used_mb}MB exceeds {sample.threshold_mb}MB after collection",
            counters=state.counters(),
        )

    def _check_breaker(self, state: RunState) -> None:
        cfg = self.config
        if state.consecutive_errors >= cfg.max_consecutive_errors:
            raise CircuitBreakerOpen(
                f"Too many consecutive errors ({state.consecutive_errors})",
                counters=state.counters(),
            )
        if state.total_errors >= cfg.max_total_errors:
            raise CircuitBreakerOpen(
                f"Too many total errors ({state.total_errors})",
                counters=state.counters(),
            )

    def _headroom(self, state: RunState) -> int:
        """Failures the run can still absorb before a breaker opens."""
        cfg = self.config
        return min(
            cfg.max_consecutive_errors - state.consecutive_errors,
            cfg.max_total_errors - state.total_errors,
        )

    async def _process_batch(
        self,
        batch: list[WorkItem],
        handler: ItemHandler,
        state: RunState,
        emit: Callable[..., None],
    ) -> None:
        """Run a batch in order, at most max_concurrency items at a time.

        A window holds no more items than the breakers have headroom for;
        items after an opened breaker stay pending.
        """
        remaining = list(batch)
        while remaining and not state.stop_requested:
            width = max(1, min(self.config.max_concurrency, self._headroom(state)))
            window, remaining = remaining[:width], remaining[width:]
            if width == 1:
                await self._process_one(window[0], handler, state, emit)
            else:
                await asyncio.gather(
                    *(self._process_one(item, handler, state, emit) for item in window)
                )
            self._check_breaker(state)

    async def _process_one(
        self,
        item: WorkItem,
        handler: ItemHandler,
        state: RunState,
        emit: Callable[..., None],
    ) -> None:
        if item.status.is_terminal:
            state.record_skip(item.id)
            return

        try:
            if not self._mark(item, ItemStatus.PROCESSING):
                state.record_skip(item.id)
                return
            found = await self._run_with_timeout(item, handler)
            self._mark(item, ItemStatus.COMPLETED, questions_found=found)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.warning("Item %s failed: %s", item.id, message)
            self._mark_failed(item, message)
            state.record_failure(item.id, message)
        else:
            state.record_success(item.id, found)

        emit("progress", item=item.id)

    async def _run_with_timeout(self, item: WorkItem, handler: ItemHandler) -> int:
        if _is_async(handler):
            task = asyncio.ensure_future(handler(item))  # type: ignore[arg-type]
        else:
            task = asyncio.ensure_future(asyncio.to_thread(handler, item))

        done, _ = await asyncio.wait({task}, timeout=self.config.item_timeout)
        if not done:
            task.add_done_callback(_discard_late_result)
            raise ItemTimeout(item.id, self.config.item_timeout)
        return int(task.result() or 0)

    def _mark(
        self,
        item: WorkItem,
        status: ItemStatus,
        error: str | None = None,
        questions_found: int | None = None,
    ) -> bool:
        if self.item_store is not None and not self.item_store.mark(
            item.id, status, error=error, questions_found=questions_found
        ):
            return False
        item.status = status
        item.error = error
        if questions_found is not None:
            item.questions_found = questions_found
        return True

    def _mark_failed(self, item: WorkItem, message: str) -> None:
        try:
            self._mark(item, ItemStatus.FAILED, error=message)
        except Exception:
            logger.exception("Could not record failure of item %s", item.id)
            item.status = ItemStatus.FAILED
            item.error = message
