"""Background processing: supervised batches and the job queue."""

from faqtory.pipeline.handlers import ExtractionHandler, backfill_embeddings
from faqtory.pipeline.memory import MemoryMonitor
from faqtory.pipeline.processor import BatchProcessor, EventCallback, ItemHandler
from faqtory.pipeline.qualifier import ItemQualifier, Qualification
from faqtory.pipeline.queue import Job, JobContext, JobQueue, JobStatus, Lane
from faqtory.pipeline.state import RunState

__all__ = [
    "BatchProcessor",
    "EventCallback",
    "ExtractionHandler",
    "ItemHandler",
    "ItemQualifier",
    "Job",
    "JobContext",
    "JobQueue",
    "JobStatus",
    "Lane",
    "MemoryMonitor",
    "Qualification",
    "RunState",
    "backfill_embeddings",
]
