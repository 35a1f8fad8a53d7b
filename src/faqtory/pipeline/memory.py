# src/faqtory/pipeline/memory.py
"""Resident memory supervision for processing runs."""

import gc
import logging
from collections.abc import Callable

import psutil

from faqtory.models import MemorySample

logger = logging.getLogger(__name__)

MB = 1024 * 1024


def process_rss_bytes() -> int:
    """Resident set size of the current process."""
    return psutil.Process().memory_info().rss


class MemoryMonitor:
    """Compares process memory against a hard threshold.

    Args:
        threshold_bytes: Usage above this triggers reclamation
        usage: Callable returning current usage in bytes (defaults to RSS)
    """

    def __init__(
        self,
        threshold_bytes: int,
        usage: Callable[[], int] = process_rss_bytes,
    ) -> None:
        self.threshold_bytes = threshold_bytes
        self._usage = usage

    def usage_bytes(self) -> int:
        return self._usage()

    def sample(self) -> MemorySample:
        return MemorySample(
            used_mb=self.usage_bytes() // MB,
            threshold_mb=self.threshold_bytes // MB,
        )

    def is_over(self) -> bool:
        return self.usage_bytes() > self.threshold_bytes

    def reclaim(self) -> int:
        """Run a full garbage collection. Returns the number of objects collected."""
        collected = gc.collect()
        logger.debug("Garbage collection freed %d objects", collected)
        return collected

    def check(self) -> MemorySample | None:
        """Return None when usage is within bounds, reclaiming first if needed.

        If usage is still over the threshold after reclamation, the sample
        taken after reclamation is returned.
        """
        if not self.is_over():
            return None
        before = self.sample()
        logger.warning(
            "Memory usage high (%dMB of %dMB), forcing garbage collection",
            before.used_mb,
            before.threshold_mb,
        )
        self.reclaim()
        if not self.is_over():
            return None
        return self.sample()
