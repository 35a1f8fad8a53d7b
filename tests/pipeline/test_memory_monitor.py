# tests/pipeline/test_memory_monitor.py
"""Tests for MemoryMonitor."""

from faqtory.pipeline import MemoryMonitor
from faqtory.pipeline.memory import MB, process_rss_bytes


class ReclaimingMemory(MemoryMonitor):
    """Usage drops by `freed` bytes on every reclamation."""

    def __init__(self, used: int, threshold: int, freed: int = 0) -> None:
        super().__init__(threshold, usage=lambda: self.used)
        self.used = used
        self.freed = freed
        self.reclaims = 0

    def reclaim(self) -> int:
        self.reclaims += 1
        self.used -= self.freed
        return 0


class TestMemoryMonitor:
    def test_real_process_usage(self):
        assert process_rss_bytes() > 0
        assert MemoryMonitor(1024 * MB).usage_bytes() > 0

    def test_under_threshold(self):
        memory = ReclaimingMemory(used=50 * MB, threshold=100 * MB)
        assert memory.check() is None
        assert memory.reclaims == 0

    def test_reclamation_recovers(self):
        memory = ReclaimingMemory(used=200 * MB, threshold=100 * MB, freed=150 * MB)
        assert memory.check() is None
        assert memory.reclaims == 1

    def test_still_over_after_reclamation(self):
        memory = ReclaimingMemory(used=200 * MB, threshold=100 * MB)
        sample = memory.check()
        assert sample is not None
        assert sample.used_mb == 200
        assert sample.threshold_mb == 100
        assert memory.reclaims == 1

    def test_reclaim_runs_collection(self):
        assert MemoryMonitor(1024 * MB).reclaim() >= 0
