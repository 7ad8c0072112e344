# ============================================================================
# RESOURCE HEALTH CHECKS
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Infrastructure - Warm-up and memory headroom
# PURPOSE: Process-level readiness checks backed by psutil
# CREATED: 18 OCT 2026
# ============================================================================
"""
Resource Health Checks

Two independent checks:
- Warm-up: process uptime has passed the configured grace period.
  Once warm, always warm (sticky in ProcessHealthState).
- Memory headroom: available = (max if max > 0 else committed) - used,
  healthy iff available > safe_heap_min_bytes. Recomputed every probe.

Memory figures for a Python process:
- used: resident set size of this process
- committed: used plus what the host can still hand out
- max: optional configured cap (HEALTH_HEAP_MAX_BYTES), 0 when unset
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import psutil

from core.config.health import HealthConfig
from health.core import ProcessHealthState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemoryUsage:
    """Point-in-time memory figures, in bytes."""
    max: int
    committed: int
    used: int

    @property
    def available(self) -> int:
        return (self.max if self.max > 0 else self.committed) - self.used


def process_uptime_ms() -> int:
    """Milliseconds since this process was created."""
    created = psutil.Process().create_time()
    return int((time.time() - created) * 1000)


def make_memory_reader(max_bytes: int = 0) -> Callable[[], MemoryUsage]:
    """Build a reader reporting this process against an optional cap."""
    process = psutil.Process()

    def read() -> MemoryUsage:
        used = process.memory_info().rss
        host_available = psutil.virtual_memory().available
        return MemoryUsage(max=max_bytes, committed=used + host_available, used=used)

    return read


class ResourceChecker:
    """
    Warm-up and memory headroom checks.

    Readers are injectable so tests can drive uptime and memory directly.
    """

    def __init__(
        self,
        config: HealthConfig,
        state: ProcessHealthState,
        uptime_reader: Optional[Callable[[], int]] = None,
        memory_reader: Optional[Callable[[], MemoryUsage]] = None,
    ):
        self.config = config
        self.state = state
        self.uptime_reader = uptime_reader or process_uptime_ms
        self.memory_reader = memory_reader or make_memory_reader(config.heap_max_bytes)

    def is_warmed_up(self) -> bool:
        if self.state.warmed_up:
            return True

        try:
            uptime = self.uptime_reader()
        except (psutil.Error, OSError):
            logger.warning("Status: uptime unavailable, treating as not warmed up", exc_info=True)
            return False

        if uptime >= self.config.warm_up_wait_ms:
            self.state.warmed_up = True
            logger.info(f"Status: warmed up after {uptime}ms")
            return True

        logger.warning(
            f"Status: not yet warmed up. "
            f"{self.config.warm_up_wait_ms - uptime}ms remaining time."
        )
        return False

    def has_heap_headroom(self) -> bool:
        try:
            usage = self.memory_reader()
        except (psutil.Error, OSError):
            logger.warning("Status: memory usage unavailable", exc_info=True)
            return False

        if usage.available > self.config.safe_heap_min_bytes:
            return True

        logger.warning(
            f"Status: heap memory is over warning threshold. "
            f"max: {usage.max}, committed: {usage.committed}, "
            f"used: {usage.used}, available: {usage.available}"
        )
        return False


__all__ = [
    "MemoryUsage",
    "ResourceChecker",
    "make_memory_reader",
    "process_uptime_ms",
]
