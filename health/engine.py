# ============================================================================
# HEALTH ENGINE
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Infrastructure - Probe evaluation
# PURPOSE: Own probe state and run aggregation + watchdog per probe
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Engine

Owns everything that lives for the whole process: the ProcessHealthState,
the checkers (and so the cached datastore handles), the aggregator and the
watchdog. The probe handler gets an engine injected and calls probe().

Per probe:
    aggregate checks -> measure elapsed -> watchdog -> ProbeResult
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from core.config.health import HealthConfig
from core.logging import log_context
from health.aggregator import StatusAggregator
from health.checks import (
    DatastoreChecker,
    DatastoreRole,
    MemoryUsage,
    ResourceChecker,
    SuspendChecker,
)
from health.core import AggregatedStatus, ProcessHealthState, StatusOutcome
from health.registry import DatastoreRegistry, get_registry
from health.watchdog import FatalCondition, TimeoutWatchdog, monotonic_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeResult:
    """Final result of one probe."""
    outcome: StatusOutcome
    elapsed_ms: int
    status: AggregatedStatus
    fatal: Optional[FatalCondition] = None
    timed_out: bool = False

    @property
    def status_code(self) -> int:
        return self.outcome.status_code


class HealthEngine:
    """
    Composite health engine.

    Args:
        config: Probe thresholds
        registry: Datastore registry (uses global if None)
        state: Process state (fresh if None)
        clock: Monotonic millisecond clock, shared by elapsed and window timing
        uptime_reader: Override process uptime source (ms)
        memory_reader: Override memory usage source
    """

    def __init__(
        self,
        config: HealthConfig,
        registry: Optional[DatastoreRegistry] = None,
        state: Optional[ProcessHealthState] = None,
        clock: Optional[Callable[[], int]] = None,
        uptime_reader: Optional[Callable[[], int]] = None,
        memory_reader: Optional[Callable[[], MemoryUsage]] = None,
    ):
        self.config = config
        self.registry = registry if registry is not None else get_registry()
        self.state = state or ProcessHealthState()
        self.clock = clock or monotonic_ms

        self.suspend_checker = SuspendChecker(config.deploy_root)
        self.resource_checker = ResourceChecker(
            config,
            self.state,
            uptime_reader=uptime_reader,
            memory_reader=memory_reader,
        )
        self.primary = DatastoreChecker(
            DatastoreRole.PRIMARY, config.primary_datastore_name, self.registry
        )
        self.secondary = DatastoreChecker(
            DatastoreRole.SECONDARY, config.secondary_datastore_name, self.registry
        )

        self.aggregator = StatusAggregator(
            self.suspend_checker,
            self.resource_checker,
            self.primary,
            self.secondary,
        )
        self.watchdog = TimeoutWatchdog(config, self.state, clock=self.clock)

    async def probe(self) -> ProbeResult:
        """
        Evaluate one probe.

        Returns:
            ProbeResult. A non-None ``fatal`` means the caller must
            terminate the process.
        """
        with log_context(probe_id=uuid.uuid4().hex[:8]):
            start = self.clock()
            status = await self.aggregator.aggregate()
            elapsed_ms = self.clock() - start

            decision = self.watchdog.evaluate(status.outcome, elapsed_ms)

            logger.debug(
                f"Probe finished: {decision.outcome.status_code} in {elapsed_ms}ms",
                extra={"extra": status.to_dict()},
            )

            return ProbeResult(
                outcome=decision.outcome,
                elapsed_ms=elapsed_ms,
                status=status,
                fatal=decision.fatal,
                timed_out=decision.timed_out,
            )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthEngine",
    "ProbeResult",
]
