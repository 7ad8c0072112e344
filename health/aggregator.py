# ============================================================================
# STATUS AGGREGATOR
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Infrastructure - Ordered check execution
# PURPOSE: Fold sub-checks into one probe outcome (first failure wins)
# CREATED: 18 OCT 2026
# ============================================================================
"""
Status Aggregator

Runs the sub-checks in fixed priority order and folds them into one
StatusOutcome.

Execution Strategy:
1. Run every check sequentially, in order
2. The first failing check fixes the outcome
3. Later checks still run and log, but cannot change the outcome
4. Per-check timings are recorded for diagnostics
5. Synchronous checks (marker stat, psutil reads) run in the default
   executor, off the event loop thread

There is no early termination: the datastore round-trips still happen
after a suspend or memory failure.
"""

import asyncio
import contextvars
import logging
import time
from typing import Awaitable, Callable, List, Tuple, Union

from core.logging import log_context
from health.core import (
    AggregatedStatus,
    CheckOutcome,
    StatusOutcome,
    resolve_outcome,
)
from health.checks import DatastoreChecker, ResourceChecker, SuspendChecker

logger = logging.getLogger(__name__)

CheckFn = Callable[[], Union[bool, Awaitable[bool]]]

# (name, check, outcome on failure, check is a coroutine function)
CheckSpec = Tuple[str, CheckFn, StatusOutcome, bool]


class StatusAggregator:
    """
    Runs the five probe checks in priority order.

    Order:
        suspend, warm_up, heap             -> 503 on failure
        datastore_primary, _secondary      -> 500 on failure
    """

    def __init__(
        self,
        suspend_checker: SuspendChecker,
        resource_checker: ResourceChecker,
        primary: DatastoreChecker,
        secondary: DatastoreChecker,
    ):
        self._checks: List[CheckSpec] = [
            (
                "suspend",
                lambda: not suspend_checker.is_suspended(),
                StatusOutcome.SERVICE_UNAVAILABLE,
                False,
            ),
            ("warm_up", resource_checker.is_warmed_up, StatusOutcome.SERVICE_UNAVAILABLE, False),
            ("heap", resource_checker.has_heap_headroom, StatusOutcome.SERVICE_UNAVAILABLE, False),
            (
                f"datastore_{primary.role.value}",
                primary.is_alive,
                StatusOutcome.INTERNAL_ERROR,
                True,
            ),
            (
                f"datastore_{secondary.role.value}",
                secondary.is_alive,
                StatusOutcome.INTERNAL_ERROR,
                True,
            ),
        ]

    @property
    def check_names(self) -> List[str]:
        """Check names in execution order."""
        return [name for name, _, _, _ in self._checks]

    async def aggregate(self) -> AggregatedStatus:
        """
        Run all checks and fold their results.

        Returns:
            AggregatedStatus with the frozen outcome and every check result
        """
        start_time = time.monotonic()
        outcome = StatusOutcome.HEALTHY
        results = {}

        # TODO: skip datastore round-trips once the outcome is fixed, if the
        #       extra diagnostics stop being worth the latency.
        for name, check, failure_outcome, is_async in self._checks:
            with log_context(check=name):
                result = await self._execute_check(name, check, failure_outcome, is_async)
            results[name] = result

            if result.passed:
                continue

            if not outcome.is_healthy:
                logger.info(
                    f"Check {name} failed; outcome already {outcome.status_code}"
                )
            outcome = resolve_outcome(outcome, failure_outcome)

        return AggregatedStatus(
            outcome=outcome,
            checks=results,
            total_duration_ms=(time.monotonic() - start_time) * 1000,
        )

    async def _execute_check(
        self,
        name: str,
        check: CheckFn,
        failure_outcome: StatusOutcome,
        is_async: bool,
    ) -> CheckOutcome:
        """Execute a single check, converting stray errors to a failure."""
        start_time = time.monotonic()

        try:
            if is_async:
                passed = await check()
            else:
                # Run sync check in thread pool, keeping the log context
                loop = asyncio.get_running_loop()
                context = contextvars.copy_context()
                passed = await loop.run_in_executor(None, context.run, check)
        except Exception as e:
            logger.error(f"Health check {name} failed: {e}", exc_info=True)
            passed = False

        duration_ms = (time.monotonic() - start_time) * 1000
        logger.debug(
            f"Health check {name}: {'pass' if passed else 'fail'} ({duration_ms:.1f}ms)"
        )

        return CheckOutcome(
            name=name,
            passed=bool(passed),
            failure_outcome=failure_outcome,
            duration_ms=duration_ms,
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "StatusAggregator",
]
