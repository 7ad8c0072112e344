# ============================================================================
# TIMEOUT ESCALATION WATCHDOG
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Infrastructure - Probe latency watchdog
# PURPOSE: Decide between no-op, soft failure and process termination
# CREATED: 18 OCT 2026
# ============================================================================
"""
Timeout Escalation Watchdog

Consulted after every probe with the time the aggregation took.

Escalation:
1. elapsed >= critical             -> fatal (CRITICAL_TIMEOUT), immediately
2. timeout <= elapsed < critical   -> outcome escalated to 503 (first failure wins)
3. elapsed < timeout               -> fast probe; once `clear_threshold` fast
                                      probes have accumulated the window closes.
                                      Slow probes do not reset the count.
4. every non-critical probe        -> open the window if closed; if it has been
                                      open for >= conditional_term, fatal
                                      (CONDITIONAL_TERM)

The watchdog never exits the process itself. It returns a FatalCondition
and the probe handler hands it to health.termination.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from core.config.health import HealthConfig
from health.core import ProcessHealthState, StatusOutcome, resolve_outcome

logger = logging.getLogger(__name__)

# Exit statuses are truncated to 8 bits on POSIX, keep both below 256.
CRITICAL_TIMEOUT_EXIT_CODE = 90
CONDITIONAL_TERM_EXIT_CODE = 80


def monotonic_ms() -> int:
    """Monotonic clock in whole milliseconds."""
    return time.monotonic_ns() // 1_000_000


class FatalKind(str, Enum):
    """Why the watchdog wants the process gone."""
    CRITICAL_TIMEOUT = "critical_timeout"
    CONDITIONAL_TERM = "conditional_term"

    @property
    def exit_code(self) -> int:
        return {
            FatalKind.CRITICAL_TIMEOUT: CRITICAL_TIMEOUT_EXIT_CODE,
            FatalKind.CONDITIONAL_TERM: CONDITIONAL_TERM_EXIT_CODE,
        }[self]


@dataclass(frozen=True)
class FatalCondition:
    """Unrecoverable watchdog result, acted on by the process entry point."""
    kind: FatalKind
    elapsed_ms: int
    term_ms: Optional[int] = None

    @property
    def exit_code(self) -> int:
        return self.kind.exit_code

    @property
    def message(self) -> str:
        return f"Application is dead. I'll die. `exit {self.exit_code}`"


@dataclass(frozen=True)
class WatchdogDecision:
    """Outcome after escalation, plus a fatal condition if one was hit."""
    outcome: StatusOutcome
    fatal: Optional[FatalCondition] = None
    timed_out: bool = False


class TimeoutWatchdog:
    """
    Timeout escalation state machine.

    State lives in the shared ProcessHealthState; every read and write of
    the window and fast-probe counter happens under its lock, so concurrent
    probes see a consistent episode.
    """

    def __init__(
        self,
        config: HealthConfig,
        state: ProcessHealthState,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.config = config
        self.state = state
        self.clock = clock or monotonic_ms

    def evaluate(self, outcome: StatusOutcome, elapsed_ms: int) -> WatchdogDecision:
        """
        Escalate a probe outcome based on how long the probe took.

        Args:
            outcome: Outcome from the status aggregator
            elapsed_ms: Time spent aggregating this probe

        Returns:
            WatchdogDecision with the final outcome and optional fatal condition
        """
        if elapsed_ms >= self.config.request_timeout_critical_ms:
            logger.critical(f"Status: critical timeout. elapsed: {elapsed_ms}ms")
            return WatchdogDecision(
                outcome=outcome,
                fatal=FatalCondition(FatalKind.CRITICAL_TIMEOUT, elapsed_ms),
            )

        with self.state.lock:
            timed_out = self._record_latency(elapsed_ms)
            term_ms = self._window_term()

        if timed_out:
            logger.warning(f"Status: timeout. elapsed: {elapsed_ms}ms")
            outcome = resolve_outcome(outcome, StatusOutcome.SERVICE_UNAVAILABLE)

        fatal = None
        if term_ms >= self.config.request_timeout_conditional_term_ms:
            logger.critical(
                f"Status: conditional timeout. elapsed: {elapsed_ms}ms, term: {term_ms}ms"
            )
            fatal = FatalCondition(FatalKind.CONDITIONAL_TERM, elapsed_ms, term_ms)

        return WatchdogDecision(outcome=outcome, fatal=fatal, timed_out=timed_out)

    def _record_latency(self, elapsed_ms: int) -> bool:
        """Count fast probes toward clearing the window. Returns True for a slow probe."""
        state = self.state

        if elapsed_ms >= self.config.request_timeout_ms:
            return True

        state.consecutive_fast_count += 1
        if state.consecutive_fast_count >= self.config.request_timeout_clear_threshold:
            logger.debug(
                f"Timeout window cleared after {state.consecutive_fast_count} fast probes"
            )
            state.clear_window()

        return False

    def _window_term(self) -> int:
        """Open the window if needed and return how long it has been open."""
        now = self.clock()
        if self.state.timeout_window_start is None:
            self.state.timeout_window_start = now
        return now - self.state.timeout_window_start


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CRITICAL_TIMEOUT_EXIT_CODE",
    "CONDITIONAL_TERM_EXIT_CODE",
    "FatalKind",
    "FatalCondition",
    "WatchdogDecision",
    "TimeoutWatchdog",
    "monotonic_ms",
]
