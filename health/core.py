# ============================================================================
# HEALTH CHECK CORE TYPES
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Infrastructure - Outcome and result types
# PURPOSE: Status outcomes, first-failure-wins resolution, check results
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Core Types

Status Outcomes (first failure wins):
- HEALTHY (200): every check passed
- SERVICE_UNAVAILABLE (503): suspended, warming up, low memory, or slow
- INTERNAL_ERROR (500): a datastore is unreachable

Unlike a 'worst wins' fold, the outcome is frozen by the first failing
check in execution order. Later failures are logged but never override it.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class StatusOutcome(Enum):
    """Probe outcome: HTTP status code plus fixed reason phrase."""
    HEALTHY = (200, "OK")
    SERVICE_UNAVAILABLE = (503, "Service Unavailable")
    INTERNAL_ERROR = (500, "Internal Server Error")

    @property
    def status_code(self) -> int:
        return self.value[0]

    @property
    def reason(self) -> str:
        return self.value[1]

    @property
    def is_healthy(self) -> bool:
        return self is StatusOutcome.HEALTHY


def resolve_outcome(current: StatusOutcome, new: StatusOutcome) -> StatusOutcome:
    """
    Apply a failure to the running outcome.

    Only a still-healthy outcome can change; anything already set is kept.
    """
    if current is StatusOutcome.HEALTHY:
        return new
    return current


@dataclass
class CheckOutcome:
    """Result from a single sub-check within one probe."""
    name: str
    passed: bool
    failure_outcome: StatusOutcome
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "failure_outcome": self.failure_outcome.name,
            "duration_ms": round(self.duration_ms, 2),
        }


@dataclass
class AggregatedStatus:
    """Outcome of one aggregation pass, with every check in run order."""
    outcome: StatusOutcome
    checks: Dict[str, CheckOutcome] = field(default_factory=dict)
    total_duration_ms: float = 0.0

    @property
    def first_failure(self) -> Optional[CheckOutcome]:
        """The check that decided the outcome, if any."""
        for check in self.checks.values():
            if not check.passed:
                return check
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.outcome.status_code,
            "reason": self.outcome.reason,
            "checks": {
                name: check.to_dict()
                for name, check in self.checks.items()
            },
            "total_duration_ms": round(self.total_duration_ms, 2),
        }


@dataclass
class ProcessHealthState:
    """
    Mutable per-process probe state, owned by the health engine.

    - warmed_up: flips False -> True once and never reverts
    - timeout_window_start: monotonic ms when the current unhealthy
      episode opened, or None when cleared
    - consecutive_fast_count: fast probes since the window was last cleared

    Watchdog fields are only touched while holding ``lock``.
    """
    warmed_up: bool = False
    timeout_window_start: Optional[int] = None
    consecutive_fast_count: int = 0
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def clear_window(self) -> None:
        """Close the unhealthy episode. Caller holds the lock."""
        self.timeout_window_start = None
        self.consecutive_fast_count = 0


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "StatusOutcome",
    "resolve_outcome",
    "CheckOutcome",
    "AggregatedStatus",
    "ProcessHealthState",
]
