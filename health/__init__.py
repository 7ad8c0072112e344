# ============================================================================
# HEALTH CHECK MODULE
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Infrastructure - Composite health probe
# PURPOSE: Load balancer probe with self-terminating watchdog
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Module

Composite health probe for a single service instance:
- Sub-checks: suspend marker, warm-up, memory headroom, two datastores
- Aggregation: fixed order, first failure wins, every check still runs
- Watchdog: slow probes degrade to 503; a critically slow probe or a
  timeout window that never clears terminates the process

Architecture:
- StatusAggregator: ordered check execution
- TimeoutWatchdog: timeout escalation state machine
- HealthEngine: owns process state, runs one probe
- build_health_router: FastAPI endpoint around an engine

Usage:
    from health import HealthEngine, build_health_router

    engine = HealthEngine(HealthConfig.from_env())
    app.include_router(build_health_router(engine))
"""

from health.core import (
    StatusOutcome,
    CheckOutcome,
    AggregatedStatus,
    ProcessHealthState,
    resolve_outcome,
)
from health.registry import DatastoreRegistry, get_registry
from health.aggregator import StatusAggregator
from health.watchdog import (
    CRITICAL_TIMEOUT_EXIT_CODE,
    CONDITIONAL_TERM_EXIT_CODE,
    FatalCondition,
    FatalKind,
    TimeoutWatchdog,
)
from health.engine import HealthEngine, ProbeResult
from health.router import build_health_router

__all__ = [
    # Core types
    "StatusOutcome",
    "CheckOutcome",
    "AggregatedStatus",
    "ProcessHealthState",
    "resolve_outcome",
    # Registry
    "DatastoreRegistry",
    "get_registry",
    # Aggregation
    "StatusAggregator",
    # Watchdog
    "CRITICAL_TIMEOUT_EXIT_CODE",
    "CONDITIONAL_TERM_EXIT_CODE",
    "FatalCondition",
    "FatalKind",
    "TimeoutWatchdog",
    # Engine
    "HealthEngine",
    "ProbeResult",
    # Router
    "build_health_router",
]
