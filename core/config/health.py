# ============================================================================
# HEALTH PROBE CONFIGURATION
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Core - Probe thresholds and datastore names
# PURPOSE: Immutable startup configuration for the health engine
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Probe Configuration

Startup parameters for the composite health probe and its watchdog.

Design:
- Immutable dataclass, built once at startup
- Environment variable overrides
- Integer parameters must be strictly positive (^[1-9][0-9]*$);
  anything else silently keeps the default

Environment variables:
    HEALTH_SAFE_HEAP_MIN_BYTES                  Minimum free memory (bytes)
    HEALTH_HEAP_MAX_BYTES                       Memory cap for the process (bytes)
    HEALTH_WARM_UP_WAIT_MS                      Grace period after start
    HEALTH_REQUEST_TIMEOUT_MS                   Slow probe threshold
    HEALTH_REQUEST_TIMEOUT_CRITICAL_MS          Single-probe kill threshold
    HEALTH_REQUEST_TIMEOUT_CONDITIONAL_TERM_MS  Uncleared window kill threshold
    HEALTH_REQUEST_TIMEOUT_CLEAR_THRESHOLD      Fast probes needed to clear window
    HEALTH_DEPLOY_ROOT                          Directory holding the .health marker
    HEALTH_PRIMARY_DATASTORE_NAME               Registry name of the primary datastore
    HEALTH_SECONDARY_DATASTORE_NAME             Registry name of the secondary datastore
"""

import logging
import os
import re
from dataclasses import dataclass, field, fields
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

POSITIVE_INT_PATTERN = re.compile(r"^[1-9][0-9]*$")


def _positive_int(
    environ: Mapping[str, str],
    name: str,
    default: int,
) -> int:
    """Read a strictly positive integer, falling back to default."""
    raw = environ.get(name)
    if raw is None:
        return default
    if not POSITIVE_INT_PATTERN.match(raw):
        logger.debug(f"Ignoring invalid value for {name}: {raw!r}")
        return default
    return int(raw)


def _non_empty(
    environ: Mapping[str, str],
    name: str,
    default: str,
) -> str:
    return environ.get(name) or default


@dataclass(frozen=True)
class HealthConfig:
    """
    Thresholds for the health probe.

    All durations are in milliseconds.
    """
    # Resource checks
    safe_heap_min_bytes: int = 1_000_000_000  # 1 GB
    heap_max_bytes: int = 0  # 0 = no cap, use committed memory
    warm_up_wait_ms: int = 120_000  # 2 min

    # Watchdog
    request_timeout_ms: int = 10_000  # 10 sec
    request_timeout_critical_ms: int = 300_000  # 5 min
    request_timeout_conditional_term_ms: int = 900_000  # 15 min
    request_timeout_clear_threshold: int = 10

    # Suspend marker lives under this directory
    deploy_root: str = field(default_factory=os.getcwd)

    # Datastore registry names
    primary_datastore_name: str = "datastore_primary"
    secondary_datastore_name: str = "datastore_secondary"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HealthConfig":
        """Create from environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            safe_heap_min_bytes=_positive_int(
                env, "HEALTH_SAFE_HEAP_MIN_BYTES", defaults.safe_heap_min_bytes
            ),
            heap_max_bytes=_positive_int(
                env, "HEALTH_HEAP_MAX_BYTES", defaults.heap_max_bytes
            ),
            warm_up_wait_ms=_positive_int(
                env, "HEALTH_WARM_UP_WAIT_MS", defaults.warm_up_wait_ms
            ),
            request_timeout_ms=_positive_int(
                env, "HEALTH_REQUEST_TIMEOUT_MS", defaults.request_timeout_ms
            ),
            request_timeout_critical_ms=_positive_int(
                env,
                "HEALTH_REQUEST_TIMEOUT_CRITICAL_MS",
                defaults.request_timeout_critical_ms,
            ),
            request_timeout_conditional_term_ms=_positive_int(
                env,
                "HEALTH_REQUEST_TIMEOUT_CONDITIONAL_TERM_MS",
                defaults.request_timeout_conditional_term_ms,
            ),
            request_timeout_clear_threshold=_positive_int(
                env,
                "HEALTH_REQUEST_TIMEOUT_CLEAR_THRESHOLD",
                defaults.request_timeout_clear_threshold,
            ),
            deploy_root=_non_empty(env, "HEALTH_DEPLOY_ROOT", defaults.deploy_root),
            primary_datastore_name=_non_empty(
                env, "HEALTH_PRIMARY_DATASTORE_NAME", defaults.primary_datastore_name
            ),
            secondary_datastore_name=_non_empty(
                env, "HEALTH_SECONDARY_DATASTORE_NAME", defaults.secondary_datastore_name
            ),
        )

    def log_summary(self, log: Optional[logging.Logger] = None) -> None:
        """Log every effective value at DEBUG."""
        log = log or logger
        for f in fields(self):
            log.debug(f"{f.name}: {getattr(self, f.name)}")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthConfig",
    "POSITIVE_INT_PATTERN",
]
