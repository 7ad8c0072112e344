# ============================================================================
# PROCESS TERMINATION
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Infrastructure - Watchdog exit
# PURPOSE: Turn a FatalCondition into an immediate process exit
# CREATED: 18 OCT 2026
# ============================================================================
"""
Process Termination

The only place that exits the process. An external supervisor is
expected to restart it.

Exit codes:
    90 - a single probe exceeded the critical timeout
    80 - the timeout window stayed open past the conditional term

os._exit is used so in-flight probes, lifespan shutdown and atexit hooks
are not awaited. Logging is flushed first.
"""

import logging
import os
from typing import Callable

from core.logging import ComponentType, get_logger, log_checkpoint
from health.watchdog import FatalCondition

logger = get_logger(__name__, ComponentType.WATCHDOG)

Terminator = Callable[[FatalCondition], None]


def terminate_process(fatal: FatalCondition) -> None:
    """Log the fatal condition and exit immediately. Does not return."""
    logger.critical(fatal.message)
    log_checkpoint(
        "watchdog_terminate",
        data={
            "kind": fatal.kind.value,
            "exit_code": fatal.exit_code,
            "elapsed_ms": fatal.elapsed_ms,
            "term_ms": fatal.term_ms,
        },
        level=logging.CRITICAL,
    )
    logging.shutdown()
    os._exit(fatal.exit_code)


__all__ = [
    "Terminator",
    "terminate_process",
]
