# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Core module initialization
# PURPOSE: Configuration and logging shared by all components
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================

from core.config import HealthConfig
from core.logging import configure_logging, get_logger, log_context

__all__ = [
    # Config
    "HealthConfig",
    # Logging
    "configure_logging",
    "get_logger",
    "log_context",
]
