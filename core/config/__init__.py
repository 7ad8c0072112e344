# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Module

Provides startup configuration for the health probe service.
"""

from core.config.health import HealthConfig, POSITIVE_INT_PATTERN

__all__ = [
    "HealthConfig",
    "POSITIVE_INT_PATTERN",
]
