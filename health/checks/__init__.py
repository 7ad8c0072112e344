# ============================================================================
# HEALTH CHECKS
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Infrastructure - Health check implementations
# PURPOSE: Sub-checks folded into the probe outcome
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Checks

Sub-checks run by the status aggregator, in priority order:

1. suspend: operator marker file present          (fail -> 503)
2. warm_up: process past its start-up grace period (fail -> 503)
3. heap: enough free memory                       (fail -> 503)
4. datastore_primary: primary answers SELECT 1    (fail -> 500)
5. datastore_secondary: secondary answers SELECT 1 (fail -> 500)
"""

from health.checks.suspend import SuspendChecker, SUSPEND_MARKER
from health.checks.resources import MemoryUsage, ResourceChecker
from health.checks.datastore import DatastoreChecker, DatastoreRole, ALIVE_SQL

__all__ = [
    # Suspend
    "SuspendChecker",
    "SUSPEND_MARKER",
    # Resources
    "MemoryUsage",
    "ResourceChecker",
    # Datastores
    "DatastoreChecker",
    "DatastoreRole",
    "ALIVE_SQL",
]
