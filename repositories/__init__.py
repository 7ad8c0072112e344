# ============================================================================
# REPOSITORIES MODULE
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Core - Datastore access layer
# PURPOSE: Datastore handles probed by the liveness checks
# CREATED: 18 OCT 2026
# ============================================================================
"""
Repositories Module

Opens and closes the PostgreSQL pools the datastore checks probe.
Uses psycopg3 async with connection pooling.
"""

from .database import (
    close_datastore_pools,
    get_connection_string,
    open_datastore_pools,
)

__all__ = [
    "close_datastore_pools",
    "get_connection_string",
    "open_datastore_pools",
]
