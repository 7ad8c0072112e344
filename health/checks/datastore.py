# ============================================================================
# DATASTORE HEALTH CHECKS
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Infrastructure - PostgreSQL liveness
# PURPOSE: Verify primary and secondary datastores answer SELECT 1
# CREATED: 18 OCT 2026
# ============================================================================
"""
Datastore Health Checks

One checker per datastore role (primary, secondary). Each resolves its
handle from the DatastoreRegistry on first use and keeps it for the life
of the process; a datastore that later goes away shows up as a failed
query, not as a fresh lookup.

A role whose name was never registered reports unavailable without
attempting a connection.
"""

import logging
from enum import Enum
from typing import Any, Optional

import psycopg

from core.logging import log_context
from health.registry import DatastoreRegistry

logger = logging.getLogger(__name__)

ALIVE_SQL = "SELECT 1"


class DatastoreRole(str, Enum):
    """Logical datastore roles probed by the health check."""
    PRIMARY = "primary"
    SECONDARY = "secondary"


class DatastoreChecker:
    """
    Liveness check for a single datastore role.

    Attributes:
        role: Datastore role
        name: Registry name the handle is looked up by
    """

    def __init__(self, role: DatastoreRole, name: str, registry: DatastoreRegistry):
        self.role = role
        self.name = name
        self.registry = registry
        self._handle: Optional[Any] = None

    @property
    def cached_handle(self) -> Optional[Any]:
        return self._handle

    def resolve(self) -> Optional[Any]:
        """Return the cached handle, looking it up once if needed."""
        if self._handle is not None:
            return self._handle
        if self.name not in self.registry:
            return None
        # Racing probes may both resolve; the last assignment wins.
        self._handle = self.registry.get(self.name)
        return self._handle

    async def is_alive(self) -> bool:
        with log_context(role=self.role.value):
            return await self._query_alive()

    async def _query_alive(self) -> bool:
        handle = self.resolve()
        if handle is None:
            logger.warning(
                f"Status: failed connect to {self.role.value}, "
                f"datastore '{self.name}' is not registered"
            )
            return False

        try:
            async with handle.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(ALIVE_SQL)
            return True
        except psycopg.Error:
            logger.warning(f"Status: failed connect to {self.role.value}", exc_info=True)
            return False


__all__ = [
    "ALIVE_SQL",
    "DatastoreRole",
    "DatastoreChecker",
]
