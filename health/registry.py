# ============================================================================
# DATASTORE REGISTRY
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Infrastructure - Named datastore handle lookup
# PURPOSE: Register and look up datastore handles by name
# CREATED: 18 OCT 2026
# ============================================================================
"""
Datastore Registry

Component registry that datastore liveness checks resolve their handles
from. Handles are registered at startup (see repositories.database) and
looked up by name on first use.

A name that was never registered is a configuration state, not an error:
the corresponding check reports the datastore as unavailable.

Usage:
    registry = get_registry()
    registry.register("datastore_primary", pool)

    pool = registry.get("datastore_primary")
"""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class DatastoreRegistry:
    """
    Registry of named datastore handles.

    A handle is anything exposing an async ``connection()`` context
    manager, in practice a psycopg_pool.AsyncConnectionPool.
    """

    def __init__(self):
        self._handles: Dict[str, Any] = {}

    def register(self, name: str, handle: Any) -> None:
        """
        Register a datastore handle under a name.

        Args:
            name: Registry name (e.g. "datastore_primary")
            handle: Pool or other connection provider
        """
        if name in self._handles:
            logger.warning(f"Overwriting datastore handle: {name}")

        self._handles[name] = handle
        logger.debug(f"Registered datastore handle: {name}")

    def unregister(self, name: str) -> bool:
        """
        Remove a handle by name.

        Returns:
            True if handle was removed
        """
        if name in self._handles:
            del self._handles[name]
            return True
        return False

    def get(self, name: str) -> Optional[Any]:
        """Get handle by name."""
        return self._handles.get(name)

    def names(self) -> List[str]:
        """Get all registered names."""
        return list(self._handles)

    def items(self) -> List[tuple]:
        """Get (name, handle) pairs."""
        return list(self._handles.items())

    def clear(self) -> None:
        """Remove all registered handles."""
        self._handles.clear()

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, name: str) -> bool:
        return name in self._handles


# ============================================================================
# GLOBAL REGISTRY
# ============================================================================

_registry: Optional[DatastoreRegistry] = None


def get_registry() -> DatastoreRegistry:
    """Get the process-wide datastore registry."""
    global _registry
    if _registry is None:
        _registry = DatastoreRegistry()
    return _registry


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DatastoreRegistry",
    "get_registry",
]
