# ============================================================================
# DATASTORE CONNECTION POOLS
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Core - Async PostgreSQL handles for liveness checks
# PURPOSE: Open one small pool per datastore role and register it by name
# CREATED: 18 OCT 2026
# ============================================================================
"""
Datastore Connection Pools

Builds the datastore handles the liveness checks resolve from the
registry. Uses psycopg3 async with psycopg_pool.

Each role is configured independently:
1. HEALTH_<ROLE>_DATABASE_URL, or
2. HEALTH_<ROLE>_POSTGRES_HOST plus optional _PORT, _DB, _USER,
   _PASSWORD, _SSLMODE

A role with neither is left unregistered; its check then reports the
datastore as unavailable.

Usage:
    from repositories.database import open_datastore_pools, close_datastore_pools

    await open_datastore_pools(config, registry)
    ...
    await close_datastore_pools(registry)
"""

import os
import logging
from typing import Dict, List, Mapping, Optional

from psycopg_pool import AsyncConnectionPool

from core.config.health import HealthConfig
from health.checks.datastore import DatastoreRole
from health.registry import DatastoreRegistry

logger = logging.getLogger(__name__)

# A probe needs a single connection; keep pools tiny.
POOL_MIN_SIZE = 1
POOL_MAX_SIZE = 2
CONNECT_TIMEOUT_SECONDS = 10


def get_connection_string(
    role: DatastoreRole,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """
    Get connection string for a datastore role from environment.

    Priority:
    1. HEALTH_<ROLE>_DATABASE_URL
    2. Individual HEALTH_<ROLE>_POSTGRES_* components

    Returns:
        PostgreSQL connection string, or None if the role is not configured
    """
    env = os.environ if environ is None else environ
    prefix = f"HEALTH_{role.value.upper()}_"

    if url := env.get(f"{prefix}DATABASE_URL"):
        return url

    host = env.get(f"{prefix}POSTGRES_HOST")
    if not host:
        return None

    port = env.get(f"{prefix}POSTGRES_PORT", "5432")
    name = env.get(f"{prefix}POSTGRES_DB", "postgres")
    user = env.get(f"{prefix}POSTGRES_USER", "postgres")
    password = env.get(f"{prefix}POSTGRES_PASSWORD", "")
    sslmode = env.get(f"{prefix}POSTGRES_SSLMODE", "require")

    return f"postgresql://{user}:{password}@{host}:{port}/{name}?sslmode={sslmode}"


def mask_conninfo(conninfo: str) -> str:
    """Strip credentials from a connection string for logging."""
    if "@" in conninfo:
        # URL format
        return conninfo.split("@")[-1]
    if "password=" in conninfo:
        # Key-value format
        head, _, tail = conninfo.partition("password=")
        _, _, rest = tail.partition(" ")
        return f"{head}password=*** {rest}".strip()
    return conninfo


def datastore_names(config: HealthConfig) -> Dict[DatastoreRole, str]:
    """Registry name for each datastore role."""
    return {
        DatastoreRole.PRIMARY: config.primary_datastore_name,
        DatastoreRole.SECONDARY: config.secondary_datastore_name,
    }


async def open_datastore_pools(
    config: HealthConfig,
    registry: DatastoreRegistry,
    environ: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """
    Open a pool for every configured role and register it.

    Pools are opened without waiting for a first connection, so an
    unreachable database doesn't block start-up; the probe reports it.

    Returns:
        Registry names that were registered
    """
    registered = []

    for role, name in datastore_names(config).items():
        conninfo = get_connection_string(role, environ)
        if conninfo is None:
            logger.info(f"No {role.value} datastore configured, '{name}' not registered")
            continue

        logger.info(f"Initializing {role.value} datastore pool: {mask_conninfo(conninfo)}")

        pool = AsyncConnectionPool(
            conninfo=conninfo,
            min_size=POOL_MIN_SIZE,
            max_size=POOL_MAX_SIZE,
            kwargs={"connect_timeout": CONNECT_TIMEOUT_SECONDS},
            name=name,
            open=False,  # We'll open it explicitly
        )
        await pool.open(wait=False)

        registry.register(name, pool)
        registered.append(name)

    return registered


async def close_datastore_pools(registry: DatastoreRegistry) -> None:
    """Close and unregister every pool in the registry."""
    for name, handle in registry.items():
        if isinstance(handle, AsyncConnectionPool):
            await handle.close()
            logger.info(f"Datastore pool closed: {name}")
        registry.unregister(name)


__all__ = [
    "get_connection_string",
    "mask_conninfo",
    "datastore_names",
    "open_datastore_pools",
    "close_datastore_pools",
]
