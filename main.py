# ============================================================================
# HEALTH PROBE SERVICE - MAIN APPLICATION
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Core - FastAPI application entry point
# PURPOSE: Serve the composite health probe
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Probe Service Main Application

FastAPI application that:
1. Loads probe configuration from the environment
2. Opens the datastore pools and registers them by name
3. Serves the composite health probe at /health

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from __version__ import __version__, BUILD_DATE, EPOCH, SERVICE_NAME
from core.config import HealthConfig
from core.logging import ComponentType, configure_logging, get_logger
from health import DatastoreRegistry, HealthEngine, build_health_router, get_registry
from health.termination import Terminator, terminate_process
from repositories.database import close_datastore_pools, open_datastore_pools

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
)
logger = get_logger(__name__, ComponentType.API)


def create_app(
    config: Optional[HealthConfig] = None,
    registry: Optional[DatastoreRegistry] = None,
    terminator: Terminator = terminate_process,
    open_pools: bool = True,
) -> FastAPI:
    """
    Build the application around a single health engine.

    Args:
        config: Probe configuration (defaults to environment)
        registry: Datastore registry (uses global if None)
        terminator: Watchdog exit hook
        open_pools: Open datastore pools on startup

    Returns:
        FastAPI application
    """
    config = config or HealthConfig.from_env()
    registry = registry if registry is not None else get_registry()
    engine = HealthEngine(config, registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Opens datastore pools on startup, closes them on shutdown.
        """
        logger.info(f"Starting {SERVICE_NAME} v{__version__} (Epoch {EPOCH}, Build {BUILD_DATE})")
        config.log_summary()

        if open_pools:
            names = await open_datastore_pools(config, registry)
            logger.info(f"Datastores registered: {names or 'none'}")

        yield

        logger.info(f"Shutting down {SERVICE_NAME}...")
        if open_pools:
            await close_datastore_pools(registry)
        logger.info(f"{SERVICE_NAME} stopped")

    app = FastAPI(
        title="Health Probe",
        description="Composite health probe with self-terminating watchdog",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.health_engine = engine

    # Probe route (no prefix - /health)
    app.include_router(build_health_router(engine, terminator=terminator))

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": SERVICE_NAME,
            "version": __version__,
            "epoch": EPOCH,
            "build_date": BUILD_DATE,
            "probe": "/health",
        }

    return app


app = create_app()


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
    )
