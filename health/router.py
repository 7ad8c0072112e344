# ============================================================================
# HEALTH PROBE ROUTER
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Infrastructure - FastAPI probe endpoint
# PURPOSE: Load balancer probe endpoint with HTML status page
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Probe Router

FastAPI router exposing the composite probe.

Endpoints:
    GET/HEAD /health - Runs every check, returns a static HTML page.

Response Codes:
    200 - Healthy
    503 - Suspended, warming up, low on memory, or probe too slow
    500 - A datastore is unreachable

No details cross this boundary; causes are only in the logs. If the
watchdog reports a fatal condition the terminator is called before any
response is written.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from health.core import StatusOutcome, resolve_outcome
from health.engine import HealthEngine
from health.termination import Terminator, terminate_process

logger = logging.getLogger(__name__)

HTML_HEAD = '<head><meta charset="utf-8"/></head>'


def render_html(outcome: StatusOutcome) -> str:
    """Render the fixed status page for an outcome."""
    return (
        "<!doctype html><html>" + HTML_HEAD +
        '<body><div id="status"><h1>' +
        str(outcome.status_code) + '</h1></div><div id="message"><p>' +
        outcome.reason + "</p></div></body></html>"
    )


HTML_PAGES = {outcome: render_html(outcome) for outcome in StatusOutcome}


def build_health_router(
    engine: HealthEngine,
    terminator: Terminator = terminate_process,
    path: str = "/health",
) -> APIRouter:
    """
    Build the probe router around an engine.

    Args:
        engine: Health engine owning probe state
        terminator: Called with a FatalCondition; exits in production
        path: Probe path

    Returns:
        APIRouter with the probe route
    """
    router = APIRouter(tags=["Health"])

    @router.api_route(path, methods=["GET", "HEAD"], response_class=HTMLResponse)
    async def health_probe() -> HTMLResponse:
        result = await engine.probe()
        outcome = result.outcome

        if result.fatal is not None:
            terminator(result.fatal)
            # Only reached when the terminator returns (tests, embedding).
            outcome = resolve_outcome(outcome, StatusOutcome.SERVICE_UNAVAILABLE)

        return HTMLResponse(content=HTML_PAGES[outcome], status_code=outcome.status_code)

    return router


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HTML_PAGES",
    "build_health_router",
    "render_html",
]
