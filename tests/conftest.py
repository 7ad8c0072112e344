# ============================================================================
# SHARED TEST FIXTURES
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Tests - Fakes for clocks, datastores and readers
# PURPOSE: Drive the health engine without sleeping, exiting or a database
# CREATED: 18 OCT 2026
# ============================================================================
"""
Shared fixtures.

- FakeClock: manual millisecond clock
- FakeDatastore: async pool stand-in with connection()/cursor() scopes
  that counts acquisitions and releases
- make_config: HealthConfig with small test-friendly thresholds
"""

from contextlib import asynccontextmanager
from typing import Callable, List, Optional

import psycopg
import pytest

from core.config.health import HealthConfig
from health.checks.resources import MemoryUsage


class FakeClock:
    """Manual monotonic clock in milliseconds."""

    def __init__(self, start: int = 1_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeCursor:
    def __init__(self, datastore: "FakeDatastore"):
        self.datastore = datastore

    async def __aenter__(self):
        self.datastore.cursors_opened += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.datastore.cursors_closed += 1
        return False

    async def execute(self, sql: str):
        self.datastore.queries.append(sql)
        if self.datastore.on_query:
            self.datastore.on_query()
        if self.datastore.query_error:
            raise self.datastore.query_error


class FakeConnection:
    def __init__(self, datastore: "FakeDatastore"):
        self.datastore = datastore

    def cursor(self) -> FakeCursor:
        return FakeCursor(self.datastore)


class FakeDatastore:
    """Stand-in for psycopg_pool.AsyncConnectionPool."""

    def __init__(
        self,
        connect_error: Optional[Exception] = None,
        query_error: Optional[Exception] = None,
        on_query: Optional[Callable[[], None]] = None,
    ):
        self.connect_error = connect_error
        self.query_error = query_error
        self.on_query = on_query
        self.connect_attempts = 0
        self.acquired = 0
        self.released = 0
        self.cursors_opened = 0
        self.cursors_closed = 0
        self.queries: List[str] = []

    @asynccontextmanager
    async def connection(self):
        self.connect_attempts += 1
        if self.connect_error:
            raise self.connect_error
        self.acquired += 1
        try:
            yield FakeConnection(self)
        finally:
            self.released += 1


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_datastore():
    """Factory for FakeDatastore instances."""
    def _make(
        healthy: bool = True,
        connect_error: Optional[Exception] = None,
        on_query: Optional[Callable[[], None]] = None,
    ) -> FakeDatastore:
        query_error = None if healthy else psycopg.OperationalError("server closed the connection")
        return FakeDatastore(
            connect_error=connect_error,
            query_error=query_error,
            on_query=on_query,
        )
    return _make


@pytest.fixture
def make_config(tmp_path):
    """Factory for HealthConfig with short, round thresholds."""
    def _make(**overrides) -> HealthConfig:
        params = dict(
            safe_heap_min_bytes=100,
            warm_up_wait_ms=1_000,
            request_timeout_ms=100,
            request_timeout_critical_ms=1_000,
            request_timeout_conditional_term_ms=10_000,
            request_timeout_clear_threshold=10,
            deploy_root=str(tmp_path),
        )
        params.update(overrides)
        return HealthConfig(**params)
    return _make


@pytest.fixture
def marker(tmp_path):
    """Create the suspend marker under the test deploy root."""
    path = tmp_path / ".health"
    path.write_text("")
    return path


def plenty_of_memory() -> MemoryUsage:
    return MemoryUsage(max=0, committed=10_000, used=1_000)


def long_uptime() -> int:
    return 10_000_000


@pytest.fixture
def readers():
    """Uptime and memory readers for a warm process with free memory."""
    return {"uptime_reader": long_uptime, "memory_reader": plenty_of_memory}
