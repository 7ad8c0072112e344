# ============================================================================
# SUB-CHECK TESTS
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Tests - Suspend, resource and datastore checks
# PURPOSE: Verify each sub-check in isolation
# CREATED: 18 OCT 2026
# ============================================================================
"""
Sub-Check Tests

Covers:
1. Suspend marker present / absent / unreadable
2. Warm-up threshold and stickiness
3. Memory headroom with and without a cap
4. Datastore lookup caching and connection scoping

Run with:
    pytest tests/test_checks.py -v
"""

import asyncio
import logging

import psutil
import psycopg
import pytest

from health.checks import (
    ALIVE_SQL,
    DatastoreChecker,
    DatastoreRole,
    MemoryUsage,
    ResourceChecker,
    SuspendChecker,
)
from health.core import ProcessHealthState
from health.registry import DatastoreRegistry


# ============================================================================
# SUSPEND
# ============================================================================

class TestSuspendChecker:

    def test_marker_present_is_not_suspended(self, tmp_path, marker):
        assert SuspendChecker(str(tmp_path)).is_suspended() is False

    def test_marker_absent_is_suspended(self, tmp_path, caplog):
        with caplog.at_level(logging.INFO, logger="health.checks.suspend"):
            assert SuspendChecker(str(tmp_path)).is_suspended() is True
        assert "Status: suspending" in caplog.text

    def test_marker_directory_is_suspended(self, tmp_path):
        (tmp_path / ".health").mkdir()
        assert SuspendChecker(str(tmp_path)).is_suspended() is True

    def test_malformed_path_fails_closed(self, caplog):
        checker = SuspendChecker("bad\x00root")
        with caplog.at_level(logging.WARNING, logger="health.checks.suspend"):
            assert checker.is_suspended() is True
        assert "Status: suspending" in caplog.text

    def test_missing_root_is_suspended(self, tmp_path):
        assert SuspendChecker(str(tmp_path / "nope")).is_suspended() is True


# ============================================================================
# RESOURCES
# ============================================================================

class TestMemoryUsage:

    def test_uses_max_when_set(self):
        assert MemoryUsage(max=1000, committed=5000, used=200).available == 800

    def test_falls_back_to_committed(self):
        assert MemoryUsage(max=0, committed=5000, used=200).available == 4800
        assert MemoryUsage(max=-1, committed=5000, used=200).available == 4800


class TestWarmUp:

    def _checker(self, make_config, uptime_reader, state=None):
        return ResourceChecker(
            make_config(warm_up_wait_ms=1_000),
            state or ProcessHealthState(),
            uptime_reader=uptime_reader,
            memory_reader=lambda: MemoryUsage(0, 10_000, 0),
        )

    def test_not_warm_before_threshold(self, make_config, caplog):
        checker = self._checker(make_config, lambda: 400)
        with caplog.at_level(logging.WARNING, logger="health.checks.resources"):
            assert checker.is_warmed_up() is False
        assert "600ms remaining time" in caplog.text
        assert checker.state.warmed_up is False

    def test_warm_at_threshold(self, make_config):
        checker = self._checker(make_config, lambda: 1_000)
        assert checker.is_warmed_up() is True
        assert checker.state.warmed_up is True

    def test_warm_up_is_sticky(self, make_config):
        uptimes = iter([2_000, 10])
        checker = self._checker(make_config, lambda: next(uptimes))
        assert checker.is_warmed_up() is True
        # Uptime regressing must not flip it back
        assert checker.is_warmed_up() is True
        assert next(uptimes) == 10

    def test_warm_state_skips_uptime_read(self, make_config):
        def broken():
            raise AssertionError("uptime should not be read")

        state = ProcessHealthState(warmed_up=True)
        assert self._checker(make_config, broken, state).is_warmed_up() is True

    def test_unreadable_uptime_is_not_warm(self, make_config):
        def broken():
            raise psutil.AccessDenied()

        assert self._checker(make_config, broken).is_warmed_up() is False


class TestHeapHeadroom:

    def _checker(self, make_config, usage):
        return ResourceChecker(
            make_config(safe_heap_min_bytes=1_000),
            ProcessHealthState(),
            uptime_reader=lambda: 0,
            memory_reader=lambda: usage,
        )

    def test_enough_headroom(self, make_config):
        assert self._checker(make_config, MemoryUsage(0, 5_000, 1_000)).has_heap_headroom() is True

    def test_exactly_minimum_is_not_enough(self, make_config):
        assert self._checker(make_config, MemoryUsage(0, 2_000, 1_000)).has_heap_headroom() is False

    def test_cap_is_preferred_over_committed(self, make_config, caplog):
        checker = self._checker(make_config, MemoryUsage(1_500, 50_000, 1_000))
        with caplog.at_level(logging.WARNING, logger="health.checks.resources"):
            assert checker.has_heap_headroom() is False
        assert "available: 500" in caplog.text

    def test_recomputed_every_call(self, make_config):
        usages = iter([MemoryUsage(0, 5_000, 1_000), MemoryUsage(0, 5_000, 4_500)])
        checker = ResourceChecker(
            make_config(safe_heap_min_bytes=1_000),
            ProcessHealthState(),
            uptime_reader=lambda: 0,
            memory_reader=lambda: next(usages),
        )
        assert checker.has_heap_headroom() is True
        assert checker.has_heap_headroom() is False

    def test_default_reader_reports_this_process(self, make_config):
        checker = ResourceChecker(make_config(), ProcessHealthState())
        usage = checker.memory_reader()
        assert usage.used > 0
        assert usage.committed >= usage.used


# ============================================================================
# DATASTORES
# ============================================================================

class TestDatastoreChecker:

    def test_unregistered_name_fails_without_connecting(self, caplog):
        checker = DatastoreChecker(DatastoreRole.PRIMARY, "db_main", DatastoreRegistry())
        with caplog.at_level(logging.WARNING, logger="health.checks.datastore"):
            assert asyncio.run(checker.is_alive()) is False
        assert "not registered" in caplog.text
        assert checker.cached_handle is None

    def test_healthy_datastore(self, make_datastore):
        registry = DatastoreRegistry()
        datastore = make_datastore()
        registry.register("db_main", datastore)

        checker = DatastoreChecker(DatastoreRole.PRIMARY, "db_main", registry)
        assert asyncio.run(checker.is_alive()) is True
        assert datastore.queries == [ALIVE_SQL]
        assert datastore.released == datastore.acquired == 1
        assert datastore.cursors_closed == datastore.cursors_opened == 1

    def test_query_failure_releases_resources(self, make_datastore):
        registry = DatastoreRegistry()
        datastore = make_datastore(healthy=False)
        registry.register("db_main", datastore)

        checker = DatastoreChecker(DatastoreRole.SECONDARY, "db_main", registry)
        assert asyncio.run(checker.is_alive()) is False
        assert datastore.released == 1
        assert datastore.cursors_closed == 1

    def test_connection_failure_is_liveness_failure(self, make_datastore, caplog):
        registry = DatastoreRegistry()
        datastore = make_datastore(connect_error=psycopg.OperationalError("refused"))
        registry.register("db_main", datastore)

        checker = DatastoreChecker(DatastoreRole.PRIMARY, "db_main", registry)
        with caplog.at_level(logging.WARNING, logger="health.checks.datastore"):
            assert asyncio.run(checker.is_alive()) is False
        assert "Status: failed connect to primary" in caplog.text
        assert datastore.acquired == 0

    def test_handle_is_sticky_after_unregister(self, make_datastore):
        registry = DatastoreRegistry()
        datastore = make_datastore()
        registry.register("db_main", datastore)

        checker = DatastoreChecker(DatastoreRole.PRIMARY, "db_main", registry)
        assert asyncio.run(checker.is_alive()) is True

        registry.unregister("db_main")
        registry.register("db_main", make_datastore(healthy=False))

        assert asyncio.run(checker.is_alive()) is True
        assert checker.cached_handle is datastore
        assert len(datastore.queries) == 2

    def test_late_registration_is_picked_up(self, make_datastore):
        registry = DatastoreRegistry()
        checker = DatastoreChecker(DatastoreRole.PRIMARY, "db_main", registry)
        assert asyncio.run(checker.is_alive()) is False

        registry.register("db_main", make_datastore())
        assert asyncio.run(checker.is_alive()) is True

    @pytest.mark.parametrize("role", list(DatastoreRole))
    def test_roles_are_independent(self, role, make_datastore):
        registry = DatastoreRegistry()
        registry.register("a", make_datastore())
        registry.register("b", make_datastore(healthy=False))

        good = DatastoreChecker(role, "a", registry)
        bad = DatastoreChecker(role, "b", registry)
        assert asyncio.run(good.is_alive()) is True
        assert asyncio.run(bad.is_alive()) is False
