# ============================================================================
# STRUCTURED LOGGING TESTS
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Tests - Log context and formatters
# PURPOSE: Verify per-probe context isolation and formatter output
# CREATED: 18 OCT 2026
# ============================================================================
"""
Structured Logging Tests

Run with:
    pytest tests/test_logging.py -v
"""

import asyncio
import json
import logging
from dataclasses import fields

import pytest

from core.logging import (
    ComponentType,
    HumanFormatter,
    LogContext,
    StructuredFormatter,
    get_current_context,
    get_logger,
    log_context,
)


def _record(message="hello"):
    return logging.LogRecord("health.test", logging.INFO, __file__, 1, message, None, None)


class TestLogContext:

    def test_nested_context_merges_and_unwinds(self):
        with log_context(probe_id="p1"):
            with log_context(check="heap"):
                ctx = get_current_context()
                assert (ctx.probe_id, ctx.check) == ("p1", "heap")
            assert get_current_context().check is None
        assert get_current_context().probe_id is None

    def test_context_fields(self):
        assert [f.name for f in fields(LogContext)] == ["probe_id", "check", "role"]

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            with log_context(operation="probe"):
                pass
        assert get_current_context() == LogContext()

    def test_concurrent_tasks_do_not_share_context(self):
        seen = {}

        async def probe(probe_id):
            with log_context(probe_id=probe_id):
                await asyncio.sleep(0)
                seen[probe_id] = get_current_context().probe_id

        async def run():
            await asyncio.gather(probe("a"), probe("b"))

        asyncio.run(run())
        assert seen == {"a": "a", "b": "b"}


class TestFormatters:

    def test_structured_includes_context(self):
        with log_context(probe_id="p1", check="suspend"):
            data = json.loads(StructuredFormatter().format(_record()))
        assert data["message"] == "hello"
        assert data["context"] == {"probe_id": "p1", "check": "suspend"}

    def test_human_shows_probe_and_role(self):
        with log_context(probe_id="p1", role="primary"):
            line = HumanFormatter().format(_record())
        assert "[probe=p1, role=primary]" in line
        assert line.endswith("health.test [probe=p1, role=primary]: hello")


class TestContextLogger:

    def test_component_and_context_attached(self, caplog):
        logger = get_logger("health.test", ComponentType.WATCHDOG)
        with caplog.at_level(logging.INFO, logger="health.test"):
            with log_context(probe_id="p1"):
                logger.info("tick")
        record = caplog.records[-1]
        assert record.extra == {"probe_id": "p1", "component": "watchdog"}

    def test_no_component_when_unset(self, caplog):
        logger = get_logger("health.test")
        with caplog.at_level(logging.INFO, logger="health.test"):
            logger.info("tick")
        assert "component" not in caplog.records[-1].extra
