"""Tests for the structured logging system (activation_kernel/logging_config.py)."""

import json
import logging
from datetime import UTC, datetime
from io import StringIO

import pytest

from activation_kernel.exceptions import StaleActiveSetError, UnknownModuleError
from activation_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)
from activation_kernel.services.activation_controller import ChangeStatus


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests, restoring the suite configuration."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    """Parse all JSON log lines from a stream."""
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "activation_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("module_enabled", extra={"module_id": "crs", "auto_added": ["rms"]})

        record = _parse_log(stream)
        assert record["module_id"] == "crs"
        assert record["auto_added"] == ["rms"]

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(actor_id="admin-7", tenant_id="hotel-42")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["actor_id"] == "admin-7"
        assert record["tenant_id"] == "hotel-42"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_activation_exception_code_extracted(self):
        """Activation exceptions carry .code and their context attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")

        try:
            raise StaleActiveSetError("hotel-1", 3, 4)
        except StaleActiveSetError:
            logger.error("stale_write", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "STALE_ACTIVE_SET"
        assert record["exc_type"] == "StaleActiveSetError"
        assert record["exc_tenant_id"] == "hotel-1"
        assert record["exc_expected_version"] == 3
        assert record["exc_actual_version"] == 4

    def test_exception_without_traceback(self):
        """exc_info may be a tuple with no traceback (built, not raised)."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        error = UnknownModuleError("pms")
        logger.error("lookup_failed", exc_info=(UnknownModuleError, error, None))

        record = _parse_log(stream)
        assert record["exc_code"] == "UNKNOWN_MODULE"
        assert record["exc_module_id"] == "pms"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("bare_message")

        record = _parse_log(stream)
        assert "actor_id" not in record
        assert "tenant_id" not in record

    def test_sets_and_enums_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info(
            "with_set",
            extra={
                "modules": frozenset({"rms", "crs"}),
                "status": ChangeStatus.ACCEPTED,
                "at": datetime(2026, 1, 1, tzinfo=UTC),
            },
        )

        record = _parse_log(stream)
        assert record["modules"] == ["crs", "rms"]
        assert record["status"] == "accepted"
        assert record["at"].startswith("2026-01-01T00:00:00")

    def test_unknown_types_fall_back_to_str(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("with_object", extra={"nested": {"ids": {"ims"}}, "obj": object()})

        record = _parse_log(stream)
        assert record["nested"] == {"ids": ["ims"]}
        assert record["obj"].startswith("<object object at")

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # configure_logging defaults to INFO, so the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert "ts" in record
            assert "level" in record
            assert "logger" in record
            assert "message" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(actor_id="x", tenant_id="y")
        ctx = LogContext.get_all()
        assert ctx == {"actor_id": "x", "tenant_id": "y"}

    def test_clear(self):
        LogContext.set(actor_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(tenant_id="outer")
        with LogContext.bind(tenant_id="inner"):
            assert LogContext.get_all()["tenant_id"] == "inner"
        assert LogContext.get_all()["tenant_id"] == "outer"

    def test_bind_restores_none(self):
        """bind() restores to None if there was no previous value."""
        assert "tenant_id" not in LogContext.get_all()
        with LogContext.bind(tenant_id="temp"):
            assert LogContext.get_all()["tenant_id"] == "temp"
        assert "tenant_id" not in LogContext.get_all()

    def test_bind_restores_after_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(tenant_id="temp"):
                raise RuntimeError("fail")
        assert "tenant_id" not in LogContext.get_all()

    def test_additive_set(self):
        LogContext.set(actor_id="a")
        LogContext.set(catalog_revision="b")
        ctx = LogContext.get_all()
        assert ctx["actor_id"] == "a"
        assert ctx["catalog_revision"] == "b"

    def test_all_fields(self):
        LogContext.set(
            tenant_id="t",
            actor_id="a",
            catalog_revision="rev",
        )
        ctx = LogContext.get_all()
        assert len(ctx) == 3
        assert ctx["actor_id"] == "a"
        assert ctx["catalog_revision"] == "rev"


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        root = logging.getLogger("activation_kernel")
        assert len(root.handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("services.activation_controller")
        assert logger.name == "activation_kernel.services.activation_controller"

    def test_logger_hierarchy(self):
        """Child loggers inherit the activation_kernel root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        child = get_logger("deep.nested.module")
        child.debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "activation_kernel.deep.nested.module"

    def test_reset_clears_handlers(self):
        handler, _ = _make_handler()
        configure_logging(handler=handler)
        reset_logging()
        root = logging.getLogger("activation_kernel")
        assert root.handlers == []
        assert root.propagate is True
