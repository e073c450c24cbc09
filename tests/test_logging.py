"""Tests for the structured logging system (progress_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from progress_kernel.domain.staged import StageState
from progress_kernel.exceptions import NetworkError, PlanVersionIntegrityError
from progress_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


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
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "progress_console.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("daywise_submitted", extra={"task_id": 42, "row_count": 3})

        record = _parse_log(stream)
        assert record["task_id"] == 42
        assert record["row_count"] == 3

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(tenant_code="ACME", user_email="pm@example.com")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["tenant_code"] == "ACME"
        assert record["user_email"] == "pm@example.com"

    def test_domain_values_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "values",
            extra={"qty": Decimal("12.50"), "day": date(2025, 11, 1), "stage": StageState.STAGED},
        )

        record = _parse_log(stream)
        assert record["qty"] == "12.50"
        assert record["day"] == "2025-11-01"
        assert record["stage"] == "staged"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_console_exception_attributes_extracted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise NetworkError("GET", "/api/projects", "timed out")
        except NetworkError:
            get_logger("test").error("request_failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "NETWORK_ERROR"
        assert record["exc_method"] == "GET"
        assert record["exc_path"] == "/api/projects"
        assert record["exc_reason"] == "timed out"

    def test_list_attribute_survives(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise PlanVersionIntegrityError(5, [11, 12])
        except PlanVersionIntegrityError:
            get_logger("test").error("integrity", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_active_version_ids"] == [11, 12]

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "request_id" not in record
        assert "tenant_code" not in record

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # default level is INFO, so the debug line is filtered
        assert len(logs) == 2
        for record in logs:
            assert {"ts", "level", "logger", "message"} <= record.keys()


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(request_id="r1", task_id=9)
        assert LogContext.get_all() == {"request_id": "r1", "task_id": "9"}

    def test_none_values_ignored(self):
        LogContext.set(wbs_id=None)
        assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(KeyError):
            LogContext.set(correlation_id="x")

    def test_clear(self):
        LogContext.set(request_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(wbs_id="outer")
        with LogContext.bind(wbs_id="inner"):
            assert LogContext.get_all()["wbs_id"] == "inner"
        assert LogContext.get_all()["wbs_id"] == "outer"

    def test_bind_restores_none(self):
        assert "request_id" not in LogContext.get_all()
        with LogContext.bind(request_id="temp"):
            assert LogContext.get_all()["request_id"] == "temp"
        assert "request_id" not in LogContext.get_all()

    def test_all_fields(self):
        LogContext.set(
            request_id="r",
            tenant_code="t",
            user_email="u",
            task_id="k",
            wbs_id="w",
        )
        assert len(LogContext.get_all()) == 5


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
        structured = [
            h
            for h in logging.getLogger("progress_console").handlers
            if isinstance(h, logging.StreamHandler) and isinstance(h.formatter, StructuredFormatter)
        ]
        assert structured == [h1]

    def test_get_logger_returns_child(self):
        assert get_logger("client.transport").name == "progress_console.client.transport"

    def test_logger_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "progress_console.deep.nested.module"
