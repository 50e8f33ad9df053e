"""Tests for docsniff._shared.logging."""

from __future__ import annotations

import json
import logging

import pytest

from docsniff._shared.logging import (
    CorrelationContext,
    JsonFormatter,
    get_correlation_id,
    get_logger,
    set_correlation_id,
    with_fields,
)


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="docsniff.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Processed %s",
        args=("a.php",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_get_logger_only_adds_null_handler() -> None:
    logger = get_logger("docsniff.tests.null")

    assert [type(handler) for handler in logger.logger.handlers] == [logging.NullHandler]
    assert logger.logger.propagate


def test_with_fields_merges_bound_and_call_extras(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="docsniff.tests.fields")
    base = with_fields(get_logger("docsniff.tests.fields"), operation="fix")
    adapter = with_fields(base, path="a.php")

    adapter.info("Fixed", extra={"status": "done", "operation": "check"})

    (record,) = caplog.records
    assert record.path == "a.php"  # type: ignore[attr-defined]
    assert record.operation == "check"  # type: ignore[attr-defined]
    assert record.status == "done"  # type: ignore[attr-defined]


def test_correlation_context_is_scoped() -> None:
    set_correlation_id(None)
    with CorrelationContext("run-1"):
        assert get_correlation_id() == "run-1"
        with CorrelationContext("run-2"):
            assert get_correlation_id() == "run-2"
        assert get_correlation_id() == "run-1"
    assert get_correlation_id() is None


def test_json_formatter_emits_structured_fields() -> None:
    record = _record(operation="check", status="ok", path="a.php", ignored=object())

    with CorrelationContext("run-9"):
        payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Processed a.php"
    assert payload["level"] == "WARNING"
    assert payload["correlation_id"] == "run-9"
    assert (payload["operation"], payload["path"]) == ("check", "a.php")
    assert "ignored" not in payload
    assert payload["ts"].endswith("Z")
