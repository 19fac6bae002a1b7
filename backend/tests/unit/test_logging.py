"""
Unit tests for the JSON log formatter.
"""
import json
import logging
from datetime import date

import pytest

from tradesmen.lib.logging import JSONFormatter, get_correlation_id, set_correlation_id


def _record(msg="hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("tradesmen.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
def test_format_includes_core_fields():
    data = json.loads(JSONFormatter().format(_record()))

    assert data["level"] == "INFO"
    assert data["logger"] == "tradesmen.test"
    assert data["message"] == "hello"
    assert data["timestamp"].endswith("Z")


@pytest.mark.unit
def test_format_includes_extra_fields():
    data = json.loads(JSONFormatter().format(_record(booking_id=7, path="/api/booking")))

    assert data["booking_id"] == 7
    assert data["path"] == "/api/booking"
    assert "args" not in data


@pytest.mark.unit
def test_format_includes_correlation_id():
    set_correlation_id("abc-123")
    try:
        data = json.loads(JSONFormatter().format(_record()))
    finally:
        set_correlation_id(None)

    assert data["correlation_id"] == "abc-123"
    assert get_correlation_id() is None


@pytest.mark.unit
def test_format_serializes_unknown_types():
    data = json.loads(JSONFormatter().format(_record(scheduled_date=date(2025, 1, 15))))

    assert data["scheduled_date"] == "2025-01-15"
