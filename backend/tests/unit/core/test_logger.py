"""Unit tests for the JSON log formatter and request-id helpers."""

from __future__ import annotations

import json
import logging

import pytest

from authsvc.core.logger import (
    _REQUEST_ID_PATTERN,
    JSONFormatter,
    RequestIdFilter,
    ensure_request_id,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("authsvc.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_json_with_known_extras():
    record = _record(request_id="req-1", operation="sign_in", user_id=7, secret="nope")

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "req-1"
    assert payload["operation"] == "sign_in"
    assert payload["user_id"] == 7
    assert "secret" not in payload


def test_filter_keeps_explicit_request_id(app):
    record = _record(request_id="given")

    with app.test_request_context(headers={"X-Request-ID": "from-header"}):
        RequestIdFilter().filter(record)

    assert record.request_id == "given"


def test_filter_uses_correlation_header(app):
    record = _record()

    with app.test_request_context(headers={"X-Correlation-ID": "corr-9"}):
        RequestIdFilter().filter(record)

    assert record.request_id == "corr-9"


def test_ensure_request_id_is_stable_within_a_request(app):
    with app.test_request_context():
        first = ensure_request_id()
        assert ensure_request_id() == first


def test_filter_outside_request_sets_none():
    record = _record()

    RequestIdFilter().filter(record)

    assert record.request_id is None


@pytest.mark.parametrize("header", ["bad id;<x>", "a" * 200])
def test_malformed_correlation_header_is_replaced(app, header):
    with app.test_request_context(headers={"X-Request-ID": header}):
        request_id = ensure_request_id()

    assert request_id != header
    assert _REQUEST_ID_PATTERN.match(request_id)


def test_access_line_is_logged_per_request(client, caplog):
    with caplog.at_level("INFO", logger="authsvc.access"):
        client.get("/api/v1/health")

    records = [r for r in caplog.records if r.name == "authsvc.access"]
    assert len(records) == 1
    assert records[0].method == "GET"
    assert records[0].path == "/api/v1/health"
    assert records[0].status == 200
