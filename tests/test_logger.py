"""Tests for the JSON log formatter and request context fields."""

import json
import logging
from unittest.mock import patch

import httpx
import pytest

from qbitclient.api.torrents import TorrentsAPI
from qbitclient.exceptions import ApiError
from qbitclient.transport import HttpTransport
from qbitclient.utils.logger import JSONFormatter, logger


def make_record(**context) -> logging.LogRecord:
    record = logging.LogRecord(
        "qbitclient", logging.WARNING, __file__, 12, "Ignoring %s payload", ("stale",), None
    )
    for key, value in context.items():
        setattr(record, key, value)
    return record


def test_json_base_fields():
    data = json.loads(JSONFormatter().format(make_record()))

    assert data["level"] == "WARNING"
    assert data["message"] == "Ignoring stale payload"
    assert data["line"] == 12
    assert data["timestamp"].endswith("Z")
    assert "rid" not in data
    assert "operation" not in data


def test_context_fields_included():
    record = make_record(operation="SYNC_MAIN_DATA", rid=5, previous_rid=7, torrent_hash=None)

    data = json.loads(JSONFormatter().format(record))

    assert data["operation"] == "SYNC_MAIN_DATA"
    assert data["rid"] == 5
    assert data["previous_rid"] == 7
    assert "torrent_hash" not in data


def test_unknown_extra_ignored():
    data = json.loads(JSONFormatter().format(make_record(password="hunter2")))

    assert "password" not in data


def test_logger_is_package_logger():
    assert logger.name == "qbitclient"
    assert logger.propagate is False
    assert isinstance(logger.handlers[0].formatter, JSONFormatter)


def test_http_failure_logged_with_operation():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    http = httpx.Client(transport=httpx.MockTransport(handler))
    api = TorrentsAPI(HttpTransport(base_url="http://qb.local:8080", client=http))

    with patch("qbitclient.api.base.logger") as mock_logger:
        with pytest.raises(ApiError):
            api.tags()

    extra = mock_logger.error.call_args.kwargs["extra"]
    assert extra == {"operation": "GET_TAGS", "method": "GET", "status_code": 500}
