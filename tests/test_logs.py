"""Tests for log formatting and credential redaction."""

from __future__ import annotations

import json
import logging

import pytest

from zendesk_connector.logs import LOGGER_NAME, JsonFormatter, TextFormatter, configure_logging
from zendesk_connector.secrets import REDACTED, redact_dict, redact_text


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("zendesk_connector.client", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


class TestRedaction:
    def test_basic_auth_header(self):
        assert redact_text("Authorization: Basic b3BzQGFjbWUuY29t") == f"Authorization: Basic {REDACTED}"

    def test_token_credential(self):
        assert "tok123" not in redact_text("ops@acme.com/token:tok123 rejected")

    def test_long_hex(self):
        assert REDACTED in redact_text("key " + "a1" * 16)

    def test_sensitive_keys(self):
        out = redact_dict({"api_token": "x", "nested": {"Authorization": "y"}, "user_id": 7})
        assert out == {"api_token": REDACTED, "nested": {"Authorization": REDACTED}, "user_id": 7}


class TestFormatters:
    def test_json_line(self):
        line = JsonFormatter().format(_record("group membership created", membership_id=9, user_id=1))
        event = json.loads(line)
        assert event["level"] == "INFO"
        assert event["logger"] == "zendesk_connector.client"
        assert event["message"] == "group membership created"
        assert event["membership_id"] == 9
        assert event["ts"].endswith("Z")

    def test_json_redacts_extras(self):
        line = JsonFormatter().format(_record("auth", api_token="tok", header="Bearer abc"))
        event = json.loads(line)
        assert event["api_token"] == REDACTED
        assert "abc" not in line

    def test_text_appends_sorted_extras(self):
        line = TextFormatter().format(_record("revoke applied", user_id=1, already_applied=True))
        assert line.endswith("revoke applied already_applied=True user_id=1")

    def test_text_redacts(self):
        line = TextFormatter().format(_record("sent Basic c2VjcmV0"))
        assert "c2VjcmV0" not in line


class TestConfigureLogging:
    def test_single_handler(self, reset_logger):
        configure_logging("INFO", "text")
        logger = configure_logging("DEBUG", "json")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)
        assert logger.level == logging.DEBUG
