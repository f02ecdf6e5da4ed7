"""Unit tests for the structured logging setup."""

import json
import logging

import pytest

from tablekit.utils.logging import bind_context, get_logger, sanitize_for_logging

pytestmark = pytest.mark.unit


def test_get_logger_emits_json(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="tablekit")

    get_logger("tablekit.tests").info("test_event", table="users")

    log_data = json.loads(caplog.records[-1].getMessage())
    assert log_data["event"] == "test_event"
    assert log_data["table"] == "users"
    assert log_data["logger"] == "tablekit.tests"
    assert "timestamp" in log_data


def test_sensitive_fields_redacted_in_output(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="tablekit")

    get_logger("tablekit.tests").info("login", password="hunter2", dsn="postgresql://x")

    log_data = json.loads(caplog.records[-1].getMessage())
    assert log_data["password"] == "[REDACTED]"
    assert log_data["dsn"] == "[REDACTED]"


@pytest.mark.parametrize(
    "key", ["password", "db_password", "access_token", "api_key", "client_secret", "DATABASE_URL"]
)
def test_sanitize_for_logging_redacts(key: str) -> None:
    sanitized = sanitize_for_logging({key: "value", "user": "admin"})

    assert sanitized[key] == "[REDACTED]"
    assert sanitized["user"] == "admin"


def test_sanitize_nested() -> None:
    sanitized = sanitize_for_logging({"config": {"password": "x", "host": "db"}})

    assert sanitized == {"config": {"password": "[REDACTED]", "host": "db"}}


def test_bind_context() -> None:
    logger = bind_context(table="users")

    assert hasattr(logger, "info")
