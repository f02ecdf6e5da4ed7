"""Structured logging using structlog.

Provides:
- ISO-8601 timestamps
- JSON rendering
- Automatic redaction of sensitive fields (passwords, tokens, raw DSNs)
- Context binding
- Optional daily rotating file output

Configuration is read from tablekit.config.settings:
- TABLEKIT_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL. Default: INFO
- TABLEKIT_LOG_TO_FILE: also log to a file. Default: disabled
- TABLEKIT_LOG_FILE_DIR: directory for log files. Default: logs/

Usage:
    >>> from tablekit.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("store.connected", dialect="postgresql")
"""

import logging
import os
import re
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, MutableMapping

import structlog
from structlog.types import EventDict, Processor

from tablekit.config import get_settings

SENSITIVE_PATTERNS = [
    re.compile(r".*password.*", re.IGNORECASE),
    re.compile(r".*token.*", re.IGNORECASE),
    re.compile(r".*api_key.*", re.IGNORECASE),
    re.compile(r".*secret.*", re.IGNORECASE),
    re.compile(r"^(DATABASE_URL|dsn)$", re.IGNORECASE),
]

REDACTED_VALUE = "[REDACTED]"

_configured = False


def _is_sensitive(key: str) -> bool:
    return any(pattern.match(key) for pattern in SENSITIVE_PATTERNS)


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Redact sensitive values from a dictionary before logging.

    Example:
        >>> sanitize_for_logging({"password": "secret123", "user": "admin"})
        {'password': '[REDACTED]', 'user': 'admin'}
    """
    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if _is_sensitive(key):
            sanitized[key] = REDACTED_VALUE
        elif isinstance(value, dict):
            sanitized[key] = sanitize_for_logging(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    """Structlog processor that redacts sensitive fields in event_dict."""
    return sanitize_for_logging(dict(event_dict))


def _get_log_level() -> int:
    try:
        level_name = get_settings().log_level
    except Exception:
        # Settings may fail to validate (bad env); logging must still come up
        level_name = os.getenv("TABLEKIT_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _get_log_file_path(log_dir: Path) -> Path:
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"tablekit-{datetime.now().strftime('%Y%m%d')}.log"


def configure_logging() -> None:
    """Configure stdlib handlers and the structlog processor chain once."""
    global _configured
    if _configured:
        return

    level = _get_log_level()
    tablekit_logger = logging.getLogger("tablekit")
    tablekit_logger.setLevel(level)

    stdout_handler = logging.StreamHandler()
    stdout_handler.setLevel(level)
    stdout_handler.setFormatter(logging.Formatter("%(message)s"))
    tablekit_logger.addHandler(stdout_handler)

    try:
        settings = get_settings()
    except Exception:
        settings = None
    if settings is not None and settings.log_to_file:
        file_handler = TimedRotatingFileHandler(
            filename=str(_get_log_file_path(Path(settings.log_file_dir))),
            when="midnight",
            interval=1,
            backupCount=30,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        tablekit_logger.addHandler(file_handler)

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(default=str),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


configure_logging()


def get_logger(name: str) -> Any:
    """Get a structlog BoundLogger.

    Args:
        name: Logger name (typically __name__ of the calling module)
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> Any:
    """Create a logger with bound context fields.

    Example:
        >>> logger = bind_context(table="courses")
        >>> logger.debug("query.executed", rows=1)
    """
    return structlog.get_logger().bind(**kwargs)
