"""
Name: Structured Logger Configuration

Responsibilities:
  - Configure JSON-structured logging
  - Redact sensitive fields (passwords, tokens) passed as extras
  - Include stack traces for exceptions

Collaborators:
  - crosscutting/config.py: log level and format
  - Python logging module (stdlib)

Constraints:
  - stdlib logging only (no logging framework)
  - Never log secrets (login passwords included)

Notes:
  - Import as: from ngo_crm.crosscutting.logger import logger
  - Levels: DEBUG, INFO, WARNING, ERROR, CRITICAL
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from .config import get_settings

# R: LogRecord attributes that are not "extra" fields
_INTERNAL_LOGRECORD_KEYS: set[str] = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "taskName",
}


class _Redactor:
    """R: Redact sensitive keys and cap nested payloads."""

    SENSITIVE_KEYS = {
        "password",
        "passwd",
        "secret",
        "token",
        "authorization",
        "api_key",
        "access_token",
        "refresh_token",
        "credential",
        "redis_url",
    }

    def __init__(self, max_str: int = 4_000, max_depth: int = 4):
        self._max_str = max_str
        self._max_depth = max_depth

    def sanitize(self, value: Any, *, depth: int = 0, key: str | None = None) -> Any:
        if key and key.lower() in self.SENSITIVE_KEYS:
            return "***REDACTED***"

        if depth > self._max_depth:
            return "***TRUNCATED***"

        if isinstance(value, str):
            if len(value) <= self._max_str:
                return value
            return value[: self._max_str] + "...(truncated)"

        if isinstance(value, dict):
            return {
                str(k): self.sanitize(v, depth=depth + 1, key=str(k))
                for k, v in value.items()
            }

        if isinstance(value, (list, tuple)):
            return [self.sanitize(v, depth=depth + 1, key=key) for v in value]

        return value


class JSONFormatter(logging.Formatter):
    """
    R: Format logs as JSON.

    Includes:
      - timestamp (ISO 8601)
      - level, logger, message
      - module, function, line
      - extra fields from log call (redacted)
      - exception stack trace (if present)
    """

    def __init__(self):
        super().__init__()
        self._redactor = _Redactor()

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key in _INTERNAL_LOGRECORD_KEYS:
                continue
            payload[key] = self._redactor.sanitize(value, key=key)

        if record.exc_info:
            payload["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logger(name: str = "ngo-crm") -> logging.Logger:
    """
    R: Configure and return the structured logger.

    - Avoids duplicated handlers on reimport
    - Honors log_level / log_json from Settings when they load
    """
    log = logging.getLogger(name)

    level = "INFO"
    use_json = True

    # R: Settings may be invalid at import time; fall back to defaults.
    try:
        s = get_settings()
        level = (s.log_level or "INFO").upper()
        use_json = bool(s.log_json)
    except ValidationError:
        pass

    log.setLevel(getattr(logging, level, logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JSONFormatter()
            if use_json
            else logging.Formatter("%(levelname)s %(message)s")
        )
        log.addHandler(handler)

    return log


# R: Global logger instance
logger = setup_logger()
