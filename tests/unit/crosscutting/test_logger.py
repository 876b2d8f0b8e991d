"""
Unit tests for the JSON formatter and redaction.
"""

import json
import logging
import sys

import pytest

from ngo_crm.crosscutting.logger import JSONFormatter, _Redactor

pytestmark = pytest.mark.unit


def _record(msg="hello", **extra):
    record = logging.LogRecord(
        name="ngo-crm",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formats_json_with_extras():
    payload = json.loads(JSONFormatter().format(_record(task_id="FB-001")))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "ngo-crm"
    assert payload["message"] == "hello"
    assert payload["task_id"] == "FB-001"


def test_sensitive_extras_are_redacted():
    payload = json.loads(
        JSONFormatter().format(
            _record(password="hunter2", context={"token": "abc", "email": "a@ngo.org"})
        )
    )

    assert payload["password"] == "***REDACTED***"
    assert payload["context"]["token"] == "***REDACTED***"
    assert payload["context"]["email"] == "a@ngo.org"


def test_exception_info_is_included():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()

    payload = json.loads(JSONFormatter().format(record))

    assert payload["exception"]["type"] == "ValueError"
    assert payload["exception"]["message"] == "boom"


def test_redactor_truncates_long_strings_and_deep_nesting():
    redactor = _Redactor(max_str=5, max_depth=1)
    assert redactor.sanitize("abcdefgh") == "abcde...(truncated)"
    assert redactor.sanitize({"a": {"b": {"c": 1}}}) == {"a": {"b": "***TRUNCATED***"}}
