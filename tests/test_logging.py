"""Tests for structured logging."""

from __future__ import annotations

import json
import logging
import sys

from spendwise.logging_config import JSONFormatter, get_logger, setup_logging


def _record(**kwargs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="spendwise.test",
        level=logging.INFO,
        pathname="test.py",
        lineno=42,
        msg="Expense created",
        args=(),
        exc_info=kwargs.pop("exc_info", None),
    )
    for key, value in kwargs.items():
        setattr(record, key, value)
    return record


def test_json_formatter_structure():
    payload = json.loads(JSONFormatter().format(_record()))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "spendwise.test"
    assert payload["message"] == "Expense created"
    assert payload["line"] == 42
    assert "timestamp" in payload
    assert "extra" not in payload


def test_json_formatter_includes_extra_fields():
    payload = json.loads(JSONFormatter().format(_record(expense_id=7, category_id=3)))
    assert payload["extra"] == {"expense_id": 7, "category_id": 3}


def test_json_formatter_with_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        exc_info = sys.exc_info()

    payload = json.loads(JSONFormatter().format(_record(exc_info=exc_info)))

    assert payload["exception"]["type"] == "ValueError"
    assert payload["exception"]["message"] == "boom"
    assert "Traceback" in payload["exception"]["traceback"]


def test_setup_logging_writes_json_file(config):
    logger = setup_logging(config, console=False)
    get_logger("tests").info("hello", extra={"answer": 42})
    for handler in logger.handlers:
        handler.flush()

    log_file = config.DATA_DIR / "logs" / "spendwise.log"
    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]

    assert any(line["message"] == "hello" and line["extra"]["answer"] == 42 for line in lines)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_get_logger_namespaces():
    assert get_logger("reports").name == "spendwise.reports"
    assert get_logger("spendwise.cli").name == "spendwise.cli"
