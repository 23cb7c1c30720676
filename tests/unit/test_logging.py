from __future__ import annotations

import json
import logging
import sys

from datagen.utils.logging import JsonFormatter, configure_logging, get_logger

EXPECTED_RECORDS = 10
EXPECTED_SKIPPED = 2


def _record(exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="datagen.orchestrator",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Sent %d records",
        args=(EXPECTED_RECORDS,),
        exc_info=exc_info,
    )


def test_json_formatter_promotes_run_fields() -> None:
    record = _record()
    record.records = EXPECTED_RECORDS
    record.mode = "ecommerce"

    document = json.loads(JsonFormatter().format(record))

    assert document["level"] == "INFO"
    assert document["logger"] == "datagen.orchestrator"
    assert document["message"] == "Sent 10 records"
    assert document["records"] == EXPECTED_RECORDS
    assert document["mode"] == "ecommerce"
    assert "time" in document
    assert "lineno" not in document
    assert "args" not in document


def test_json_formatter_flattens_nested_extra_field() -> None:
    record = _record()
    record.extra = {"skipped": EXPECTED_SKIPPED}

    document = json.loads(JsonFormatter().format(record))

    assert document["skipped"] == EXPECTED_SKIPPED
    assert "extra" not in document


def test_json_formatter_renders_exceptions() -> None:
    try:
        raise RuntimeError("sink went away")
    except RuntimeError:
        record = _record(exc_info=sys.exc_info())

    document = json.loads(JsonFormatter().format(record))

    assert "RuntimeError: sink went away" in document["exc_info"]


def test_configure_logging_keeps_module_loggers_enabled() -> None:
    module_log = get_logger("datagen.orchestrator")

    configure_logging(level="DEBUG", json_logs=True)

    assert module_log.disabled is False
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("aiokafka").level == logging.WARNING
    assert any(isinstance(handler.formatter, JsonFormatter) for handler in logging.getLogger().handlers)
