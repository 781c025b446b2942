from __future__ import annotations

import json
import logging

from cattle_tracker.utils.logging import _json_formatter, configure_logging, get_logger

EXPECTED_RECORDS = 10


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.records = EXPECTED_RECORDS
    record.url = "https://market.test/listing"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["records"] == EXPECTED_RECORDS
    assert payload["url"] == "https://market.test/listing"
    assert "pathname" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"step": "cleanup"}

    payload = json.loads(_json_formatter(record))

    assert payload["step"] == "cleanup"


def test_configure_logging_sets_root_level() -> None:
    configure_logging(level="WARNING", json_logs=True)
    try:
        assert logging.getLogger().level == logging.WARNING
        assert get_logger("cattle_tracker").getEffectiveLevel() == logging.WARNING
    finally:
        configure_logging(level="INFO")
