from __future__ import annotations

import json
import logging
from datetime import timedelta
from io import StringIO
from typing import TYPE_CHECKING

import pytest

from afluent.utils.structured_logging import (
    StructuredFormatter,
    clear_correlation_id,
    get_correlation_id,
    log_structured,
    set_correlation_id,
)

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def structured_logger() -> Generator[tuple[logging.Logger, StringIO], None, None]:
    """Create a logger writing JSON records into a string stream."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    logger = logging.getLogger("afluent.tests.structured")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield logger, stream
    finally:
        logger.removeHandler(handler)
        clear_correlation_id()


def read_records(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().strip().split("\n") if line]


##############################################
#     Tests for correlation ID management    #
##############################################


def test_correlation_id_initially_none() -> None:
    clear_correlation_id()
    assert get_correlation_id() is None


def test_set_and_clear_correlation_id() -> None:
    set_correlation_id("request-123")
    assert get_correlation_id() == "request-123"
    set_correlation_id("request-456")
    assert get_correlation_id() == "request-456"
    clear_correlation_id()
    assert get_correlation_id() is None


##############################################
#     Tests for StructuredFormatter          #
##############################################


def test_structured_formatter_basic_log(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = structured_logger
    logger.info("Test message")

    (record,) = read_records(stream)
    assert record["message"] == "Test message"
    assert record["level"] == "INFO"
    assert record["logger"] == "afluent.tests.structured"
    assert "module" in record
    assert "function" in record
    assert "line" in record
    assert "correlation_id" not in record


def test_structured_formatter_timestamp_format(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = structured_logger
    logger.info("Timestamp test")

    timestamp = read_records(stream)[0]["timestamp"]
    # Format: YYYY-MM-DDTHH:MM:SS.MMMZ
    assert timestamp[10] == "T"
    assert timestamp.endswith("Z")
    assert len(timestamp) == 24


def test_structured_formatter_with_correlation_id(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = structured_logger
    set_correlation_id("request-789")
    logger.info("Request started")
    assert read_records(stream)[0]["correlation_id"] == "request-789"


def test_structured_formatter_with_extra_fields(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = structured_logger
    logger.info("Request completed", extra={"status_code": 200, "delay": 0.5})

    record = read_records(stream)[0]
    assert record["status_code"] == 200
    assert record["delay"] == 0.5


def test_structured_formatter_with_exception(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = structured_logger
    try:
        msg = "Test error"
        raise ValueError(msg)
    except ValueError:
        logger.exception("An error occurred")

    record = read_records(stream)[0]
    assert record["level"] == "ERROR"
    assert "ValueError: Test error" in record["exception"]


def test_structured_formatter_non_json_extra(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = structured_logger
    logger.info("Elapsed", extra={"elapsed": timedelta(seconds=1)})
    assert read_records(stream)[0]["elapsed"] == "0:00:01"


##############################################
#     Tests for log_structured helper        #
##############################################


def test_log_structured_with_extra_fields(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = structured_logger
    log_structured(
        logger,
        logging.INFO,
        "Retrying",
        url="https://api.example.com/ideas",
        attempt=2,
        timed_out=True,
    )

    record = read_records(stream)[0]
    assert record["message"] == "Retrying"
    assert record["url"] == "https://api.example.com/ideas"
    assert record["attempt"] == 2
    assert record["timed_out"] is True


def test_log_structured_respects_log_level(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = structured_logger
    logger.setLevel(logging.WARNING)
    log_structured(logger, logging.DEBUG, "Debug message")
    log_structured(logger, logging.WARNING, "Warning message")

    records = read_records(stream)
    assert [record["message"] for record in records] == ["Warning message"]
