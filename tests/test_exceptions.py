"""Tests for sqs-jobs exceptions."""

from __future__ import annotations

from sqs_jobs.exceptions import (
    BatchSendError,
    InvalidDelayError,
    JobSerializationError,
    QueueConnectionError,
    SQSJobsError,
)
from sqs_jobs.ports import SendResult


def test_all_errors_share_root() -> None:
    for exc in (
        BatchSendError,
        InvalidDelayError,
        JobSerializationError,
        QueueConnectionError,
    ):
        assert issubclass(exc, SQSJobsError)


def test_invalid_delay_names_the_constraint() -> None:
    e = InvalidDelayError(1200, 900)
    assert e.delay_seconds == 1200
    assert "1200s" in str(e)
    assert "900s" in str(e)


def test_batch_send_error_carries_failures() -> None:
    failed = [SendResult(index=2, error="InvalidParameterValue: bad")]
    e = BatchSendError("orders", failed, enqueued_count=7)
    assert e.queue_name == "orders"
    assert e.failed == failed
    assert e.enqueued_count == 7
    assert "orders" in str(e)
    assert "#2" in str(e)


def test_send_result_ok() -> None:
    assert SendResult(message_id="m").ok is True
    assert SendResult(error="x").ok is False
