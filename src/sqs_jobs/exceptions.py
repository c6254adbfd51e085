"""Exceptions raised while building and enqueueing job messages."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ports import SendResult


class SQSJobsError(Exception):
    """Root exception for the sqs-jobs package."""


class InvalidDelayError(SQSJobsError, ValueError):
    """Raised when a requested delay exceeds what the queue can hold back."""

    def __init__(self, delay_seconds: int, max_delay_seconds: int) -> None:
        self.delay_seconds = delay_seconds
        self.max_delay_seconds = max_delay_seconds
        super().__init__(
            f"Requested delay of {delay_seconds}s exceeds the maximum allowed "
            f"delay of {max_delay_seconds}s (15 minutes)"
        )


class JobSerializationError(SQSJobsError):
    """Raised when a job body cannot be serialized or decoded."""


class QueueConnectionError(SQSJobsError):
    """Raised when a queue cannot be looked up or introspected."""


class BatchSendError(SQSJobsError):
    """Raised when the transport rejected one or more entries of a batch.

    ``enqueued_count`` counts every job accepted by the transport before the
    failure surfaced, including the accepted entries of the failing batch.
    """

    def __init__(
        self,
        queue_name: str,
        failed: list[SendResult],
        enqueued_count: int,
    ) -> None:
        self.queue_name = queue_name
        self.failed = failed
        self.enqueued_count = enqueued_count
        reasons = ", ".join(f"#{r.index}: {r.error}" for r in failed[:3])
        super().__init__(
            f"{len(failed)} message(s) rejected by queue {queue_name!r} "
            f"({enqueued_count} job(s) enqueued so far): {reasons}"
        )
