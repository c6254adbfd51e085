"""Consumer-side adapter: delivery receipt in, job execution out."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .serialization import JobSerializer

if TYPE_CHECKING:
    from .ports import IDeliveryReceipt, IJobExecutor

logger = logging.getLogger("sqs_jobs.inbound")

#: Payload key carrying the number of earlier delivery attempts.
EXECUTIONS_KEY = "executions"


def prior_attempts(receive_count: int | str | None) -> int:
    """Earlier deliveries given the queue's approximate receive count.

    A missing, zero or unparseable count is treated as a first delivery.
    """
    if receive_count is None:
        return 0
    try:
        count = int(receive_count)
    except (TypeError, ValueError):
        logger.warning("Unparseable receive count %r; assuming 1", receive_count)
        return 0
    return max(count - 1, 0)


class SQSDeliveryReceipt:
    """Receipt built from one ``receive_message`` entry."""

    def __init__(self, message: dict[str, Any], queue_name: str | None = None) -> None:
        self._message = message
        self.queue_name = queue_name

    @property
    def receipt_handle(self) -> str | None:
        return self._message.get("ReceiptHandle")

    @property
    def message_id(self) -> str | None:
        return self._message.get("MessageId")

    @property
    def message_attributes(self) -> dict[str, Any]:
        return dict(self._message.get("MessageAttributes") or {})

    def approximate_receive_count(self) -> int | None:
        raw = (self._message.get("Attributes") or {}).get("ApproximateReceiveCount")
        if raw is None:
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning(
                "Message %s has unparseable ApproximateReceiveCount %r",
                self.message_id,
                raw,
            )
            return None

    def body(self) -> str:
        return str(self._message.get("Body", ""))


class JobWrapper:
    """Handler registered for every job queue.

    Translates the receive count into ``executions`` and hands the decoded
    body to the execution framework. Failures from the framework propagate;
    redelivery is left to the queue.
    """

    def __init__(
        self,
        executor: IJobExecutor,
        *,
        serializer: JobSerializer | None = None,
    ) -> None:
        self._executor = executor
        self._serializer = serializer or JobSerializer()

    def build_payload(self, receipt: IDeliveryReceipt) -> dict[str, Any]:
        body = self._serializer.decode(receipt.body())
        attempts = prior_attempts(receipt.approximate_receive_count())
        return {**body, EXECUTIONS_KEY: attempts}

    async def perform(self, receipt: IDeliveryReceipt) -> None:
        payload = self.build_payload(receipt)
        logger.debug(
            "Executing %s (prior attempts: %d)",
            payload.get("job_class", "job"),
            payload[EXECUTIONS_KEY],
        )
        await self._executor.execute(payload)


def handler_path(handler_cls: type[Any]) -> str:
    """Dotted import path identifying *handler_cls* in message attributes."""
    return f"{handler_cls.__module__}.{handler_cls.__qualname__}"
