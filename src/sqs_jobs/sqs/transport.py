"""SQSTransport: IQueueTransport over an aiobotocore SQS client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..ports import IQueueTransport, SendResult

if TYPE_CHECKING:
    from ..message import WireMessage
    from ..ports import IQueueHandle
    from .connection import SQSConnectionManager

logger = logging.getLogger("sqs_jobs.sqs")

#: Largest number of entries ``send_message_batch`` accepts.
MAX_BATCH_ENTRIES = 10


class SQSQueue:
    """Resolved SQS queue: name, URL and whether it is FIFO."""

    def __init__(self, name: str, url: str, *, fifo: bool) -> None:
        self._name = name
        self._url = url
        self._fifo = fifo

    @property
    def name(self) -> str:
        return self._name

    @property
    def url(self) -> str:
        return self._url

    @property
    def fifo(self) -> bool:
        return self._fifo

    def requires_deduplication(self) -> bool:
        return self._fifo

    def __repr__(self) -> str:
        return f"SQSQueue(name={self._name!r}, fifo={self._fifo})"


class SQSTransport(IQueueTransport):
    """SQS adapter implementing IQueueTransport.

    FIFO messages without a group id get ``default_message_group_id``.
    Batches are split into requests of at most ten entries; the results are
    returned in submission order. Client errors propagate unchanged.
    """

    def __init__(
        self,
        connection: SQSConnectionManager,
        *,
        default_message_group_id: str = "default",
        queue_name_prefix: str = "",
    ) -> None:
        """Configure transport.

        Args:
            connection: Shared connection manager.
            default_message_group_id: Group id for FIFO messages lacking one.
            queue_name_prefix: Prepended to queue names on lookup.
        """
        self._connection = connection
        self._default_group_id = default_message_group_id
        self._prefix = queue_name_prefix

    async def resolve(self, queue_name: str) -> SQSQueue:
        """Look up the queue URL and its ``FifoQueue`` attribute."""
        full_name = f"{self._prefix}{queue_name}"
        url = await self._connection.get_queue_url(full_name)
        attributes = await self._connection.get_queue_attributes(url, "FifoQueue")
        fifo_attr = attributes.get("FifoQueue")
        if fifo_attr is None:
            fifo = full_name.endswith(".fifo")
        else:
            fifo = str(fifo_attr).lower() == "true"
        return SQSQueue(full_name, url, fifo=fifo)

    def _params(self, queue: IQueueHandle, message: WireMessage) -> dict[str, Any]:
        params = message.to_send_kwargs()
        if queue.requires_deduplication():
            params.setdefault("MessageGroupId", self._default_group_id)
        return params

    async def send_one(self, queue: IQueueHandle, message: WireMessage) -> SendResult:
        client = await self._connection.get_client()
        out = await client.send_message(
            QueueUrl=queue.url, **self._params(queue, message)
        )
        return SendResult(index=0, message_id=out.get("MessageId"))

    async def send_batch(
        self, queue: IQueueHandle, messages: list[WireMessage]
    ) -> list[SendResult]:
        client = await self._connection.get_client()
        results: list[SendResult] = []
        for start in range(0, len(messages), MAX_BATCH_ENTRIES):
            chunk = messages[start : start + MAX_BATCH_ENTRIES]
            entries = [
                {"Id": str(start + offset), **self._params(queue, message)}
                for offset, message in enumerate(chunk)
            ]
            out = await client.send_message_batch(QueueUrl=queue.url, Entries=entries)
            results.extend(_batch_results(out))
        results.sort(key=lambda r: r.index)
        return results


def _batch_results(out: dict[str, Any]) -> list[SendResult]:
    """Map a ``send_message_batch`` response onto per-entry results."""
    results = [
        SendResult(index=int(entry["Id"]), message_id=entry.get("MessageId"))
        for entry in out.get("Successful", [])
    ]
    for entry in out.get("Failed", []):
        logger.warning(
            "SQS rejected batch entry %s: %s %s",
            entry.get("Id"),
            entry.get("Code"),
            entry.get("Message"),
        )
        results.append(
            SendResult(
                index=int(entry["Id"]),
                error=f"{entry.get('Code')}: {entry.get('Message', '')}".strip(),
                sender_fault=bool(entry.get("SenderFault", False)),
            )
        )
    return results
