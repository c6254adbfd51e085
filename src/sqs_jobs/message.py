"""Message builder: job to wire message (body, attributes, dedup id)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from .inbound import JobWrapper, handler_path
from .options import MessageAttributeValue, SendMessageOptions
from .serialization import JobSerializer

if TYPE_CHECKING:
    from .job import IJob
    from .ports import IQueueHandle

logger = logging.getLogger("sqs_jobs.message")

#: Attribute the consumer uses to find the handler for a message.
MARKER_ATTRIBUTE = "worker_class"

MESSAGE_ATTRIBUTES: dict[str, MessageAttributeValue] = {
    MARKER_ATTRIBUTE: MessageAttributeValue(
        data_type="String", string_value=handler_path(JobWrapper)
    ),
}


class WireMessage(BaseModel):
    """Transport-ready message: body text plus fully resolved options."""

    model_config = ConfigDict(frozen=True)

    body: str
    options: SendMessageOptions

    @property
    def message_attributes(self) -> dict[str, MessageAttributeValue]:
        return self.options.message_attributes

    @property
    def deduplication_id(self) -> str | None:
        return self.options.message_deduplication_id

    def to_send_kwargs(self) -> dict[str, Any]:
        """Render as ``send_message`` kwargs (without ``QueueUrl``)."""
        return {"MessageBody": self.body, **self.options.to_send_kwargs()}

    def to_batch_entry(self, entry_id: str) -> dict[str, Any]:
        """Render as one ``send_message_batch`` entry."""
        return {"Id": entry_id, **self.to_send_kwargs()}


class MessageBuilder:
    """Builds the wire message for a job bound to a resolved queue."""

    def __init__(self, serializer: JobSerializer | None = None) -> None:
        self._serializer = serializer or JobSerializer()

    @property
    def serializer(self) -> JobSerializer:
        return self._serializer

    def merge_attributes(
        self, attributes: dict[str, MessageAttributeValue]
    ) -> dict[str, MessageAttributeValue]:
        """Caller attributes first, then the marker on top."""
        for name, value in MESSAGE_ATTRIBUTES.items():
            existing = attributes.get(name)
            if existing is not None and existing != value:
                logger.warning(
                    "Ignoring caller-supplied message attribute %r; it is reserved",
                    name,
                )
        return {**attributes, **MESSAGE_ATTRIBUTES}

    def build(self, queue: IQueueHandle, job: IJob) -> WireMessage:
        """Build the message for *job* and write a copy of its options back."""
        body = self._serializer.body_of(job)
        params = SendMessageOptions.coerce(job.send_options)

        resolved = params.without("message_deduplication_id").merged(
            message_attributes=self.merge_attributes(dict(params.message_attributes))
        )
        if queue.requires_deduplication():
            resolved = resolved.merged(
                message_deduplication_id=self._serializer.digest(body)
            )

        message = WireMessage(body=self._serializer.encode(body), options=resolved)
        job.send_options = resolved.model_copy(deep=True)
        logger.debug(
            "Built message for queue %s (dedup=%s)",
            queue.name,
            resolved.message_deduplication_id is not None,
        )
        return message
