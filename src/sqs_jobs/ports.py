"""Ports for the queue transport, the job execution framework and receipts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from .message import WireMessage


class SendResult(BaseModel):
    """Outcome of one message in a send call.

    ``index`` is the position of the message in the submitted batch.
    """

    model_config = ConfigDict(frozen=True)

    index: int = 0
    message_id: str | None = None
    error: str | None = None
    sender_fault: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@runtime_checkable
class IQueueHandle(Protocol):
    """A resolved queue destination."""

    @property
    def name(self) -> str: ...

    @property
    def url(self) -> str: ...

    def requires_deduplication(self) -> bool:
        """True for queues that reject duplicate bodies within a window (FIFO)."""
        ...


@runtime_checkable
class IQueueTransport(Protocol):
    """
    Port for the queue service itself.

    Infrastructure modules (``sqs_jobs.sqs``, ``sqs_jobs.memory``) provide
    concrete adapters. Errors raised by the send calls are propagated as-is.
    """

    async def resolve(self, queue_name: str) -> IQueueHandle:
        """Look up *queue_name*; may be a remote call."""
        ...

    async def send_one(self, queue: IQueueHandle, message: WireMessage) -> SendResult:
        """Send a single message."""
        ...

    async def send_batch(
        self, queue: IQueueHandle, messages: list[WireMessage]
    ) -> list[SendResult]:
        """Send *messages* as one batched submission; one result per message."""
        ...


@runtime_checkable
class IJobExecutor(Protocol):
    """Port for the framework that actually runs a job body."""

    async def execute(self, payload: dict[str, Any]) -> None:
        """Run the job described by *payload*."""
        ...


@runtime_checkable
class IDeliveryReceipt(Protocol):
    """A received message plus the metadata the queue attached to it."""

    def approximate_receive_count(self) -> int | None:
        """How many times the message has been delivered (approximate)."""
        ...

    def body(self) -> bytes | str:
        """The raw message body."""
        ...
