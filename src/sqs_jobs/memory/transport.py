"""InMemoryTransport: IQueueTransport with assertion helpers for tests."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from ..ports import IQueueTransport, SendResult

if TYPE_CHECKING:
    from ..message import WireMessage
    from ..ports import IQueueHandle


class InMemoryQueue:
    """Queue handle; names ending in ``.fifo`` require deduplication."""

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def url(self) -> str:
        return f"memory://{self._name}"

    def requires_deduplication(self) -> bool:
        return self._name.endswith(".fifo")


class InMemoryReceipt:
    """Delivery receipt handed out by :meth:`InMemoryTransport.receive`."""

    def __init__(self, message: WireMessage, receive_count: int) -> None:
        self.message = message
        self._receive_count = receive_count

    def approximate_receive_count(self) -> int | None:
        return self._receive_count

    def body(self) -> str:
        return self.message.body


class InMemoryTransport(IQueueTransport):
    """In-memory transport that records every call.

    FIFO queues drop a message whose deduplication id was already accepted,
    the way a real FIFO queue does inside its dedup window.
    ``resolve_calls``, ``calls`` and :meth:`messages` support test assertions.
    """

    def __init__(self) -> None:
        self.resolve_calls: list[str] = []
        self.calls: list[tuple[str, str, list[WireMessage]]] = []
        self._accepted: dict[str, list[WireMessage]] = {}
        self._seen_dedup: dict[str, set[str]] = {}
        self._receive_counts: dict[str, int] = {}

    async def resolve(self, queue_name: str) -> InMemoryQueue:
        self.resolve_calls.append(queue_name)
        return InMemoryQueue(queue_name)

    def _accept(
        self, queue: IQueueHandle, message: WireMessage, index: int
    ) -> SendResult:
        dedup = message.deduplication_id
        if dedup is not None:
            seen = self._seen_dedup.setdefault(queue.name, set())
            if dedup in seen:
                return SendResult(index=index, message_id=None)
            seen.add(dedup)
        self._accepted.setdefault(queue.name, []).append(message)
        return SendResult(index=index, message_id=str(uuid.uuid4()))

    async def send_one(self, queue: IQueueHandle, message: WireMessage) -> SendResult:
        self.calls.append(("send_one", queue.name, [message]))
        return self._accept(queue, message, 0)

    async def send_batch(
        self, queue: IQueueHandle, messages: list[WireMessage]
    ) -> list[SendResult]:
        self.calls.append(("send_batch", queue.name, list(messages)))
        return [self._accept(queue, m, i) for i, m in enumerate(messages)]

    def messages(self, queue_name: str) -> list[WireMessage]:
        """Messages accepted on *queue_name*, in order."""
        return list(self._accepted.get(queue_name, []))

    def batch_calls(self) -> list[tuple[str, list[WireMessage]]]:
        return [(q, m) for kind, q, m in self.calls if kind == "send_batch"]

    def receive(self, queue_name: str) -> list[InMemoryReceipt]:
        """Deliver every accepted message again, bumping its receive count."""
        receipts = []
        for message in self._accepted.get(queue_name, []):
            key = f"{queue_name}:{id(message)}"
            self._receive_counts[key] = self._receive_counts.get(key, 0) + 1
            receipts.append(InMemoryReceipt(message, self._receive_counts[key]))
        return receipts

    def clear(self) -> None:
        """Forget all calls and messages (for test teardown)."""
        self.resolve_calls.clear()
        self.calls.clear()
        self._accepted.clear()
        self._seen_dedup.clear()
        self._receive_counts.clear()

    def snapshot(self) -> dict[str, Any]:
        """Message counts per queue (debugging)."""
        return {name: len(msgs) for name, msgs in self._accepted.items()}
