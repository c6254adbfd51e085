"""SQSJobConsumer: long-polls job queues and runs their handlers."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ..inbound import SQSDeliveryReceipt, handler_path
from ..message import MARKER_ATTRIBUTE
from ..registry import WorkerRegistry

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..config import SQSJobsSettings
    from ..ports import IJobExecutor
    from .connection import SQSConnectionManager

logger = logging.getLogger("sqs_jobs.consumer")


class SQSJobConsumer:
    """Polls every queue in the worker registry and dispatches messages.

    Each message goes to the handler registered for its queue, built with
    ``handler_factory(handler_cls, executor)``. A message is deleted once its handler
    returns; if the handler raises, the message is left alone and the queue
    redelivers it after the visibility timeout.
    """

    def __init__(
        self,
        connection: SQSConnectionManager,
        executor: IJobExecutor,
        *,
        workers: WorkerRegistry | None = None,
        handler_factory: Callable[[type[Any], IJobExecutor], Any] | None = None,
        settings: SQSJobsSettings | None = None,
        wait_time_seconds: int = 20,
        visibility_timeout: int = 30,
        max_number_of_messages: int = 10,
        queue_name_prefix: str = "",
    ) -> None:
        """Configure consumer.

        Args:
            connection: Shared connection manager.
            executor: Execution framework the handlers forward to.
            workers: Worker registry; default is the process-wide one.
            handler_factory: Builds a handler instance from its class.
            settings: If given, overrides the polling keyword arguments.
            wait_time_seconds: Long-poll wait.
            visibility_timeout: Visibility timeout for received messages.
            max_number_of_messages: Messages per receive call (1-10).
            queue_name_prefix: Prepended to registered queue names.
        """
        self._connection = connection
        self._executor = executor
        self._workers = workers or WorkerRegistry.default()
        self._handler_factory = handler_factory or (lambda cls, ex: cls(ex))
        if settings is not None:
            wait_time_seconds = settings.wait_time_seconds
            visibility_timeout = settings.visibility_timeout
            max_number_of_messages = settings.max_number_of_messages
            queue_name_prefix = settings.queue_name_prefix
        self._wait_time_seconds = wait_time_seconds
        self._visibility_timeout = visibility_timeout
        self._max_messages = max(1, min(max_number_of_messages, 10))
        self._prefix = queue_name_prefix
        self._handlers: dict[str, Any] = {}
        self._queue_urls: dict[str, str] = {}
        self._running = False

    def _handler_for(self, queue_name: str) -> Any | None:
        handler = self._handlers.get(queue_name)
        if handler is None:
            handler_cls = self._workers.get(queue_name)
            if handler_cls is None:
                return None
            handler = self._handler_factory(handler_cls, self._executor)
            self._handlers[queue_name] = handler
        return handler

    async def _queue_url(self, queue_name: str) -> str:
        url = self._queue_urls.get(queue_name)
        if url is None:
            url = await self._connection.get_queue_url(f"{self._prefix}{queue_name}")
            self._queue_urls[queue_name] = url
        return url

    def _check_marker(self, receipt: SQSDeliveryReceipt, handler: Any) -> None:
        marker = receipt.message_attributes.get(MARKER_ATTRIBUTE, {})
        expected = handler_path(type(handler))
        value = marker.get("StringValue")
        if value is not None and value != expected:
            logger.warning(
                "Message %s on %s is marked for %s but handled by %s",
                receipt.message_id,
                receipt.queue_name,
                value,
                expected,
            )

    async def process_message(
        self, client: Any, queue_name: str, queue_url: str, msg: dict[str, Any]
    ) -> bool:
        """Handle one SQS message; return True if it was deleted."""
        receipt = SQSDeliveryReceipt(msg, queue_name=queue_name)
        handler = self._handler_for(queue_name)
        if handler is None:
            logger.warning(
                "No worker registered for queue %s; leaving message %s",
                queue_name,
                receipt.message_id,
            )
            return False
        self._check_marker(receipt, handler)
        try:
            await handler.perform(receipt)
        except Exception:  # noqa: BLE001
            logger.exception(
                "Job in message %s on %s failed; it will be redelivered",
                receipt.message_id,
                queue_name,
            )
            return False
        await client.delete_message(
            QueueUrl=queue_url,
            ReceiptHandle=receipt.receipt_handle,
        )
        return True

    async def poll_once(self, client: Any, queue_name: str) -> int:
        """Receive and process one batch from *queue_name*; return count received."""
        queue_url = await self._queue_url(queue_name)
        out = await client.receive_message(
            QueueUrl=queue_url,
            MaxNumberOfMessages=self._max_messages,
            WaitTimeSeconds=self._wait_time_seconds,
            VisibilityTimeout=self._visibility_timeout,
            AttributeNames=["ApproximateReceiveCount"],
            MessageAttributeNames=["All"],
        )
        messages = out.get("Messages", [])
        for msg in messages:
            await self.process_message(client, queue_name, queue_url, msg)
        return len(messages)

    async def run(self) -> None:
        """Poll the registered queues until :meth:`stop` is called."""
        self._running = True
        client = await self._connection.get_client()
        while self._running:
            queue_names = self._workers.queues()
            if not queue_names:
                await asyncio.sleep(1)
                continue
            for queue_name in queue_names:
                if not self._running:
                    break
                try:
                    await self.poll_once(client, queue_name)
                except Exception:  # noqa: BLE001
                    logger.exception("Polling %s failed", queue_name)
                    self._queue_urls.pop(queue_name, None)
                    await asyncio.sleep(1)

    async def start(self) -> None:
        """Alias of :meth:`run` for background-worker lifecycles."""
        await self.run()

    async def stop(self) -> None:
        """Stop the consumer loop."""
        self._running = False

    async def health_check(self) -> bool:
        """Return True if SQS is reachable."""
        return await self._connection.health_check()
