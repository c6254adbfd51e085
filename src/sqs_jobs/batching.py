"""BatchGrouper: partition jobs by queue and send one batch per queue."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from .delay import calculate_delay
from .exceptions import BatchSendError
from .options import SendMessageOptions

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .job import IJob
    from .message import MessageBuilder, WireMessage
    from .ports import IQueueHandle, IQueueTransport
    from .registry import QueueRegistry, WorkerRegistry

logger = logging.getLogger("sqs_jobs.batching")


def group_by_queue(jobs: Iterable[IJob]) -> dict[str, list[IJob]]:
    """Group jobs by ``queue_name``, keeping input order inside each group."""
    groups: dict[str, list[IJob]] = {}
    for job in jobs:
        groups.setdefault(job.queue_name, []).append(job)
    return groups


class BatchGrouper:
    """Builds and submits per-queue batches.

    Every group is registered, resolved and built before the first batch
    goes out, so a rejected delay or an unserializable job aborts the call
    with nothing sent. Transport failures after that point are not rolled
    back: groups already sent stay sent.
    """

    def __init__(
        self,
        transport: IQueueTransport,
        builder: MessageBuilder,
        *,
        workers: WorkerRegistry,
        queues: QueueRegistry,
        handler_cls: type[Any],
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._transport = transport
        self._builder = builder
        self._workers = workers
        self._queues = queues
        self._handler_cls = handler_cls
        self._clock = clock

    def _message_for(self, queue: IQueueHandle, job: IJob) -> WireMessage:
        if job.scheduled_at is not None:
            delay = calculate_delay(job.scheduled_at, now=self._clock())
            job.send_options = SendMessageOptions.coerce(job.send_options).merged(
                delay_seconds=delay
            )
        return self._builder.build(queue, job)

    async def _prepare(
        self, groups: dict[str, list[IJob]]
    ) -> list[tuple[IQueueHandle, list[WireMessage]]]:
        prepared: list[tuple[IQueueHandle, list[WireMessage]]] = []
        for queue_name, queue_jobs in groups.items():
            self._workers.register(queue_name, self._handler_cls)
            queue = await self._queues.get_or_resolve(
                queue_name, self._transport.resolve
            )
            prepared.append((queue, [self._message_for(queue, j) for j in queue_jobs]))
        return prepared

    async def enqueue_all(self, jobs: Iterable[IJob]) -> int:
        """Send *jobs* grouped by queue; return how many were enqueued."""
        prepared = await self._prepare(group_by_queue(jobs))

        enqueued = 0
        for queue, messages in prepared:
            try:
                results = await self._transport.send_batch(queue, messages)
            except Exception:
                logger.error(
                    "Batch send to %s failed after %d job(s) were enqueued",
                    queue.name,
                    enqueued,
                )
                raise
            failed = [r for r in results if not r.ok]
            if failed:
                raise BatchSendError(
                    queue.name, failed, enqueued + len(results) - len(failed)
                )
            enqueued += len(messages)
            logger.info("Enqueued %d job(s) on %s", len(messages), queue.name)
        return enqueued
