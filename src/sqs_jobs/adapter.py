"""SQSJobAdapter: the entry point for enqueueing jobs."""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Any, ClassVar

from .batching import BatchGrouper
from .delay import calculate_delay
from .inbound import JobWrapper
from .message import MessageBuilder
from .options import SendMessageOptions
from .registry import QueueRegistry, WorkerRegistry
from .serialization import JobSerializer

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from .config import SQSJobsSettings
    from .job import IJob
    from .ports import IQueueHandle, IQueueTransport

logger = logging.getLogger("sqs_jobs.adapter")


class SQSJobAdapter:
    """Enqueue jobs onto queues served by :class:`JobWrapper` consumers.

    Every enqueue registers the consuming handler for the queue before the
    first send to it. After a send, ``job.send_options`` holds exactly the
    options that went out (attributes merged, dedup id when the queue needs
    one); ``enqueue`` and ``enqueue_at`` also return them.

    Usage::

        adapter = SQSJobAdapter(SQSTransport(SQSConnectionManager()))
        await adapter.enqueue(BackgroundJob(job_class="SendEmail", queue_name="mail"))
    """

    _default: ClassVar[SQSJobAdapter | None] = None
    _default_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        transport: IQueueTransport,
        *,
        serializer: JobSerializer | None = None,
        workers: WorkerRegistry | None = None,
        queues: QueueRegistry | None = None,
        handler_cls: type[Any] = JobWrapper,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Configure the adapter.

        Args:
            transport: Queue transport used for lookups and sends.
            serializer: Job body serializer; default JobSerializer().
            workers: Worker registry; default is the process-wide one.
            queues: Queue-handle cache; default is the process-wide one.
            handler_cls: Handler registered for every queue touched.
            clock: Returns the current epoch time; used for delays.
        """
        self._transport = transport
        self._builder = MessageBuilder(serializer or JobSerializer())
        self._workers = workers or WorkerRegistry.default()
        self._queues = queues or QueueRegistry.default()
        self._handler_cls = handler_cls
        self._clock = clock
        self._grouper = BatchGrouper(
            transport,
            self._builder,
            workers=self._workers,
            queues=self._queues,
            handler_cls=handler_cls,
            clock=clock,
        )

    @classmethod
    def default(cls) -> SQSJobAdapter:
        """Process-wide adapter over SQS, built from environment settings."""
        if cls._default is None:
            with cls._default_lock:
                if cls._default is None:
                    cls._default = cls.from_settings()
        return cls._default

    @classmethod
    def set_default(cls, adapter: SQSJobAdapter | None) -> None:
        """Install *adapter* as the process-wide adapter (None resets)."""
        with cls._default_lock:
            cls._default = adapter

    @classmethod
    def from_settings(cls, settings: SQSJobsSettings | None = None) -> SQSJobAdapter:
        """Build an adapter over an SQS transport configured by *settings*."""
        from .config import SQSJobsSettings
        from .sqs import SQSConnectionManager, SQSTransport

        settings = settings or SQSJobsSettings()
        connection = SQSConnectionManager.from_settings(settings)
        transport = SQSTransport(
            connection,
            default_message_group_id=settings.default_message_group_id,
            queue_name_prefix=settings.queue_name_prefix,
        )
        return cls(transport, serializer=JobSerializer(settings.identity_field))

    @property
    def workers(self) -> WorkerRegistry:
        return self._workers

    async def _resolve(self, queue_name: str) -> IQueueHandle:
        self._workers.register(queue_name, self._handler_cls)
        return await self._queues.get_or_resolve(queue_name, self._transport.resolve)

    async def enqueue(
        self,
        job: IJob,
        options: SendMessageOptions | dict[str, Any] | None = None,
    ) -> SendMessageOptions:
        """Send *job* on its own, with *options* layered over its send options."""
        job.send_options = SendMessageOptions.coerce(job.send_options).merged(options)
        queue = await self._resolve(job.queue_name)
        message = self._builder.build(queue, job)
        result = await self._transport.send_one(queue, message)
        logger.info(
            "Enqueued job on %s (message_id=%s)", queue.name, result.message_id
        )
        return message.options.model_copy(deep=True)

    async def enqueue_at(
        self, job: IJob, timestamp: float | datetime
    ) -> SendMessageOptions:
        """Send *job* so that it becomes visible at *timestamp*."""
        delay = calculate_delay(timestamp, now=self._clock())
        return await self.enqueue(job, {"delay_seconds": delay})

    async def enqueue_all(self, jobs: Iterable[IJob]) -> int:
        """Send *jobs* in one batch per queue; return the number enqueued."""
        return await self._grouper.enqueue_all(jobs)


async def enqueue(
    job: IJob, options: SendMessageOptions | dict[str, Any] | None = None
) -> SendMessageOptions:
    """Enqueue *job* through the process-wide adapter."""
    return await SQSJobAdapter.default().enqueue(job, options)


async def enqueue_at(job: IJob, timestamp: float | datetime) -> SendMessageOptions:
    """Schedule *job* through the process-wide adapter."""
    return await SQSJobAdapter.default().enqueue_at(job, timestamp)


async def enqueue_all(jobs: Iterable[IJob]) -> int:
    """Enqueue *jobs* in batches through the process-wide adapter."""
    return await SQSJobAdapter.default().enqueue_all(jobs)
