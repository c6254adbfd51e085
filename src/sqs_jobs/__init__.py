"""sqs-jobs: enqueue background jobs onto SQS and run them on delivery."""

from __future__ import annotations

from .adapter import SQSJobAdapter, enqueue, enqueue_all, enqueue_at
from .batching import BatchGrouper, group_by_queue
from .config import SQSJobsSettings
from .delay import MAX_DELAY_SECONDS, calculate_delay
from .exceptions import (
    BatchSendError,
    InvalidDelayError,
    JobSerializationError,
    QueueConnectionError,
    SQSJobsError,
)
from .inbound import EXECUTIONS_KEY, JobWrapper, SQSDeliveryReceipt, prior_attempts
from .job import BackgroundJob, IJob
from .memory import InMemoryTransport
from .message import MARKER_ATTRIBUTE, MESSAGE_ATTRIBUTES, MessageBuilder, WireMessage
from .options import MessageAttributeValue, SendMessageOptions
from .ports import (
    IDeliveryReceipt,
    IJobExecutor,
    IQueueHandle,
    IQueueTransport,
    SendResult,
)
from .registry import QueueRegistry, WorkerRegistry
from .serialization import JobSerializer

__all__ = [
    "EXECUTIONS_KEY",
    "MARKER_ATTRIBUTE",
    "MAX_DELAY_SECONDS",
    "MESSAGE_ATTRIBUTES",
    "BackgroundJob",
    "BatchGrouper",
    "BatchSendError",
    "IDeliveryReceipt",
    "IJob",
    "IJobExecutor",
    "IQueueHandle",
    "IQueueTransport",
    "InMemoryTransport",
    "InvalidDelayError",
    "JobSerializationError",
    "JobSerializer",
    "JobWrapper",
    "MessageAttributeValue",
    "MessageBuilder",
    "QueueConnectionError",
    "QueueRegistry",
    "SQSDeliveryReceipt",
    "SQSJobAdapter",
    "SQSJobsError",
    "SQSJobsSettings",
    "SendMessageOptions",
    "SendResult",
    "WireMessage",
    "WorkerRegistry",
    "calculate_delay",
    "enqueue",
    "enqueue_all",
    "enqueue_at",
    "group_by_queue",
    "prior_attempts",
]
