"""SQS transport adapter built on aiobotocore."""

from __future__ import annotations

from .connection import SQSConnectionManager
from .consumer import SQSJobConsumer
from .transport import SQSQueue, SQSTransport

__all__ = [
    "SQSConnectionManager",
    "SQSJobConsumer",
    "SQSQueue",
    "SQSTransport",
]
