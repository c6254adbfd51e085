"""In-memory transport for tests and local runs."""

from __future__ import annotations

from .transport import InMemoryQueue, InMemoryReceipt, InMemoryTransport

__all__ = [
    "InMemoryQueue",
    "InMemoryReceipt",
    "InMemoryTransport",
]
