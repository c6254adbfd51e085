"""Process-wide registries keyed by queue name.

Both registries are insert-only and read-mostly. Entries never change once
written, so concurrent first registrations for the same name are harmless:
one value wins and every caller sees success.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .ports import IQueueHandle

logger = logging.getLogger("sqs_jobs.registry")


class WorkerRegistry:
    """Which handler class consumes which queue."""

    _default: ClassVar[WorkerRegistry | None] = None
    _default_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._workers: dict[str, type[Any]] = {}

    @classmethod
    def default(cls) -> WorkerRegistry:
        """The shared process-wide registry, created on first use."""
        if cls._default is None:
            with cls._default_lock:
                if cls._default is None:
                    cls._default = cls()
        return cls._default

    def register(self, queue_name: str, handler_cls: type[Any]) -> None:
        """Bind *handler_cls* to *queue_name*. Registering again is a no-op."""
        with self._lock:
            existing = self._workers.get(queue_name)
            if existing is None:
                self._workers[queue_name] = handler_cls
                logger.debug(
                    "Registered worker %s for queue %s",
                    handler_cls.__name__,
                    queue_name,
                )
            elif existing is not handler_cls:
                logger.warning(
                    "Queue %s already consumed by %s; keeping it over %s",
                    queue_name,
                    existing.__name__,
                    handler_cls.__name__,
                )

    def get(self, queue_name: str) -> type[Any] | None:
        return self._workers.get(queue_name)

    def queues(self) -> list[str]:
        """Registered queue names in registration order."""
        with self._lock:
            return list(self._workers)

    def __contains__(self, queue_name: object) -> bool:
        return queue_name in self._workers

    def clear(self) -> None:
        """Drop all registrations (testing utility)."""
        with self._lock:
            self._workers.clear()


class QueueRegistry:
    """Cache of resolved queue handles."""

    _default: ClassVar[QueueRegistry | None] = None
    _default_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._queues: dict[str, IQueueHandle] = {}

    @classmethod
    def default(cls) -> QueueRegistry:
        """The shared process-wide cache, created on first use."""
        if cls._default is None:
            with cls._default_lock:
                if cls._default is None:
                    cls._default = cls()
        return cls._default

    def get(self, queue_name: str) -> IQueueHandle | None:
        return self._queues.get(queue_name)

    def put(self, queue_name: str, queue: IQueueHandle) -> IQueueHandle:
        """Store *queue* unless one is already cached; return the cached one."""
        with self._lock:
            return self._queues.setdefault(queue_name, queue)

    async def get_or_resolve(
        self,
        queue_name: str,
        resolve: Callable[[str], Awaitable[IQueueHandle]],
    ) -> IQueueHandle:
        """Return the cached handle or resolve, cache and return it.

        The lookup itself runs outside the lock; if two callers race, the
        first stored handle wins and both get it.
        """
        cached = self._queues.get(queue_name)
        if cached is not None:
            return cached
        logger.debug("Resolving queue %s", queue_name)
        return self.put(queue_name, await resolve(queue_name))

    def clear(self) -> None:
        """Drop all cached handles (testing utility)."""
        with self._lock:
            self._queues.clear()
