"""SQS client management, queue URL resolution and attribute lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from aiobotocore.session import AioSession

from ..exceptions import QueueConnectionError

if TYPE_CHECKING:
    from ..config import SQSJobsSettings

_NON_EXISTENT_QUEUE = "AWS.SimpleQueueService.NonExistentQueue"


def _error_code(exc: Exception) -> str | None:
    err = getattr(exc, "response", {}) or {}
    return err.get("Error", {}).get("Code")


class SQSConnectionManager:
    """Manages the aiobotocore SQS client shared by transport and consumer."""

    def __init__(
        self,
        region_name: str = "us-east-1",
        *,
        session: AioSession | None = None,
        create_missing_queues: bool = False,
        **client_kwargs: Any,
    ) -> None:
        """Configure region and optional session/client kwargs.

        Queues are only looked up unless *create_missing_queues* is set.
        """
        self._region = region_name
        self._create_missing = create_missing_queues
        self._session = session or AioSession()
        self._client_kwargs = client_kwargs
        self._client: Any = None
        self._client_cm: Any = None

    @classmethod
    def from_settings(
        cls, settings: SQSJobsSettings, *, session: AioSession | None = None
    ) -> SQSConnectionManager:
        """Build a manager from :class:`SQSJobsSettings`."""
        client_kwargs: dict[str, Any] = {}
        if settings.endpoint_url:
            client_kwargs["endpoint_url"] = settings.endpoint_url
        return cls(
            settings.region_name,
            session=session,
            create_missing_queues=settings.create_missing_queues,
            **client_kwargs,
        )

    async def get_client(self) -> Any:
        """Return shared SQS client; create if needed."""
        if self._client is None:
            self._client_cm = self._session.create_client(
                "sqs",
                region_name=self._region,
                **self._client_kwargs,
            )
            self._client = await self._client_cm.__aenter__()
        return self._client

    async def get_queue_url(self, queue_name: str) -> str:
        """Resolve queue name to queue URL.

        A missing queue raises :class:`QueueConnectionError`, or is created
        when the manager was built with ``create_missing_queues`` (FIFO names
        get ``FifoQueue`` set).
        """
        client = await self.get_client()
        try:
            out = await client.get_queue_url(QueueName=queue_name)
            return str(out["QueueUrl"])
        except Exception as e:
            if _error_code(e) != _NON_EXISTENT_QUEUE:
                raise QueueConnectionError(str(e)) from e
            if not self._create_missing:
                raise QueueConnectionError(f"Queue {queue_name} does not exist") from e
        create_kwargs: dict[str, Any] = {"QueueName": queue_name}
        if queue_name.endswith(".fifo"):
            create_kwargs["Attributes"] = {"FifoQueue": "true"}
        try:
            out = await client.create_queue(**create_kwargs)
        except Exception as e:
            raise QueueConnectionError(str(e)) from e
        return str(out["QueueUrl"])

    async def get_queue_attributes(
        self, queue_url: str, *names: str
    ) -> dict[str, str]:
        """Return the requested queue attributes (``All`` if none named)."""
        client = await self.get_client()
        try:
            out = await client.get_queue_attributes(
                QueueUrl=queue_url,
                AttributeNames=list(names) or ["All"],
            )
        except Exception as e:
            raise QueueConnectionError(str(e)) from e
        return dict(out.get("Attributes", {}))

    async def close(self) -> None:
        """Close the client if open."""
        if self._client_cm is not None:
            await self._client_cm.__aexit__(None, None, None)
            self._client_cm = None
            self._client = None

    async def health_check(self) -> bool:
        """Return True if we can list queues (lightweight check)."""
        try:
            client = await self.get_client()
            await client.list_queues(MaxResults=1)
            return True
        except Exception:  # noqa: BLE001
            return False
