"""Job protocol consumed by the adapter, and a concrete pydantic job."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .options import SendMessageOptions


@runtime_checkable
class IJob(Protocol):
    """
    A unit of deferred work.

    ``send_options`` is read before a send and overwritten afterwards with
    exactly the options that went out, so callers can inspect it.
    """

    queue_name: str
    scheduled_at: float | None
    send_options: SendMessageOptions

    def serialize(self) -> Mapping[str, Any] | str | bytes:
        """Return the job body."""
        ...


class BackgroundJob(BaseModel):
    """Plain job description: which class to run, with which arguments.

    ``scheduled_at`` is seconds since the epoch.
    """

    model_config = ConfigDict(validate_assignment=True)

    job_class: str
    job_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    arguments: list[Any] = Field(default_factory=list)
    queue_name: str = "default"
    priority: int | None = None
    executions: int = Field(default=0, ge=0)
    scheduled_at: float | None = None
    send_options: SendMessageOptions = Field(default_factory=SendMessageOptions)

    @field_validator("send_options", mode="before")
    @classmethod
    def _coerce_options(cls, value: Any) -> SendMessageOptions:
        return SendMessageOptions.coerce(value)

    def serialize(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "job_class": self.job_class,
            "job_id": self.job_id,
            "queue_name": self.queue_name,
            "priority": self.priority,
            "arguments": list(self.arguments),
            "executions": self.executions,
        }
        if self.scheduled_at is not None:
            data["scheduled_at"] = self.scheduled_at
        return data
