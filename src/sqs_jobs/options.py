"""Typed send options: the known SQS keys plus a passthrough bag."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _camelize(key: str) -> str:
    """``message_system_attributes`` -> ``MessageSystemAttributes``."""
    return "".join(part[:1].upper() + part[1:] for part in key.split("_"))


class MessageAttributeValue(BaseModel):
    """One typed SQS message attribute.

    Accepts both snake_case (``data_type``) and wire (``DataType``) keys.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    data_type: str = Field(default="String", alias="DataType")
    string_value: str | None = Field(default=None, alias="StringValue")
    binary_value: bytes | None = Field(default=None, alias="BinaryValue")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class SendMessageOptions(BaseModel):
    """Options sent alongside a message body.

    Recognized keys are typed fields; anything else is kept in
    ``model_extra`` and forwarded to the transport unchanged.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    delay_seconds: int | None = Field(default=None, alias="DelaySeconds")
    message_attributes: dict[str, MessageAttributeValue] = Field(
        default_factory=dict, alias="MessageAttributes"
    )
    message_deduplication_id: str | None = Field(
        default=None, alias="MessageDeduplicationId"
    )
    message_group_id: str | None = Field(default=None, alias="MessageGroupId")

    @classmethod
    def coerce(
        cls, value: SendMessageOptions | dict[str, Any] | None
    ) -> SendMessageOptions:
        """Accept an options instance, a plain mapping, or None."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)

    def explicit(self) -> dict[str, Any]:
        """Top-level keys that were set, with their (python) values."""
        data = {name: getattr(self, name) for name in self.model_fields_set}
        data.update(self.model_extra or {})
        return data

    def merged(
        self, other: SendMessageOptions | dict[str, Any] | None = None, **kwargs: Any
    ) -> SendMessageOptions:
        """Return a copy where the keys set on *other* replace those of self."""
        data = self.explicit()
        data.update(SendMessageOptions.coerce(other).explicit())
        data.update(SendMessageOptions.coerce(kwargs).explicit())
        return SendMessageOptions.model_validate(data)

    def without(self, *names: str) -> SendMessageOptions:
        """Return a copy with the given top-level keys unset."""
        data = {k: v for k, v in self.explicit().items() if k not in names}
        return SendMessageOptions.model_validate(data)

    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def to_send_kwargs(self) -> dict[str, Any]:
        """Render as botocore ``send_message`` keyword arguments."""
        kwargs: dict[str, Any] = {}
        if self.delay_seconds is not None:
            # The queue rejects negative delays; negative means "now".
            kwargs["DelaySeconds"] = max(self.delay_seconds, 0)
        if self.message_attributes:
            kwargs["MessageAttributes"] = {
                name: value.to_wire()
                for name, value in self.message_attributes.items()
            }
        if self.message_deduplication_id is not None:
            kwargs["MessageDeduplicationId"] = self.message_deduplication_id
        if self.message_group_id is not None:
            kwargs["MessageGroupId"] = self.message_group_id
        for key, value in self.extras().items():
            kwargs[_camelize(key)] = value
        return kwargs
