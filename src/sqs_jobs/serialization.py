"""JobSerializer: job body to JSON text, canonical form and digest."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .exceptions import JobSerializationError

if TYPE_CHECKING:
    from .job import IJob

JobBody = Mapping[str, Any] | str | bytes


def _json_serializer(obj: Any) -> Any:
    """Serialize datetime and other non-JSON types."""
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class JobSerializer:
    """Encode job bodies for the wire and decode them on receipt.

    Mapping bodies are sent as JSON text; ``str``/``bytes`` bodies are sent
    verbatim. ``identity_field`` is dropped from the canonical form of any
    JSON object body, so two enqueues of the same logical job share a
    deduplication id.
    """

    def __init__(self, identity_field: str = "job_id") -> None:
        self.identity_field = identity_field

    def body_of(self, job: IJob) -> JobBody:
        """Call ``job.serialize()``, wrapping any failure."""
        try:
            return job.serialize()
        except (TypeError, ValueError) as e:
            raise JobSerializationError(str(e)) from e

    def encode(self, body: JobBody) -> str:
        """Body as message text."""
        if isinstance(body, bytes):
            try:
                return body.decode("utf-8")
            except UnicodeDecodeError as e:
                raise JobSerializationError(str(e)) from e
        if isinstance(body, str):
            return body
        try:
            return json.dumps(dict(body), default=_json_serializer)
        except (TypeError, ValueError) as e:
            raise JobSerializationError(str(e)) from e

    def _parsed_object(self, body: str | bytes) -> dict[str, Any] | None:
        try:
            data = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        return data if isinstance(data, dict) else None

    def canonicalize(self, body: JobBody) -> bytes:
        """Stable byte form of *body* without the identity field.

        Text bodies holding a JSON object are parsed and canonicalized like
        mappings; any other text is used byte for byte.
        """
        if isinstance(body, (str, bytes)):
            parsed = self._parsed_object(body)
            if parsed is None:
                return body.encode("utf-8") if isinstance(body, str) else body
            body = parsed
        stripped = {k: v for k, v in body.items() if k != self.identity_field}
        try:
            text = json.dumps(
                stripped,
                sort_keys=True,
                separators=(",", ":"),
                default=_json_serializer,
            )
        except (TypeError, ValueError) as e:
            raise JobSerializationError(str(e)) from e
        return text.encode("utf-8")

    def digest(self, body: JobBody) -> str:
        """SHA-256 hex digest of the canonical body."""
        return hashlib.sha256(self.canonicalize(body)).hexdigest()

    def decode(self, raw: bytes | str) -> dict[str, Any]:
        """Decode received message text back to a body mapping."""
        try:
            text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            data = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise JobSerializationError(str(e)) from e
        if not isinstance(data, dict):
            raise JobSerializationError(
                f"Expected a JSON object body, got {type(data).__name__}"
            )
        return data
