"""Response-envelope normalization for the remote API.

Backends answer either with the bare resource, with the resource under
its own name (``{"ride": {...}}``, ``{"rides": [...]}``), or with the
``{"success": true, "data": ...}`` wrapper. Every store call goes through
``unwrap_record`` or ``unwrap_collection``; nothing else inspects raw
response bodies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..core.exceptions import RemoteError
from ..entity import EntityKind

_MAX_DEPTH = 2


class EnvelopeShape(str, Enum):
    BARE = "bare"
    NAMED = "named"
    DATA = "data"


@dataclass(frozen=True)
class ResponseEnvelope:
    shape: EnvelopeShape
    payload: Any

    @classmethod
    def parse(cls, body: Any, name: str) -> "ResponseEnvelope":
        """Classify ``body``; ``name`` is the key the resource may be wrapped under."""
        if isinstance(body, dict):
            if name in body:
                return cls(EnvelopeShape.NAMED, body[name])
            if "data" in body:
                return cls(EnvelopeShape.DATA, body["data"])
        return cls(EnvelopeShape.BARE, body)


def unwrap_record(body: Any, kind: EntityKind) -> dict[str, Any]:
    payload = body
    for _ in range(_MAX_DEPTH):
        envelope = ResponseEnvelope.parse(payload, kind.name)
        payload = envelope.payload
        if envelope.shape is EnvelopeShape.BARE:
            break
    if not isinstance(payload, dict):
        raise RemoteError(
            f"Malformed {kind.name} response: expected an object",
            details={"body_type": type(payload).__name__},
        )
    return payload


def unwrap_collection(body: Any, kind: EntityKind) -> list[dict[str, Any]]:
    payload = body
    for _ in range(_MAX_DEPTH):
        if isinstance(payload, list):
            break
        envelope = ResponseEnvelope.parse(payload, kind.plural)
        if envelope.shape is EnvelopeShape.BARE:
            break
        payload = envelope.payload
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise RemoteError(
            f"Malformed {kind.plural} response: expected a list of objects",
            details={"body_type": type(payload).__name__},
        )
    return payload
