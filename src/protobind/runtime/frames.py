"""Wire frames exchanged over the message channel.

Every frame is a JSON object:

    request:       {"id": 1, "method": "Page.navigate", "params": {...}}
    response:      {"id": 1, "result": {...}}
    error:         {"id": 1, "error": {"code": -32000, "message": "..."}}
    notification:  {"method": "Page.loadEventFired", "params": {...}}

Requests carry ``params`` only when the caller supplied them.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictInt, ValidationError

from ..exceptions import ProtocolFramingError


class RequestFrame(BaseModel):
    """An outbound request."""

    id: int
    method: str
    params: dict[str, Any] | None = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


class ErrorObject(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: int | None = None
    message: str = "Unknown error"
    data: Any = None


class InboundFrame(BaseModel):
    """A response, error response or notification received from the peer."""

    model_config = ConfigDict(extra="allow")

    # strict: "1" or 1.0 is a malformed id, not request 1
    id: StrictInt | None = None
    method: str | None = None
    params: dict[str, Any] | None = None
    result: Any = None
    error: ErrorObject | None = None

    @property
    def is_response(self) -> bool:
        return self.id is not None

    @property
    def is_notification(self) -> bool:
        return self.id is None and self.method is not None


def parse_frame(raw: str | bytes | dict[str, Any]) -> InboundFrame:
    """Decode one inbound frame.

    Raises:
        ProtocolFramingError: If the frame is not a JSON object of the
            expected shape
    """
    if isinstance(raw, dict):
        data: Any = raw
    else:
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProtocolFramingError(f"Invalid JSON frame: {e}", frame=raw) from e

    if not isinstance(data, dict):
        raise ProtocolFramingError("Frame is not a JSON object", frame=raw)

    try:
        return InboundFrame.model_validate(data)
    except ValidationError as e:
        raise ProtocolFramingError(f"Malformed frame: {e}", frame=raw) from e
