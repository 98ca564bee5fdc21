"""Exception hierarchy.

Generation-time failures are SchemaError and always abort the run before
anything is written. Run-time failures on the message channel are
ProtocolFramingError and never stop the client; they are reported to error
listeners instead.
"""

from __future__ import annotations

from typing import Any


class ProtobindError(Exception):
    """Base class for all protobind errors."""


class SchemaError(ProtobindError):
    """The protocol description cannot be compiled.

    Raised for unresolved references, duplicate type ids, empty enums and
    shapes the resolver cannot turn into a concrete type.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class ProtocolFramingError(ProtobindError):
    """An inbound frame could not be matched or parsed."""

    def __init__(self, message: str, frame: Any = None) -> None:
        self.frame = frame
        super().__init__(message)


class RequestTimeout(ProtobindError, TimeoutError):
    """A request did not receive a response in time."""

    def __init__(self, method: str, request_id: int, timeout: float) -> None:
        self.method = method
        self.request_id = request_id
        self.timeout = timeout
        super().__init__(f"{method} (id={request_id}) timed out after {timeout}s")


class ProtocolRequestError(ProtobindError):
    """The remote end answered a request with an error object."""

    def __init__(
        self,
        method: str,
        request_id: int,
        code: int | None,
        message: str,
        data: Any = None,
    ) -> None:
        self.method = method
        self.request_id = request_id
        self.code = code
        self.data = data
        super().__init__(f"{method} (id={request_id}) failed: {message} [code={code}]")


class ChannelClosedError(ProtobindError, ConnectionError):
    """The message channel closed while requests were still pending."""
