"""protobind - compile versioned protocol descriptions into typed Python clients.

Two halves:
- compiler: resolves a protocol description's type graph and renders a Python
  module of TypedDicts, command stubs and notification carriers
- runtime: the ProtocolClient those modules bind to, correlating requests and
  responses and dispatching notifications over a message channel
"""

from .compiler import FileOutputSink, MemoryOutputSink, compile_description, generate
from .exceptions import (
    ChannelClosedError,
    ProtobindError,
    ProtocolFramingError,
    ProtocolRequestError,
    RequestTimeout,
    SchemaError,
)
from .runtime import FrameOutcome, MemoryChannel, Notification, ProtocolClient, WebSocketChannel
from .schema import FileSchemaProvider, HttpSchemaProvider, ProtocolDescription

__version__ = "0.1.0"

__all__ = [
    # Generation
    "generate",
    "compile_description",
    "FileOutputSink",
    "MemoryOutputSink",
    "FileSchemaProvider",
    "HttpSchemaProvider",
    "ProtocolDescription",
    # Runtime
    "ProtocolClient",
    "FrameOutcome",
    "Notification",
    "MemoryChannel",
    "WebSocketChannel",
    # Errors
    "ProtobindError",
    "SchemaError",
    "ProtocolFramingError",
    "ProtocolRequestError",
    "RequestTimeout",
    "ChannelClosedError",
]
