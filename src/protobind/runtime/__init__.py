"""Client runtime used by generated bindings.

Key concepts:
- Requests: ``{id, method, params?}`` frames answered by ``{id, result?}``
- Correlation: each response completes exactly the request with its id
- Notifications: ``{method, params?}`` frames dispatched to typed carriers
"""

from .channel import MemoryChannel, MessageChannel, WebSocketChannel
from .client import DEFAULT_TIMEOUT, ErrorListener, FrameOutcome, ProtocolClient
from .frames import InboundFrame, RequestFrame, parse_frame
from .notifications import Listener, Notification, NotificationFactory, notification_key

__all__ = [
    "ProtocolClient",
    "FrameOutcome",
    "DEFAULT_TIMEOUT",
    "ErrorListener",
    "MessageChannel",
    "MemoryChannel",
    "WebSocketChannel",
    "InboundFrame",
    "RequestFrame",
    "parse_frame",
    "Listener",
    "Notification",
    "NotificationFactory",
    "notification_key",
]
