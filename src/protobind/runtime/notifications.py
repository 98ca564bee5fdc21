"""Notification carriers and dispatch keys."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any, Generic, TypeAlias, TypeVar

DetailT = TypeVar("DetailT")
NotificationT = TypeVar("NotificationT", bound="Notification[Any]")

DOMAIN_SEPARATOR = "."
KEY_SEPARATOR = "_"


def notification_key(method: str) -> str:
    """Map a wire method (``Page.loadEventFired``) to its dispatch key."""
    return method.replace(DOMAIN_SEPARATOR, KEY_SEPARATOR)


class Notification(Generic[DetailT]):
    """A notification delivered to listeners.

    ``type`` is the dispatch key; ``detail`` is the notification's parameters,
    or None for notifications that carry no payload. Generated code subclasses
    this once per event that declares parameters.
    """

    __slots__ = ("type", "detail")

    def __init__(self, type: str, detail: DetailT | None = None) -> None:
        self.type = type
        self.detail = detail

    @classmethod
    def bare(cls, type: str) -> NotificationFactory:
        """Factory for a payload-less notification bound to ``type``."""
        return partial(cls, type)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Notification):
            return NotImplemented
        return type(self) is type(other) and self.type == other.type and self.detail == other.detail

    def __hash__(self) -> int:
        return hash((type(self), self.type))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self.type!r}, detail={self.detail!r})"


# Builds a carrier from a frame's params (None when the frame had none)
NotificationFactory: TypeAlias = Callable[[Any], Notification[Any]]

Listener: TypeAlias = Callable[[NotificationT], Awaitable[None] | None]
