"""Text accumulation for generated source."""

from __future__ import annotations

from dataclasses import dataclass, field


class OutputBuffer:
    """An append-only buffer of source lines with indentation support."""

    def __init__(self, indent: str = "    ") -> None:
        self._lines: list[str] = []
        self._indent = indent
        self._level = 0

    def line(self, text: str = "") -> None:
        if text:
            self._lines.append(f"{self._indent * self._level}{text}")
        else:
            self._lines.append("")

    def lines(self, texts: list[str]) -> None:
        for text in texts:
            self.line(text)

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._lines.append("")

    def indent(self) -> None:
        self._level += 1

    def dedent(self) -> None:
        if self._level == 0:
            raise ValueError("dedent() below zero")
        self._level -= 1

    def extend(self, other: OutputBuffer) -> None:
        """Append another buffer's lines at this buffer's current level."""
        for text in other._lines:
            self.line(text)

    def __bool__(self) -> bool:
        return bool(self._lines)

    def text(self) -> str:
        return "\n".join(self._lines)


@dataclass(frozen=True)
class NotificationBinding:
    """A notification key bound to the carrier that represents it."""

    key: str
    method: str
    carrier: str  # class name used in the listener surface
    factory: str  # expression placed in the dispatch table


@dataclass
class GenerationOutput:
    """All state that changes while a description is rendered.

    Passed explicitly through every emitter call; sections are concatenated in
    a fixed order by ``Emitter.render``.
    """

    declarations: OutputBuffer = field(default_factory=OutputBuffer)
    events: OutputBuffer = field(default_factory=OutputBuffer)
    domains: OutputBuffer = field(default_factory=OutputBuffer)
    bindings: list[NotificationBinding] = field(default_factory=list)
    # canonical type names, claimed before any declaration is written
    reserved: set[str] = field(default_factory=set)
    declared: set[str] = field(default_factory=set)
