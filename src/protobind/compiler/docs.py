"""Documentation text for generated declarations."""

from __future__ import annotations

import textwrap
from typing import Protocol

LINE_WIDTH = 88


class Documented(Protocol):
    description: str | None
    experimental: bool
    deprecated: bool


def doc_text(entry: Documented) -> list[str]:
    """Paragraph lines for an entry, with status markers appended."""
    paragraphs: list[str] = []
    if entry.description:
        paragraphs.extend(p.strip() for p in entry.description.split("\n\n") if p.strip())
    markers = []
    if entry.experimental:
        markers.append("Experimental.")
    if entry.deprecated:
        markers.append("Deprecated.")
    if markers:
        paragraphs.append(" ".join(markers))
    return paragraphs


def comment_lines(entry: Documented, indent: int = 0) -> list[str]:
    """``#`` comment lines wrapped to the line width."""
    width = max(LINE_WIDTH - indent - 2, 20)
    lines: list[str] = []
    for i, paragraph in enumerate(doc_text(entry)):
        if i:
            lines.append("#")
        lines.extend(f"# {line}" for line in textwrap.wrap(" ".join(paragraph.split()), width))
    return lines


def docstring_lines(entry: Documented, indent: int = 0, fallback: str | None = None) -> list[str]:
    """Triple-quoted docstring lines, or an empty list when there is nothing to say."""
    paragraphs = doc_text(entry)
    if not paragraphs and fallback:
        paragraphs = [fallback]
    if not paragraphs:
        return []

    width = max(LINE_WIDTH - indent, 20)
    body: list[str] = []
    for i, paragraph in enumerate(paragraphs):
        if i:
            body.append("")
        text = " ".join(paragraph.split()).replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
        body.extend(textwrap.wrap(text, width))

    if len(body) == 1 and len(body[0]) + 6 <= width and not body[0].endswith('"'):
        return [f'"""{body[0]}"""']
    return ['"""', *body, '"""']
