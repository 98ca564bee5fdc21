"""Unit tests for documentation text rendering."""

from __future__ import annotations

from protobind.compiler.docs import comment_lines, doc_text, docstring_lines
from protobind.schema import CommandDef


def _entry(**kwargs) -> CommandDef:
    return CommandDef(name="x", **kwargs)


class TestDocText:
    def test_empty(self) -> None:
        assert doc_text(_entry()) == []

    def test_paragraphs_and_markers(self) -> None:
        entry = _entry(description="First.\n\nSecond.", experimental=True, deprecated=True)
        assert doc_text(entry) == ["First.", "Second.", "Experimental. Deprecated."]


class TestCommentLines:
    def test_wraps_long_text(self) -> None:
        lines = comment_lines(_entry(description="word " * 40))
        assert len(lines) > 1
        assert all(line.startswith("# ") and len(line) <= 88 for line in lines)

    def test_paragraph_separator(self) -> None:
        assert comment_lines(_entry(description="A.\n\nB.")) == ["# A.", "#", "# B."]


class TestDocstringLines:
    def test_nothing_to_say(self) -> None:
        assert docstring_lines(_entry()) == []

    def test_fallback(self) -> None:
        assert docstring_lines(_entry(), fallback="Default.") == ['"""Default."""']

    def test_single_line(self) -> None:
        assert docstring_lines(_entry(description="Short.")) == ['"""Short."""']

    def test_multi_paragraph(self) -> None:
        assert docstring_lines(_entry(description="A.\n\nB.")) == ['"""', "A.", "", "B.", '"""']

    def test_escapes_quotes_and_backslashes(self) -> None:
        lines = docstring_lines(_entry(description='Matches \\d and """quoted"""'))
        text = "\n".join(lines)
        assert "\\\\d" in text
        assert '\\"\\"\\"quoted' in text

    def test_trailing_quote_forces_block(self) -> None:
        assert docstring_lines(_entry(description='Say "hi"')) == ['"""', 'Say "hi"', '"""']
