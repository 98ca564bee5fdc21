"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import copy
import json
import types
from pathlib import Path
from typing import Any

import pytest

from protobind.schema import ProtocolDescription

FIXTURES_DIR = Path(__file__).parent / "fixtures"
PAGE_PROTOCOL = FIXTURES_DIR / "page_protocol.json"


@pytest.fixture
def page_protocol_path() -> Path:
    return PAGE_PROTOCOL


@pytest.fixture
def page_document() -> dict[str, Any]:
    """A fresh, mutable copy of the Page/Network fixture document."""
    with open(PAGE_PROTOCOL, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def page_description(page_document: dict[str, Any]) -> ProtocolDescription:
    return ProtocolDescription.from_dict(page_document)


@pytest.fixture
def minimal_page_description() -> ProtocolDescription:
    """FrameId, navigate(url) -> {frameId} and a payload-less loaded event."""
    return ProtocolDescription.from_dict(
        {
            "version": {"major": "1", "minor": "0"},
            "domains": [
                {
                    "domain": "Page",
                    "types": [{"id": "FrameId", "type": "string"}],
                    "commands": [
                        {
                            "name": "navigate",
                            "parameters": [{"name": "url", "type": "string"}],
                            "returns": [{"name": "frameId", "$ref": "FrameId"}],
                        }
                    ],
                    "events": [
                        {"name": "loaded"},
                        {
                            "name": "frameNavigated",
                            "parameters": [{"name": "frameId", "$ref": "FrameId"}],
                        },
                    ],
                }
            ],
        }
    )


def _make_description(*domains: dict[str, Any], major: str = "1", minor: str = "0") -> ProtocolDescription:
    """Build a description from raw domain dicts."""
    return ProtocolDescription.from_dict(
        {"version": {"major": major, "minor": minor}, "domains": copy.deepcopy(list(domains))}
    )


def _load_bindings(text: str, name: str = "generated_bindings") -> types.ModuleType:
    """Execute generated module text and return it as a module object."""
    module = types.ModuleType(name)
    exec(compile(text, f"<{name}>", "exec"), module.__dict__)
    return module


@pytest.fixture
def make_description():
    return _make_description


@pytest.fixture
def load_bindings():
    return _load_bindings
