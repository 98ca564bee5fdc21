"""Configuration for the generator and the runtime client.

Defaults can be overridden from ``PROTOBIND_*`` environment variables and from
a YAML file. Explicit keyword arguments (CLI flags) always win.

Environment:
    PROTOBIND_SOURCE_URL      URL template for fetching protocol documents
    PROTOBIND_CACHE_DIR       Where fetched documents are cached
    PROTOBIND_VERSION         Default protocol version / ref to generate
    PROTOBIND_OUTPUT          Default output path for the generated module
    PROTOBIND_REQUEST_TIMEOUT Default request timeout in seconds ("none", "0" or
                              an empty value disable it)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_URL = (
    "https://raw.githubusercontent.com/ChromeDevTools/devtools-protocol/"
    "{version}/json/{document}"
)
DEFAULT_DOCUMENTS = ("browser_protocol.json", "js_protocol.json")
DEFAULT_VERSION = "master"
DEFAULT_CLASS_NAME = "ProtocolBindings"


def _default_cache_dir() -> Path:
    return Path.home() / ".cache" / "protobind"


@dataclass
class GeneratorConfig:
    """Settings for a generation run."""

    # Schema acquisition
    source_url: str = DEFAULT_SOURCE_URL
    documents: tuple[str, ...] = DEFAULT_DOCUMENTS
    version: str = DEFAULT_VERSION
    cache_dir: Path = field(default_factory=_default_cache_dir)
    refresh: bool = False
    fetch_timeout: float = 30.0

    # Local schema files; when set, nothing is fetched
    schema_files: tuple[Path, ...] = ()

    # Output
    output: Path = Path("protocol_bindings.py")
    class_name: str = DEFAULT_CLASS_NAME

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> GeneratorConfig:
        """Build a config from defaults plus ``PROTOBIND_*`` variables."""
        env = os.environ if environ is None else environ
        config = cls()
        if "PROTOBIND_SOURCE_URL" in env:
            config.source_url = env["PROTOBIND_SOURCE_URL"]
        if "PROTOBIND_CACHE_DIR" in env:
            config.cache_dir = Path(env["PROTOBIND_CACHE_DIR"])
        if "PROTOBIND_VERSION" in env:
            config.version = env["PROTOBIND_VERSION"]
        if "PROTOBIND_OUTPUT" in env:
            config.output = Path(env["PROTOBIND_OUTPUT"])
        return config

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        environ: dict[str, str] | None = None,
        **overrides: Any,
    ) -> GeneratorConfig:
        """Layer environment, optional YAML file and explicit overrides.

        Overrides whose value is None are ignored so CLI options that were not
        given fall through to the lower layers.
        """
        config = cls.from_env(environ)
        if path is not None:
            config = config.merge(_read_yaml(path))
        return config.merge({k: v for k, v in overrides.items() if v is not None})

    def merge(self, values: dict[str, Any]) -> GeneratorConfig:
        """Return a copy with ``values`` applied, coercing paths and tuples."""
        known = {f.name for f in fields(self)}
        unknown = set(values) - known
        if unknown:
            logger.warning(f"Ignoring unknown generator settings: {sorted(unknown)}")

        updates: dict[str, Any] = {}
        for key, value in values.items():
            if key not in known:
                continue
            if key in ("cache_dir", "output"):
                value = Path(value)
            elif key == "schema_files":
                value = tuple(Path(p) for p in value)
            elif key == "documents":
                value = tuple(value)
            updates[key] = value
        return replace(self, **updates)


@dataclass
class ClientConfig:
    """Settings for a runtime client connection."""

    timeout: float | None = 30.0
    max_message_size: int | None = None  # None = unlimited, protocol frames can be large
    open_timeout: float = 10.0
    ping_interval: float | None = 20.0

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ClientConfig:
        """Build a config from defaults plus ``PROTOBIND_REQUEST_TIMEOUT``.

        ``none``, ``0`` and an empty value all mean no timeout.
        """
        env = os.environ if environ is None else environ
        config = cls()
        raw = env.get("PROTOBIND_REQUEST_TIMEOUT")
        if raw is not None:
            value = raw.strip().lower()
            config.timeout = None if value in ("", "none") or float(value) == 0 else float(value)
        return config


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    # Allow nesting under a "generator" key
    section = data.get("generator", data)
    if not isinstance(section, dict):
        raise ValueError(f"'generator' section in {path} must be a mapping")
    return section
