"""Output sinks: where a finished artifact goes."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class OutputSink(Protocol):
    """Persists one generated artifact tagged with its protocol version."""

    def write(self, text: str, version: str) -> str:
        """Store ``text`` and return a description of where it went."""
        ...


class FileOutputSink:
    """Writes the artifact to a file, replacing it atomically."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def write(self, text: str, version: str) -> str:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.info(f"Wrote protocol {version} bindings to {self.path}")
        return str(self.path)


class MemoryOutputSink:
    """Keeps artifacts in memory, keyed by version."""

    def __init__(self) -> None:
        self.artifacts: dict[str, str] = {}

    def write(self, text: str, version: str) -> str:
        self.artifacts[version] = text
        return f"memory:{version}"
