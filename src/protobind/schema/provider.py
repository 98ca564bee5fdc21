"""Schema providers: where protocol descriptions come from.

The generator only needs ``get_protocol(version)``; providers decide how the
document is acquired. Two implementations ship here:

- FileSchemaProvider: one or more local JSON documents
- HttpSchemaProvider: versioned documents fetched over HTTP and cached on disk
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import httpx
from pydantic import ValidationError

from ..config import DEFAULT_DOCUMENTS, DEFAULT_SOURCE_URL
from ..exceptions import SchemaError
from .models import ProtocolDescription

logger = logging.getLogger(__name__)


@runtime_checkable
class SchemaProvider(Protocol):
    """Supplies an immutable ProtocolDescription for a requested version."""

    async def get_protocol(self, version: str | None = None) -> ProtocolDescription:
        """Return the description for ``version``.

        Raises:
            SchemaError: If the document cannot be obtained or parsed
        """
        ...


def parse_document(data: Any, source: str) -> ProtocolDescription:
    """Validate a decoded JSON document into a ProtocolDescription."""
    if not isinstance(data, dict):
        raise SchemaError("protocol document must be a JSON object", path=source)
    try:
        return ProtocolDescription.from_dict(data)
    except ValidationError as e:
        raise SchemaError(f"invalid protocol document: {e}", path=source) from e


def load_document(path: Path) -> ProtocolDescription:
    """Read and validate one JSON document from disk."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise SchemaError(f"cannot read protocol document: {e}", path=str(path)) from e
    except json.JSONDecodeError as e:
        raise SchemaError(f"invalid JSON: {e}", path=str(path)) from e
    return parse_document(data, str(path))


class FileSchemaProvider:
    """Reads protocol descriptions from local JSON files.

    Several files are merged in the given order. When a concrete
    ``major.minor`` version is requested it must match the documents.
    """

    def __init__(self, paths: Sequence[Path | str]):
        if not paths:
            raise ValueError("FileSchemaProvider needs at least one path")
        self.paths = [Path(p) for p in paths]

    async def get_protocol(self, version: str | None = None) -> ProtocolDescription:
        descriptions = [load_document(path) for path in self.paths]
        description = ProtocolDescription.merge(*descriptions)
        logger.debug(
            f"Loaded {len(description.domains)} domains from "
            f"{', '.join(str(p) for p in self.paths)}"
        )

        if version and _looks_like_tag(version) and version != description.version.tag:
            raise SchemaError(
                f"requested version {version} but documents declare "
                f"{description.version.tag}"
            )
        return description


class HttpSchemaProvider:
    """Fetches versioned protocol documents over HTTP with an on-disk cache.

    ``source_url`` is formatted with ``version`` and ``document``; the default
    points at the published devtools protocol repository where ``version`` is
    a git ref.
    """

    def __init__(
        self,
        cache_dir: Path,
        source_url: str = DEFAULT_SOURCE_URL,
        documents: Sequence[str] = DEFAULT_DOCUMENTS,
        refresh: bool = False,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.cache_dir = cache_dir
        self.source_url = source_url
        self.documents = tuple(documents)
        self.refresh = refresh
        self.timeout = timeout
        self._transport = transport

    def cache_path(self, version: str, document: str) -> Path:
        return self.cache_dir / _safe_segment(version) / document

    async def get_protocol(self, version: str | None = None) -> ProtocolDescription:
        if not version:
            raise SchemaError("HttpSchemaProvider needs an explicit version")

        descriptions: list[ProtocolDescription] = []
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            for document in self.documents:
                data = await self._load(client, version, document)
                descriptions.append(parse_document(data, f"{version}/{document}"))

        return ProtocolDescription.merge(*descriptions)

    async def _load(self, client: httpx.AsyncClient, version: str, document: str) -> Any:
        cached = self.cache_path(version, document)
        if cached.exists() and not self.refresh:
            logger.debug(f"Using cached protocol document {cached}")
            try:
                return json.loads(cached.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                logger.warning(f"Discarding corrupt cache entry {cached}")

        url = self.source_url.format(version=version, document=document)
        logger.info(f"Fetching {url}")
        try:
            response = await client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise SchemaError(f"failed to fetch protocol document: {e}", path=url) from e
        except json.JSONDecodeError as e:
            raise SchemaError(f"invalid JSON: {e}", path=url) from e

        _write_cache(cached, response.text)
        return data


def _write_cache(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    except OSError:
        Path(tmp).unlink(missing_ok=True)
        logger.warning(f"Could not write cache entry {path}", exc_info=True)


def _safe_segment(version: str) -> str:
    return "".join(c if c.isalnum() or c in "-_." else "_" for c in version)


def _looks_like_tag(version: str) -> bool:
    major, sep, minor = version.partition(".")
    return bool(sep) and major.isdigit() and minor.isdigit()
