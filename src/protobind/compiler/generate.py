"""The generate-for-version operation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import DEFAULT_CLASS_NAME
from ..schema.models import ProtocolDescription
from ..schema.provider import SchemaProvider
from .emitter import Emitter
from .resolver import TypeResolver
from .sink import OutputSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    """Summary of a completed generation run."""

    version: str
    location: str
    domains: int
    types: int
    commands: int
    events: int


def compile_description(
    description: ProtocolDescription, class_name: str = DEFAULT_CLASS_NAME
) -> str:
    """Resolve and render a description to module text.

    Raises:
        SchemaError: If any reference, id or enum is invalid
    """
    resolver = TypeResolver(description)
    resolver.validate()
    return Emitter(resolver, class_name=class_name).render()


async def generate(
    version: str | None,
    provider: SchemaProvider,
    sink: OutputSink,
    *,
    class_name: str = DEFAULT_CLASS_NAME,
) -> GenerationResult:
    """Generate bindings for ``version`` and hand them to ``sink``.

    The whole module is rendered in memory first; a SchemaError anywhere
    aborts the run before the sink is called, so no partial artifact is ever
    written.
    """
    description = await provider.get_protocol(version)
    tag = description.version.tag
    logger.info(f"Generating bindings for protocol {tag} ({len(description.domains)} domains)")

    text = compile_description(description, class_name=class_name)
    location = sink.write(text, tag)

    return GenerationResult(
        version=tag,
        location=location,
        domains=len(description.domains),
        types=sum(len(d.types or ()) for d in description.domains),
        commands=sum(len(d.commands or ()) for d in description.domains),
        events=sum(len(d.events or ()) for d in description.domains),
    )
