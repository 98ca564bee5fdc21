"""Pydantic models for a protocol description document.

The document is a tree of domains. Each domain declares types, commands and
events; every field and parameter carries an inline type specification or a
``$ref`` naming another type.

Example (abridged):
    {
        "version": {"major": "1", "minor": "3"},
        "domains": [
            {
                "domain": "Page",
                "types": [{"id": "FrameId", "type": "string"}],
                "commands": [
                    {
                        "name": "navigate",
                        "parameters": [{"name": "url", "type": "string"}],
                        "returns": [{"name": "frameId", "$ref": "FrameId"}]
                    }
                ],
                "events": [{"name": "loadEventFired"}]
            }
        ]
    }

Models are frozen and sequences are tuples: a description is loaded once and
never changes for the rest of a generation run.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _SchemaModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class ProtocolVersion(_SchemaModel):
    """Protocol version as published in the document."""

    major: str
    minor: str

    @property
    def tag(self) -> str:
        return f"{self.major}.{self.minor}"


class TypeSpec(_SchemaModel):
    """Inline type specification shared by types, properties and items.

    Exactly one of ``type`` or ``ref`` is expected; the resolver rejects
    anything it cannot turn into a concrete shape.
    """

    type: str | None = None
    ref: str | None = Field(default=None, alias="$ref")
    enum: tuple[str, ...] | None = None
    items: ItemSpec | None = None
    properties: tuple[PropertyDef, ...] | None = None

    @property
    def is_reference(self) -> bool:
        return self.ref is not None


class ItemSpec(TypeSpec):
    """Array item specification."""


class _Documented(_SchemaModel):
    description: str | None = None
    experimental: bool = False
    deprecated: bool = False


class PropertyDef(TypeSpec, _Documented):
    """A named property of an object type, or a command/event parameter."""

    name: str
    optional: bool = False


Parameter = PropertyDef


class TypeDef(TypeSpec, _Documented):
    """A named type declared by a domain."""

    id: str


class CommandDef(_Documented):
    """A remote command: request parameters and result fields."""

    name: str
    parameters: tuple[PropertyDef, ...] | None = None
    returns: tuple[PropertyDef, ...] | None = None
    redirect: str | None = None


class EventDef(_Documented):
    """An asynchronous notification sent by the remote end."""

    name: str
    parameters: tuple[PropertyDef, ...] | None = None


class Domain(_Documented):
    """A named grouping of types, commands and events."""

    domain: str
    dependencies: tuple[str, ...] = ()
    types: tuple[TypeDef, ...] | None = None
    commands: tuple[CommandDef, ...] | None = None
    events: tuple[EventDef, ...] | None = None

    @property
    def name(self) -> str:
        return self.domain


class ProtocolDescription(_SchemaModel):
    """A complete, versioned protocol description."""

    version: ProtocolVersion
    domains: tuple[Domain, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProtocolDescription:
        return cls.model_validate(data)

    @classmethod
    def merge(cls, *descriptions: ProtocolDescription) -> ProtocolDescription:
        """Concatenate domains from several documents, keeping the first version."""
        if not descriptions:
            raise ValueError("merge() needs at least one description")
        domains: list[Domain] = []
        for description in descriptions:
            domains.extend(description.domains)
        return cls(version=descriptions[0].version, domains=tuple(domains))

    def get_domain(self, name: str) -> Domain | None:
        for domain in self.domains:
            if domain.domain == name:
                return domain
        return None


TypeSpec.model_rebuild()
ItemSpec.model_rebuild()
PropertyDef.model_rebuild()
TypeDef.model_rebuild()
CommandDef.model_rebuild()
EventDef.model_rebuild()
Domain.model_rebuild()
ProtocolDescription.model_rebuild()
