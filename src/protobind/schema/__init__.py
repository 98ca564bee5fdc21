"""Protocol description model and providers."""

from .models import (
    CommandDef,
    Domain,
    EventDef,
    ItemSpec,
    Parameter,
    PropertyDef,
    ProtocolDescription,
    ProtocolVersion,
    TypeDef,
    TypeSpec,
)
from .provider import FileSchemaProvider, HttpSchemaProvider, SchemaProvider

__all__ = [
    "CommandDef",
    "Domain",
    "EventDef",
    "ItemSpec",
    "Parameter",
    "PropertyDef",
    "ProtocolDescription",
    "ProtocolVersion",
    "TypeDef",
    "TypeSpec",
    "SchemaProvider",
    "FileSchemaProvider",
    "HttpSchemaProvider",
]
