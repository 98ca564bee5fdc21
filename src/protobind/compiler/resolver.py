"""Type resolution across the namespaced type graph.

Every type in a description lives in a domain. References are either bare
(``FrameId``, resolved against the enclosing domain) or qualified
(``Network.LoaderId``, naming the domain explicitly). Both resolve to the
canonical name ``<domain>_<typeId>``; nothing is inferred beyond the literal
reference text.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from ..exceptions import SchemaError
from ..runtime.notifications import DOMAIN_SEPARATOR
from ..schema.models import Domain, PropertyDef, ProtocolDescription, TypeDef, TypeSpec
from .types import (
    ANY,
    UNCONSTRAINED_OBJECT,
    ArrayType,
    LiteralUnion,
    Member,
    PrimitiveType,
    ReferenceType,
    StructType,
    TypeExpr,
)

logger = logging.getLogger(__name__)

# binary payloads travel as encoded text
PRIMITIVE_TYPES: dict[str, PrimitiveType] = {
    "integer": PrimitiveType("int"),
    "number": PrimitiveType("float"),
    "string": PrimitiveType("str"),
    "boolean": PrimitiveType("bool"),
    "binary": PrimitiveType("str"),
    "any": ANY,
    "object": UNCONSTRAINED_OBJECT,
}


def map_primitive(name: str | None, path: str | None = None) -> PrimitiveType:
    """Map a schema primitive name to its Python type."""
    if name is None or name not in PRIMITIVE_TYPES:
        raise SchemaError(f"unknown primitive type {name!r}", path=path)
    return PRIMITIVE_TYPES[name]


def canonical(domain: str, type_id: str) -> str:
    return f"{domain}_{type_id}"


class TypeResolver:
    """Resolves schema shapes into canonical type expressions.

    Building a resolver indexes every declared type; duplicate ids within a
    domain are rejected immediately. ``validate()`` walks the whole
    description so generation can fail before any text is produced.
    """

    def __init__(self, description: ProtocolDescription):
        self.description = description
        self._types: dict[tuple[str, str], TypeDef] = {}

        for domain in description.domains:
            for type_def in domain.types or ():
                key = (domain.domain, type_def.id)
                if key in self._types:
                    raise SchemaError(
                        f"duplicate type id {type_def.id!r}",
                        path=domain.domain,
                    )
                self._types[key] = type_def

        logger.debug(
            f"Indexed {len(self._types)} types across {len(description.domains)} domains"
        )

    def lookup(self, domain: str, type_id: str) -> TypeDef | None:
        return self._types.get((domain, type_id))

    def canonical_name(self, ref: str, domain: str, path: str | None = None) -> str:
        """Resolve a reference to ``<domain>_<typeId>``.

        Raises:
            SchemaError: If the reference names no declared type
        """
        if DOMAIN_SEPARATOR in ref:
            target_domain, _, type_id = ref.partition(DOMAIN_SEPARATOR)
        else:
            target_domain, type_id = domain, ref

        if (target_domain, type_id) not in self._types:
            raise SchemaError(f"unresolved reference {ref!r}", path=path or domain)
        return canonical(target_domain, type_id)

    def resolve_field_type(
        self, field: TypeSpec, domain: str, path: str | None = None
    ) -> TypeExpr:
        """Resolve a property, parameter or item specification."""
        path = path or domain

        if field.enum is not None and not field.enum:
            raise SchemaError("enum declares no values", path=path)

        if field.ref is not None:
            return ReferenceType(self.canonical_name(field.ref, domain, path))

        if field.type == "array":
            if field.items is None:
                raise SchemaError("array without item type", path=path)
            return ArrayType(self.resolve_field_type(field.items, domain, f"{path}[]"))

        if field.type == "string" and field.enum:
            return LiteralUnion(tuple(field.enum))

        if field.type == "object" and field.properties:
            return StructType(self._resolve_members(field.properties, domain, path))

        if field.type is None:
            raise SchemaError("neither a type nor a $ref", path=path)

        return map_primitive(field.type, path)

    def resolve_type_def(self, type_def: TypeDef, domain: str) -> TypeExpr:
        """Resolve the shape of a declared type."""
        return self.resolve_field_type(type_def, domain, f"{domain}.{type_def.id}")

    def resolve_members(
        self, params: tuple[PropertyDef, ...], domain: str, path: str | None = None
    ) -> tuple[Member, ...]:
        """Resolve an ordered parameter or property list."""
        return self._resolve_members(params, domain, path or domain)

    def _resolve_members(
        self, params: tuple[PropertyDef, ...], domain: str, path: str
    ) -> tuple[Member, ...]:
        return tuple(
            Member(
                name=param.name,
                type=self.resolve_field_type(param, domain, f"{path}.{param.name}"),
                optional=param.optional,
            )
            for param in params
        )

    def validate(self) -> None:
        """Resolve everything in the description, raising on the first failure."""
        for domain, path, spec in self._walk():
            self.resolve_field_type(spec, domain.domain, path)

    def _walk(self) -> Iterator[tuple[Domain, str, TypeSpec]]:
        for domain in self.description.domains:
            name = domain.domain
            for type_def in domain.types or ():
                yield domain, f"{name}.{type_def.id}", type_def
            for command in domain.commands or ():
                for param in command.parameters or ():
                    yield domain, f"{name}.{command.name}.parameters.{param.name}", param
                for param in command.returns or ():
                    yield domain, f"{name}.{command.name}.returns.{param.name}", param
            for event in domain.events or ():
                for param in event.parameters or ():
                    yield domain, f"{name}.{event.name}.{param.name}", param
