"""Resolved type expressions.

The resolver turns every schema shape into one of these; the emitter renders
them to Python source. All are frozen so a resolved model can be shared freely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PrimitiveType:
    """A built-in Python type, already mapped (``int``, ``str``, ``Any`` ...)."""

    name: str

    def references(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class ReferenceType:
    """A named, generated type identified by its canonical name."""

    canonical: str

    def references(self) -> tuple[str, ...]:
        return (self.canonical,)


@dataclass(frozen=True)
class ArrayType:
    item: TypeExpr

    def references(self) -> tuple[str, ...]:
        return self.item.references()


@dataclass(frozen=True)
class LiteralUnion:
    """A string enum; values keep schema order."""

    values: tuple[str, ...]

    def references(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class Member:
    name: str
    type: TypeExpr
    optional: bool = False


@dataclass(frozen=True)
class StructType:
    """An anonymous structural type with one member per declared property."""

    members: tuple[Member, ...]

    def references(self) -> tuple[str, ...]:
        refs: list[str] = []
        for member in self.members:
            refs.extend(member.type.references())
        return tuple(refs)


TypeExpr = PrimitiveType | ReferenceType | ArrayType | LiteralUnion | StructType

ANY = PrimitiveType("Any")
UNCONSTRAINED_OBJECT = PrimitiveType("dict[str, Any]")
