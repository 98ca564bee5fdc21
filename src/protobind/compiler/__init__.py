"""Protocol description compiler: resolver, emitter and generation entry point."""

from .buffer import GenerationOutput, NotificationBinding, OutputBuffer
from .emitter import Emitter
from .generate import GenerationResult, compile_description, generate
from .resolver import TypeResolver, map_primitive
from .sink import FileOutputSink, MemoryOutputSink, OutputSink
from .types import ArrayType, LiteralUnion, Member, PrimitiveType, ReferenceType, StructType, TypeExpr

__all__ = [
    "TypeResolver",
    "map_primitive",
    "Emitter",
    "GenerationOutput",
    "NotificationBinding",
    "OutputBuffer",
    "generate",
    "compile_description",
    "GenerationResult",
    "OutputSink",
    "FileOutputSink",
    "MemoryOutputSink",
    "TypeExpr",
    "PrimitiveType",
    "ReferenceType",
    "ArrayType",
    "LiteralUnion",
    "StructType",
    "Member",
]
