"""Render a resolved protocol description to a Python module.

Output layout, always in this order:
- header and ``PROTOCOL_VERSION``
- per domain: type declarations, then command option/result records
- per domain: event detail records and carrier classes
- ``NotificationName`` and the ``NOTIFICATIONS`` dispatch table
- one ``<Domain>Domain`` class per domain holding the command stubs
- the client class binding everything to ``ProtocolClient``

Within each section entries follow schema order. No timestamps or other
run-dependent data is written, so the same description always renders to the
same bytes.

Records use the functional ``TypedDict`` form so protocol field names that are
not Python identifiers (or are keywords) survive unchanged. References to
generated types are rendered as quoted forward references, which keeps the
module importable regardless of declaration order.
"""

from __future__ import annotations

import json
import keyword
import logging
import re

from ..config import DEFAULT_CLASS_NAME
from ..exceptions import SchemaError
from ..runtime.notifications import DOMAIN_SEPARATOR, notification_key
from ..schema.models import CommandDef, Domain, EventDef, PropertyDef, TypeDef
from .buffer import GenerationOutput, NotificationBinding, OutputBuffer
from .docs import comment_lines, docstring_lines
from .resolver import TypeResolver, canonical
from .types import ArrayType, LiteralUnion, Member, PrimitiveType, ReferenceType, StructType, TypeExpr

logger = logging.getLogger(__name__)

BANNER = "# " + "=" * 77

HEADER = [
    "# This module is generated by protobind. Do not edit.",
    "# ruff: noqa",
    "",
    "from __future__ import annotations",
    "",
    "from collections.abc import Callable",
    "from typing import Any, Literal, NotRequired, TypeAlias, TypedDict, overload",
    "",
    "from protobind.runtime import Listener, Notification, NotificationFactory, ProtocolClient",
]

# names bound by the header and the dispatch section
MODULE_NAMES = (
    "Any",
    "Callable",
    "Listener",
    "Literal",
    "NOTIFICATIONS",
    "NotRequired",
    "Notification",
    "NotificationFactory",
    "NotificationName",
    "PROTOCOL_VERSION",
    "ProtocolClient",
    "TypeAlias",
    "TypedDict",
    "overload",
)


def python_name(name: str) -> str:
    """An attribute/method name safe to use in generated code."""
    safe = re.sub(r"\W", "_", name)
    if not safe or safe[0].isdigit():
        safe = f"_{safe}"
    if keyword.iskeyword(safe):
        safe = f"{safe}_"
    return safe


def method_string(domain: str, name: str) -> str:
    """Wire method for a command or event: ``<domain>.<name>``."""
    return f"{domain}{DOMAIN_SEPARATOR}{name}"


class Emitter:
    """Renders declarations, command stubs and notification bindings.

    The resolver's description is never modified; all mutable state lives in
    the GenerationOutput passed through each call.
    """

    def __init__(self, resolver: TypeResolver, class_name: str = DEFAULT_CLASS_NAME):
        self.resolver = resolver
        self.class_name = class_name

    # ------------------------------------------------------------------
    # Whole module
    # ------------------------------------------------------------------

    def render(self) -> str:
        description = self.resolver.description
        out = GenerationOutput(
            reserved={canonical(d.domain, t.id) for d in description.domains for t in d.types or ()},
            declared=set(MODULE_NAMES),
        )

        for domain in description.domains:
            out.declarations.lines([BANNER, f"# {domain.domain}", BANNER])
            out.declarations.blank()
            self.emit_type_section(domain, out)
            self._emit_domain_class(domain, out)
            for event in domain.events or ():
                self.emit_event_artifacts(domain, event, out)

        dispatch = self._emit_dispatch_table(out.bindings)
        client = self._emit_client_class(description.domains, out, description.version.tag)

        header = OutputBuffer()
        header.lines(HEADER)
        header.blank()
        header.line(f"PROTOCOL_VERSION = {json.dumps(description.version.tag)}")

        sections = [header, out.declarations, out.events, dispatch, out.domains, client]
        text = "\n\n\n".join(s.text().strip("\n") for s in sections if s)
        return _normalize(text)

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def emit_type_section(self, domain: Domain, out: GenerationOutput) -> None:
        """One declaration per TypeDef, named ``<domain>_<id>``."""
        for type_def in domain.types or ():
            self._emit_type_def(domain, type_def, out)

    def _emit_type_def(self, domain: Domain, type_def: TypeDef, out: GenerationOutput) -> None:
        name = self._declare(canonical(domain.domain, type_def.id), out, canonical_type=True)
        buf = out.declarations
        expr = self.resolver.resolve_type_def(type_def, domain.domain)

        hoisted = OutputBuffer()
        decl = OutputBuffer()
        if isinstance(expr, StructType):
            entries = self.emit_parameter_list(type_def.properties or (), domain.domain, name, hoisted, out)
            self._typed_dict(name, entries, decl)
        else:
            decl.line(f"{name}: TypeAlias = {self.render_type(expr, name, hoisted, out)}")

        if hoisted:
            buf.extend(hoisted)
        buf.lines(comment_lines(type_def))
        buf.extend(decl)
        buf.blank()

    def render_type(self, expr: TypeExpr, owner: str, hoist: OutputBuffer, out: GenerationOutput) -> str:
        """Python type text for a resolved expression.

        Anonymous structures cannot be written inline, so they are declared
        into ``hoist`` as ``<owner>`` and referenced by that name. The hoisted
        name must not already be declared or claimed by a protocol type.
        """
        if isinstance(expr, PrimitiveType):
            return expr.name
        if isinstance(expr, ReferenceType):
            return json.dumps(expr.canonical)
        if isinstance(expr, ArrayType):
            return f"list[{self.render_type(expr.item, f'{owner}Item', hoist, out)}]"
        if isinstance(expr, LiteralUnion):
            return f"Literal[{', '.join(json.dumps(v) for v in expr.values)}]"
        if isinstance(expr, StructType):
            self._declare(owner, out)
            entries = self._member_entries(expr.members, owner, hoist, out, docs=None)
            self._typed_dict(owner, entries, hoist)
            hoist.blank()
            return owner
        raise TypeError(f"Unsupported type expression: {expr!r}")

    def emit_parameter_list(
        self,
        params: tuple[PropertyDef, ...],
        domain: str,
        owner: str,
        hoist: OutputBuffer,
        out: GenerationOutput,
    ) -> str:
        """Comma-joined ``"name": T`` entries in declaration order.

        Optional parameters are wrapped in ``NotRequired``; nothing is
        reordered. Each entry is preceded by its doc comment, if any.
        """
        members = self.resolver.resolve_members(params, domain, owner)
        docs = [comment_lines(param) for param in params]
        return self._member_entries(members, owner, hoist, out, docs)

    def _member_entries(
        self,
        members: tuple[Member, ...],
        owner: str,
        hoist: OutputBuffer,
        out: GenerationOutput,
        docs: list[list[str]] | None,
    ) -> str:
        entries: list[str] = []
        for i, member in enumerate(members):
            type_text = self.render_type(member.type, f"{owner}_{python_name(member.name)}", hoist, out)
            if member.optional:
                type_text = f"NotRequired[{type_text}]"
            lines = list(docs[i]) if docs else []
            lines.append(f"{json.dumps(member.name)}: {type_text}")
            entries.append("\n".join(lines))
        return ",\n".join(entries)

    def _declare(self, name: str, out: GenerationOutput, canonical_type: bool = False) -> str:
        """Claim a module-level name, raising SchemaError if it is taken.

        Canonical type names are reserved up front so a derived name (a hoisted
        struct, an options record, an event carrier) cannot shadow a type that
        is declared later in the module.
        """
        if name in out.declared or (name in out.reserved and not canonical_type):
            raise SchemaError(f"generated name {name!r} collides with another declaration", path=name)
        out.declared.add(name)
        return name

    def _typed_dict(self, name: str, entries: str, buf: OutputBuffer) -> None:
        if not entries:
            buf.line(f"{name} = TypedDict({json.dumps(name)}, {{}})")
            return
        buf.line(f"{name} = TypedDict(")
        buf.indent()
        buf.line(f"{json.dumps(name)},")
        buf.line("{")
        buf.indent()
        buf.lines(f"{entries},".split("\n"))
        buf.dedent()
        buf.line("},")
        buf.dedent()
        buf.line(")")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _emit_domain_class(self, domain: Domain, out: GenerationOutput) -> None:
        buf = out.domains
        buf.line(f"class {self._declare(f'{domain.domain}Domain', out)}:")
        buf.indent()
        buf.lines(docstring_lines(domain, indent=4, fallback=f"Commands of the {domain.domain} domain."))
        buf.blank()
        buf.line("def __init__(self, client: ProtocolClient) -> None:")
        buf.indent()
        buf.line("self._client = client")
        buf.dedent()
        for command in domain.commands or ():
            buf.blank()
            self.emit_command_stub(domain, command, out)
        buf.dedent()
        buf.blank(2)

    def emit_command_stub(self, domain: Domain, command: CommandDef, out: GenerationOutput) -> None:
        """Options/result records plus an async method calling ``request``.

        The options argument exists only when ``parameters`` is declared; the
        method returns a result record only when ``returns`` is declared.
        """
        base = f"{domain.domain}_{command.name}"
        method = method_string(domain.domain, command.name)

        options_type: str | None = None
        if command.parameters is not None:
            options_type = f"{base}Options"
            self._emit_record(options_type, command.parameters, domain.domain, out)

        result_type = "None"
        if command.returns is not None:
            result_type = f"{base}Result"
            self._emit_record(result_type, command.returns, domain.domain, out)

        buf = out.domains
        signature = f"self, opts: {options_type}" if options_type else "self"
        buf.line(f"async def {python_name(command.name)}({signature}) -> {result_type}:")
        buf.indent()
        buf.lines(docstring_lines(command, indent=8))
        call = f"self._client.request({json.dumps(method)}{', opts' if options_type else ''})"
        buf.line(f"return await {call}" if command.returns is not None else f"await {call}")
        buf.dedent()

    def _emit_record(
        self, name: str, params: tuple[PropertyDef, ...], domain: str, out: GenerationOutput
    ) -> None:
        self._declare(name, out)
        buf = out.declarations
        hoisted = OutputBuffer()
        entries = self.emit_parameter_list(params, domain, name, hoisted, out)
        if hoisted:
            buf.extend(hoisted)
        self._typed_dict(name, entries, buf)
        buf.blank()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def emit_event_artifacts(self, domain: Domain, event: EventDef, out: GenerationOutput) -> None:
        """Detail record and carrier for an event, registered for dispatch."""
        method = method_string(domain.domain, event.name)
        key = notification_key(method)

        if event.parameters is None:
            out.bindings.append(
                NotificationBinding(
                    key=key,
                    method=method,
                    carrier="Notification[None]",
                    factory=f"Notification.bare({json.dumps(key)})",
                )
            )
            return

        buf = out.events
        self._declare(key, out)
        hoisted = OutputBuffer()
        entries = self.emit_parameter_list(event.parameters, domain.domain, key, hoisted, out)
        if hoisted:
            buf.extend(hoisted)
        buf.lines(comment_lines(event))
        self._typed_dict(key, entries, buf)
        buf.blank(2)

        carrier = self._declare(f"{key}Event", out)
        buf.line(f"class {carrier}(Notification[{key}]):")
        buf.indent()
        buf.lines(docstring_lines(event, indent=4, fallback=f"Carrier for ``{method}`` notifications."))
        buf.blank()
        buf.line(f"def __init__(self, detail: {key} | None = None) -> None:")
        buf.indent()
        buf.line(f"super().__init__({json.dumps(key)}, detail)")
        buf.dedent()
        buf.dedent()
        buf.blank(2)

        out.bindings.append(NotificationBinding(key=key, method=method, carrier=carrier, factory=carrier))

    def _emit_dispatch_table(self, bindings: list[NotificationBinding]) -> OutputBuffer:
        buf = OutputBuffer()
        if bindings:
            buf.line("NotificationName: TypeAlias = Literal[")
            buf.indent()
            buf.lines([f"{json.dumps(b.key)}," for b in bindings])
            buf.dedent()
            buf.line("]")
        else:
            buf.line("NotificationName: TypeAlias = str")
        buf.blank()

        buf.line("NOTIFICATIONS: dict[str, NotificationFactory] = {")
        buf.indent()
        buf.lines([f"{json.dumps(b.key)}: {b.factory}," for b in bindings])
        buf.dedent()
        buf.line("}")
        return buf

    # ------------------------------------------------------------------
    # Client
    # ------------------------------------------------------------------

    def _emit_client_class(
        self,
        domains: tuple[Domain, ...],
        out: GenerationOutput,
        version: str,
    ) -> OutputBuffer:
        bindings = out.bindings
        buf = OutputBuffer()
        buf.line(f"class {self._declare(self.class_name, out)}(ProtocolClient):")
        buf.indent()
        buf.line(f'"""Typed client for protocol version {version}."""')
        buf.blank()
        buf.line("notifications = NOTIFICATIONS")
        buf.blank()
        buf.line("def __init__(self, *args: Any, **kwargs: Any) -> None:")
        buf.indent()
        buf.line("super().__init__(*args, **kwargs)")
        for domain in domains:
            buf.line(f"self.{python_name(domain.domain)} = {domain.domain}Domain(self)")
        buf.dedent()

        # typing.overload needs at least two signatures
        if len(bindings) >= 2:
            for binding in bindings:
                buf.blank()
                buf.line("@overload")
                buf.line(
                    f"def add_listener(self, name: Literal[{json.dumps(binding.key)}], "
                    f"handler: Listener[{binding.carrier}]) -> Callable[[], None]: ..."
                )
            buf.blank()
            buf.line("def add_listener(self, name: str, handler: Listener[Any]) -> Callable[[], None]:")
            buf.indent()
            buf.line("return super().add_listener(name, handler)")
            buf.dedent()
        buf.dedent()
        return buf


def _normalize(text: str) -> str:
    lines = [line.rstrip() for line in text.split("\n")]
    result: list[str] = []
    blanks = 0
    for line in lines:
        if line:
            blanks = 0
        else:
            blanks += 1
            if blanks > 2:
                continue
        result.append(line)
    return "\n".join(result).strip("\n") + "\n"
