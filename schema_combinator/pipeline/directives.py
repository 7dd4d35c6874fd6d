"""
Directive model.

A DirectiveLog is the single ordered description of "what to build". The
fluent builder appends to it; nothing is validated or resolved at append
time. Order matters for tie-breaks during resolution.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .config import OutputShape
from .type_refs import TypeRef


class SourceKind(Enum):
    """Kind of property source referenced by an AddSource directive."""

    NAMED = "named"  # An existing structured type (a class)
    LITERAL = "literal"  # An ad-hoc object literal
    COLLECTION = "collection"  # Homogeneous objects, e.g. ORM projection rows


@dataclass(frozen=True)
class Directive:
    """Base class for all directives."""


@dataclass(frozen=True)
class AddSource(Directive):
    """Contribute every property of a source, in its declaration order."""

    source: Any = field(compare=False)
    kind: SourceKind = SourceKind.NAMED
    source_id: str = ""

    @property
    def is_named(self) -> bool:
        return self.kind == SourceKind.NAMED


@dataclass(frozen=True)
class AddProperty(Directive):
    """Insert or overwrite a property."""

    name: str = ""
    type_ref: TypeRef = field(default_factory=TypeRef.any)
    default: Any = field(default=None, hash=False)
    has_default: bool = False


@dataclass(frozen=True)
class ExcludeProperty(Directive):
    """Remove a property if it is currently present."""

    name: str = ""


@dataclass(frozen=True)
class ExcludePropertyIf(Directive):
    """Remove a property when the condition is true."""

    name: str = ""
    condition: bool = False


@dataclass(frozen=True)
class RetypeProperty(Directive):
    """Rewrite the type of a present property, keeping its position."""

    name: str = ""
    new_type: TypeRef = field(default_factory=TypeRef.any)


@dataclass(frozen=True)
class SetOutputShape(Directive):
    shape: OutputShape = OutputShape.IMMUTABLE


@dataclass(frozen=True)
class SetName(Directive):
    identifier: str = ""
    namespace: str | None = None


@dataclass(frozen=True)
class EnableConverters(Directive):
    enabled: bool = True


class DirectiveLog:
    """Append-only ordered sequence of directives."""

    def __init__(self, directives: list[Directive] | None = None):
        self._directives: list[Directive] = list(directives or [])

    def append(self, directive: Directive) -> DirectiveLog:
        self._directives.append(directive)
        return self

    def snapshot(self) -> tuple[Directive, ...]:
        """Immutable view of the log at this point."""
        return tuple(self._directives)

    def sources(self) -> list[AddSource]:
        return [d for d in self._directives if isinstance(d, AddSource)]

    def __iter__(self) -> Iterator[Directive]:
        return iter(tuple(self._directives))

    def __len__(self) -> int:
        return len(self._directives)

    def __repr__(self) -> str:
        return f"DirectiveLog({self._directives!r})"
