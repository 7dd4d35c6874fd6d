"""
IR (Intermediate Representation) node definitions.

These nodes carry schemas from extraction through resolution to emission.
Everything here is immutable once built, except the ConverterSet mapping
which is filled once by the converter emitter.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from ..config import OutputShape
from ..directives import SourceKind
from ..type_refs import TypeRef


@dataclass(frozen=True)
class Property:
    """A (name, type) pair contributed by a source."""

    name: str
    type_ref: TypeRef


@dataclass(frozen=True)
class Schema:
    """Ordered property list of a single source. Names are unique."""

    properties: tuple[Property, ...] = ()

    def __post_init__(self):
        names = [p.name for p in self.properties]
        if len(names) != len(set(names)):
            duplicates = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Duplicate property names in schema: {duplicates}")

    @staticmethod
    def from_pairs(pairs: list[tuple[str, TypeRef]]) -> Schema:
        return Schema(tuple(Property(name, type_ref) for name, type_ref in pairs))

    def names(self) -> list[str]:
        return [p.name for p in self.properties]

    def get(self, name: str) -> Property | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def __iter__(self) -> Iterator[Property]:
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)

    def __contains__(self, name: object) -> bool:
        return any(p.name == name for p in self.properties)


@dataclass(frozen=True)
class DeclaredSchema:
    """An explicit schema literal used as a source.

    Lets hosts without reflection (JSON descriptions, IDL) describe a source
    directly. The extractor returns ``schema`` unchanged.
    """

    name: str
    schema: Schema = field(default_factory=Schema)


@dataclass(frozen=True)
class SourceSchema:
    """The schema extracted for one AddSource directive."""

    source_id: str
    kind: SourceKind
    schema: Schema
    type_name: str = ""

    # Python class of a named source, when there is one
    target: Any = field(default=None, compare=False, repr=False)

    @property
    def is_named(self) -> bool:
        return self.kind == SourceKind.NAMED


@dataclass(frozen=True)
class ResolvedProperty:
    """A property of the resolved schema."""

    name: str
    type_ref: TypeRef

    # Source id that contributed the entry, or "add" for AddProperty
    origin: str = ""

    # Emission metadata from AddProperty
    default: Any = field(default=None, hash=False)
    has_default: bool = False


@dataclass(frozen=True)
class ResolvedSchema:
    """Final ordered, unique-by-name property list handed to the emitters."""

    properties: tuple[ResolvedProperty, ...] = ()

    def names(self) -> list[str]:
        return [p.name for p in self.properties]

    def get(self, name: str) -> ResolvedProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def as_pairs(self) -> list[tuple[str, TypeRef]]:
        return [(p.name, p.type_ref) for p in self.properties]

    def __iter__(self) -> Iterator[ResolvedProperty]:
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)

    def __contains__(self, name: object) -> bool:
        return any(p.name == name for p in self.properties)


@dataclass(frozen=True)
class TargetSettings:
    """Name, namespace, shape and converter switch folded from the log."""

    name: str = ""
    namespace: str = "Generated"
    shape: OutputShape = OutputShape.IMMUTABLE
    converters_enabled: bool = False

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name


@dataclass(frozen=True)
class FieldDef:
    """A field of the emitted type with its initialization contract."""

    name: str
    type_ref: TypeRef
    default: Any = field(default=None, hash=False)
    has_default: bool = False

    # Constructor must receive a value (no default applies)
    requires_init: bool = False

    # Passed by keyword only
    kw_only: bool = False

    def fallback_value(self) -> Any:
        """Value used when a converter has nothing to copy into this field."""
        if self.has_default:
            return copy.deepcopy(self.default)
        return self.type_ref.zero_value()


@dataclass(eq=False)
class ConverterSet:
    """Named conversion functions emitted for an artifact.

    Equality compares converter names only: the callables are rebuilt on
    every resolution.
    """

    functions: dict[str, Callable[..., Any]] = field(default_factory=dict)

    def names(self) -> list[str]:
        return list(self.functions)

    def get(self, name: str) -> Callable[..., Any] | None:
        return self.functions.get(name)

    def __getitem__(self, name: str) -> Callable[..., Any]:
        return self.functions[name]

    def __contains__(self, name: object) -> bool:
        return name in self.functions

    def __len__(self) -> int:
        return len(self.functions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConverterSet):
            return NotImplemented
        return self.names() == other.names()


@dataclass(frozen=True)
class OutputArtifact:
    """The emitted type definition."""

    name: str
    namespace: str
    shape: OutputShape
    fields: ResolvedSchema
    field_defs: tuple[FieldDef, ...] = ()
    sources: tuple[SourceSchema, ...] = ()
    converters: ConverterSet | None = None

    # The synthesized runtime class
    type: Any = field(default=None, compare=False, repr=False)

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    @property
    def named_sources(self) -> list[SourceSchema]:
        return [s for s in self.sources if s.is_named]
