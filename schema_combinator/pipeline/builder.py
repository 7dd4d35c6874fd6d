"""
Fluent builder.

A TypeCombiner appends directives to a private DirectiveLog and defers all
resolution to ``generate()``. Every chained method returns the same builder.

Example:
    artifact = (
        TypeCombiner.combine(Customer, Address)
        .with_name("CustomerCard", "Crm")
        .exclude("password")
        .add("notes", "string?")
        .as_class()
        .with_converter()
        .generate()
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from .analyzer.ir_nodes import DeclaredSchema, OutputArtifact
from .config import CombinatorConfig, OutputShape
from .directives import (
    AddProperty,
    AddSource,
    Directive,
    DirectiveLog,
    EnableConverters,
    ExcludeProperty,
    ExcludePropertyIf,
    RetypeProperty,
    SetName,
    SetOutputShape,
    SourceKind,
)
from .extractor import SchemaExtractor
from .generator import PipelineGenerator
from .sinks.registry import EmissionSink, default_registry
from .type_refs import coerce_type_ref

_NO_DEFAULT = object()


class TypeCombiner:
    """Builds a directive log for one synthesized type."""

    def __init__(self, config: CombinatorConfig | None = None, extractor: SchemaExtractor | None = None):
        self.config = config or CombinatorConfig()
        self.extractor = extractor
        self._log = DirectiveLog()

    @classmethod
    def combine(cls, *types: Any, config: CombinatorConfig | None = None) -> TypeCombiner:
        """Start from the properties of one or more named types, in order."""
        builder = cls(config)
        for source in types:
            builder.with_type(source)
        return builder

    @classmethod
    def from_type(cls, source: Any, config: CombinatorConfig | None = None) -> TypeCombiner:
        return cls.combine(source, config=config)

    @classmethod
    def anonymous(cls, config: CombinatorConfig | None = None) -> TypeCombiner:
        """Start without any named source."""
        return cls(config)

    def with_type(self, source: Any) -> TypeCombiner:
        """Add a named source: a class or a DeclaredSchema."""
        return self._append(AddSource(source, SourceKind.NAMED, _named_source_id(source)))

    def with_literal(self, obj: Any) -> TypeCombiner:
        """Add the properties of an object literal (mapping or instance)."""
        return self._append(AddSource(obj, SourceKind.LITERAL, f"literal:{len(self._log)}"))

    def with_projection(self, rows: Iterable[Any]) -> TypeCombiner:
        """Add the properties of a homogeneous collection, read from its first element."""
        if isinstance(rows, Iterator):
            rows = list(rows)
        return self._append(AddSource(rows, SourceKind.COLLECTION, f"projection:{len(self._log)}"))

    def with_name(self, name: str, namespace: str | None = None) -> TypeCombiner:
        return self._append(SetName(name, namespace))

    def add(self, name: str, type_: Any, default: Any = _NO_DEFAULT) -> TypeCombiner:
        """
        Add or overwrite a property.

        Args:
            name: Property name
            type_: A TypeRef, a type description such as ``"int?"``, or a Python annotation
            default: Optional default value of the emitted field
        """
        has_default = default is not _NO_DEFAULT
        return self._append(
            AddProperty(
                name=name,
                type_ref=coerce_type_ref(type_),
                default=default if has_default else None,
                has_default=has_default,
            )
        )

    def exclude(self, *names: str) -> TypeCombiner:
        for name in names:
            self._append(ExcludeProperty(name))
        return self

    def exclude_if(self, name: str, condition: bool) -> TypeCombiner:
        return self._append(ExcludePropertyIf(name, bool(condition)))

    def change_type(self, name: str, type_: Any) -> TypeCombiner:
        return self._append(RetypeProperty(name, coerce_type_ref(type_)))

    def as_record(self) -> TypeCombiner:
        return self._append(SetOutputShape(OutputShape.IMMUTABLE))

    def as_class(self) -> TypeCombiner:
        return self._append(SetOutputShape(OutputShape.MUTABLE))

    def as_struct(self) -> TypeCombiner:
        return self._append(SetOutputShape(OutputShape.BY_VALUE))

    def with_converter(self, enabled: bool = True) -> TypeCombiner:
        return self._append(EnableConverters(enabled))

    @property
    def directives(self) -> tuple[Directive, ...]:
        """Snapshot of the directive log."""
        return self._log.snapshot()

    def generate(self, sink: EmissionSink | None = None) -> OutputArtifact:
        """
        Resolve the log and register the artifact.

        Args:
            sink: Emission sink; defaults to the process-wide registry

        Returns:
            The generated OutputArtifact

        Raises:
            ExtractionError: If a source cannot yield a schema
            InvalidTargetError: If the target or a field cannot be emitted
        """
        generator = PipelineGenerator(self._log.snapshot(), self.config, self.extractor)
        artifact = generator.generate()
        (sink if sink is not None else default_registry).register(artifact.qualified_name, artifact)
        return artifact

    def _append(self, directive: Directive) -> TypeCombiner:
        self._log.append(directive)
        return self


def _named_source_id(source: Any) -> str:
    if isinstance(source, DeclaredSchema):
        return f"declared:{source.name}"
    if isinstance(source, type):
        return f"{source.__module__}.{source.__qualname__}"
    return f"named:{id(source)}"
