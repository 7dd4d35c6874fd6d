"""
Schema extractor.

Turns the source referenced by an AddSource directive into a Schema using
Python reflection: class annotations and properties for named types,
keys/attributes and value inference for object literals, and the first
element for homogeneous collections.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import typing
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from .analyzer.ir_nodes import DeclaredSchema, Schema, SourceSchema
from .directives import AddSource, SourceKind
from .errors import ExtractionError
from .type_refs import TypeRef, type_ref_from_annotation, type_ref_from_value

logger = logging.getLogger(__name__)

# Values that can never act as an object source
_SCALAR_TYPES = (str, bytes, bytearray, int, float, Decimal, bool)


class SchemaExtractor:
    """Extracts schemas from named types, object literals and collections."""

    def extract(self, directive: AddSource) -> Schema:
        """
        Extract the schema of a source.

        Args:
            directive: The AddSource directive referencing the source

        Returns:
            Ordered Schema of the publicly readable properties

        Raises:
            ExtractionError: If the source cannot yield a schema
        """
        if isinstance(directive.source, DeclaredSchema):
            schema = directive.source.schema
        elif directive.kind == SourceKind.NAMED:
            schema = self._extract_named(directive.source, directive.source_id)
        elif directive.kind == SourceKind.COLLECTION:
            schema = self._extract_collection(directive.source, directive.source_id)
        else:
            schema = self._extract_literal(directive.source, directive.source_id)

        logger.debug("Extracted %d properties from %s: %s", len(schema), directive.source_id, schema.names())
        return schema

    def extract_source(self, directive: AddSource) -> SourceSchema:
        """Extract a source together with its identity."""
        schema = self.extract(directive)
        source = directive.source
        if isinstance(source, DeclaredSchema):
            type_name, target = source.name, None
        elif directive.kind == SourceKind.NAMED:
            type_name, target = source.__name__, source
        else:
            type_name, target = "", None

        return SourceSchema(
            source_id=directive.source_id,
            kind=directive.kind,
            schema=schema,
            type_name=type_name,
            target=target,
        )

    def _extract_named(self, source: Any, source_id: str) -> Schema:
        """Extract annotated fields and public properties of a class."""
        if not isinstance(source, type):
            raise ExtractionError(source_id, f"named sources must be classes, got {type(source).__name__}")

        hints = self._class_annotations(source)
        if dataclasses.is_dataclass(source):
            names = [f.name for f in dataclasses.fields(source)]
        else:
            names = list(hints)

        pairs: list[tuple[str, TypeRef]] = []
        for name in names:
            if name.startswith("_"):
                continue
            annotation = hints.get(name, Any)
            if self._is_class_var(annotation):
                continue
            pairs.append((name, self._annotation_to_type_ref(annotation)))

        seen = {name for name, _ in pairs}
        for name, prop in self._public_properties(source):
            if name not in seen:
                pairs.append((name, self._property_type_ref(prop)))
                seen.add(name)

        return Schema.from_pairs(pairs)

    def _extract_literal(self, source: Any, source_id: str) -> Schema:
        """Extract the readable members of an object literal."""
        if source is None or isinstance(source, _SCALAR_TYPES) or isinstance(source, type):
            raise ExtractionError(source_id, f"{type(source).__name__} value is not an object")

        if isinstance(source, DeclaredSchema):
            return source.schema

        if isinstance(source, Mapping):
            pairs = []
            for key, value in source.items():
                if not isinstance(key, str):
                    raise ExtractionError(source_id, f"mapping keys must be strings, got {key!r}")
                pairs.append((key, type_ref_from_value(value)))
            return Schema.from_pairs(pairs)

        hints = self._class_annotations(type(source))

        if dataclasses.is_dataclass(source):
            values = {f.name: getattr(source, f.name) for f in dataclasses.fields(source)}
        elif isinstance(source, tuple) and hasattr(source, "_asdict"):
            values = source._asdict()
        elif hasattr(source, "__dict__"):
            values = vars(source)
        else:
            raise ExtractionError(source_id, f"{type(source).__name__} exposes no readable properties")

        pairs = []
        for name, value in values.items():
            if name.startswith("_"):
                continue
            if name in hints and not self._is_class_var(hints[name]):
                pairs.append((name, self._annotation_to_type_ref(hints[name])))
            else:
                pairs.append((name, type_ref_from_value(value)))
        return Schema.from_pairs(pairs)

    def _extract_collection(self, source: Any, source_id: str) -> Schema:
        """Extract the schema of the first element of a collection.

        Later elements are assumed to share the first element's shape.
        An empty collection yields an empty schema.
        """
        if source is None or isinstance(source, _SCALAR_TYPES + (Mapping,)) or not isinstance(source, Iterable):
            raise ExtractionError(source_id, f"collection sources must be non-string iterables, got {type(source).__name__}")

        for first in source:
            return self._extract_literal(first, source_id)
        return Schema()

    def _class_annotations(self, cls: type) -> dict[str, Any]:
        """Resolved annotations across the MRO, base classes first."""
        try:
            return typing.get_type_hints(cls)
        except (NameError, TypeError):
            # Unresolvable forward references: keep the raw annotation strings
            merged: dict[str, Any] = {}
            for klass in reversed(cls.__mro__):
                merged.update(inspect.get_annotations(klass))
            return merged

    def _public_properties(self, cls: type) -> list[tuple[str, property]]:
        """Public @property members, base classes first."""
        found: dict[str, property] = {}
        for klass in reversed(cls.__mro__):
            for name, member in vars(klass).items():
                if isinstance(member, property) and not name.startswith("_"):
                    found[name] = member
        return list(found.items())

    def _property_type_ref(self, prop: property) -> TypeRef:
        if prop.fget is None:
            return TypeRef.any()
        annotation = inspect.get_annotations(prop.fget).get("return", Any)
        return self._annotation_to_type_ref(annotation)

    def _annotation_to_type_ref(self, annotation: Any) -> TypeRef:
        try:
            return type_ref_from_annotation(annotation)
        except ValueError:
            logger.debug("Unsupported annotation %r treated as object", annotation)
            return TypeRef.any()

    @staticmethod
    def _is_class_var(annotation: Any) -> bool:
        if isinstance(annotation, str):
            return annotation.startswith(("ClassVar", "typing.ClassVar"))
        return annotation is typing.ClassVar or typing.get_origin(annotation) is typing.ClassVar
