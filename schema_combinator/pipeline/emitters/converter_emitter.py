"""
Converter emitter.

Builds conversion functions from the input shapes to the emitted type. All
converters copy values by exact field name and never coerce them; output
fields without a matching input keep the field's fallback value.

The set of converters is described by ConverterPlan entries so that the
source backends render exactly the converters that exist at runtime.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ...utils import pascal_to_snake_case
from ..analyzer.ir_nodes import ConverterSet, FieldDef, OutputArtifact, SourceSchema
from ..errors import InvalidTargetError, NullInputError

logger = logging.getLogger(__name__)

_MISSING = object()


class ConverterKind(Enum):
    """Kind of generated converter."""

    FROM_SOURCE = "from_source"  # One named input type
    FROM_BOTH = "from_both"  # Exactly two named input types
    FROM_SINGLE = "from_single"  # Any single object, read by output field names
    COLLECTION = "collection"  # Element-wise lift of another converter


@dataclass(frozen=True)
class ConverterPlan:
    """Description of one converter."""

    name: str
    kind: ConverterKind

    # Type names of the inputs, one per parameter (FROM_SOURCE, FROM_BOTH)
    source_types: tuple[str, ...] = ()

    # Field names copied from each input, in input order
    field_groups: tuple[tuple[str, ...], ...] = ()

    # Converter applied to each element (COLLECTION)
    item_converter: str = ""


class ConverterEmitter:
    """Emits the ConverterSet of an artifact."""

    def plan(self, artifact: OutputArtifact) -> list[ConverterPlan]:
        """
        Describe the converters of an artifact.

        One converter (plus its collection lift) per distinct named source,
        a two-input converter when there are exactly two named sources, and
        the untyped single and collection converters.

        Args:
            artifact: The artifact produced by the type emitter

        Returns:
            Converter plans in emission order

        Raises:
            InvalidTargetError: If a converter name collides with a field name
        """
        output_names = [f.name for f in artifact.field_defs]
        plans: list[ConverterPlan] = []
        taken: set[str] = set()

        def copied(source: SourceSchema) -> tuple[str, ...]:
            return tuple(n for n in source.schema.names() if n in output_names)

        named_sources = self._distinct_named_sources(artifact.sources)
        for source in named_sources:
            name = self._unique_name(f"from_{pascal_to_snake_case(source.type_name)}", taken)
            taken.update({name, f"{name}_collection"})
            plans.append(ConverterPlan(name, ConverterKind.FROM_SOURCE, (source.type_name,), (copied(source),)))
            plans.append(ConverterPlan(f"{name}_collection", ConverterKind.COLLECTION, (source.type_name,), item_converter=name))

        if len(named_sources) == 2:
            first, second = named_sources
            plans.append(
                ConverterPlan(
                    "from_both",
                    ConverterKind.FROM_BOTH,
                    (first.type_name, second.type_name),
                    (copied(first), copied(second)),
                )
            )

        plans.append(ConverterPlan("from_single", ConverterKind.FROM_SINGLE, field_groups=(tuple(output_names),)))
        plans.append(ConverterPlan("from_collection", ConverterKind.COLLECTION, item_converter="from_single"))

        clashes = sorted(set(output_names) & {p.name for p in plans})
        if clashes:
            raise InvalidTargetError(f"Field names {clashes} collide with generated converters")
        return plans

    def emit(self, artifact: OutputArtifact, enabled: bool) -> ConverterSet | None:
        """
        Build converters and attach them to the artifact's class.

        Args:
            artifact: The artifact produced by the type emitter
            enabled: Converter switch; nothing is emitted when False

        Returns:
            The ConverterSet, or None when converters are disabled

        Raises:
            InvalidTargetError: If a converter name collides with a field name
        """
        if not enabled:
            return None

        cls = artifact.type
        field_defs = artifact.field_defs
        functions: dict[str, Callable[..., Any]] = {}

        for plan in self.plan(artifact):
            if plan.kind == ConverterKind.COLLECTION:
                functions[plan.name] = self._lift(plan.name, functions[plan.item_converter])
            elif plan.kind == ConverterKind.FROM_BOTH:
                functions[plan.name] = self._both_converter(cls, field_defs, *plan.field_groups)
            else:
                functions[plan.name] = self._named_converter(plan.name, cls, field_defs, plan.field_groups[0])

        for name, function in functions.items():
            setattr(cls, name, staticmethod(function))

        logger.debug("Emitted converters for %s: %s", artifact.qualified_name, list(functions))
        return ConverterSet(functions)

    @staticmethod
    def _distinct_named_sources(sources: tuple[SourceSchema, ...]) -> list[SourceSchema]:
        seen: set[str] = set()
        result = []
        for source in sources:
            if source.is_named and source.source_id not in seen:
                seen.add(source.source_id)
                result.append(source)
        return result

    @staticmethod
    def _unique_name(name: str, taken: set[str]) -> str:
        # Two named sources can share a class name when they live in different modules
        candidate = name
        index = 2
        while candidate in taken:
            candidate = f"{name}_{index}"
            index += 1
        return candidate

    def _named_converter(
        self,
        name: str,
        cls: type,
        field_defs: tuple[FieldDef, ...],
        names: tuple[str, ...],
    ) -> Callable[[Any], Any]:
        def convert(source):
            if source is None:
                raise NullInputError(name)
            return _construct(cls, field_defs, read_fields(source, names))

        convert.__name__ = convert.__qualname__ = name
        convert.__doc__ = f"Copy {', '.join(names) or 'no fields'} into a new {cls.__name__}."
        return convert

    def _both_converter(
        self,
        cls: type,
        field_defs: tuple[FieldDef, ...],
        first_names: tuple[str, ...],
        second_names: tuple[str, ...],
    ) -> Callable[[Any, Any], Any]:
        def from_both(first, second):
            if first is None or second is None:
                raise NullInputError("from_both")
            values = read_fields(first, first_names)
            values.update(read_fields(second, second_names))
            return _construct(cls, field_defs, values)

        from_both.__doc__ = f"Copy fields of both sources into a new {cls.__name__}; the second source wins."
        return from_both

    @staticmethod
    def _lift(name: str, converter: Callable[[Any], Any]) -> Callable[[Iterable[Any]], list[Any]]:
        def convert_all(sources):
            if sources is None:
                raise NullInputError(name)
            return [converter(source) for source in sources]

        convert_all.__name__ = convert_all.__qualname__ = name
        convert_all.__doc__ = f"Apply {converter.__name__} to every element, preserving order."
        return convert_all


def read_fields(source: Any, names: Iterable[str]) -> dict[str, Any]:
    """
    Read the named values present on a source.

    Mappings are read by key, other objects by attribute. Missing names are
    skipped.
    """
    values = {}
    for name in names:
        if isinstance(source, Mapping):
            value = source.get(name, _MISSING)
        else:
            value = getattr(source, name, _MISSING)
        if value is not _MISSING:
            values[name] = value
    return values


def _construct(cls: type, field_defs: tuple[FieldDef, ...], values: dict[str, Any]) -> Any:
    kwargs = {}
    for field_def in field_defs:
        kwargs[field_def.name] = values[field_def.name] if field_def.name in values else field_def.fallback_value()
    return cls(**kwargs)
