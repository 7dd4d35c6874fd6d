"""
Type emitter.

Turns a ResolvedSchema into field definitions and a runtime class whose
construction and equality follow the requested output shape:

- IMMUTABLE: positional initializer in schema order, no setters,
  structural equality.
- MUTABLE: keyword initializer, settable members, identity equality.
- BY_VALUE: keyword initializer, settable members, structural equality,
  values are copied on assignment so instances never share state.
"""

from __future__ import annotations

import copy
import dataclasses
import functools
import logging
from typing import Any

from ...utils import is_dunder, is_valid_identifier
from ..analyzer.ir_nodes import FieldDef, OutputArtifact, ResolvedSchema, SourceSchema, TargetSettings
from ..config import OutputShape
from ..errors import InvalidTargetError

logger = logging.getLogger(__name__)

# Members generated on BY_VALUE classes; fields may not reuse these names
BY_VALUE_MEMBERS = {"copy"}


class TypeEmitter:
    """Emits the type definition of an artifact."""

    def emit(
        self,
        resolved: ResolvedSchema,
        settings: TargetSettings,
        sources: tuple[SourceSchema, ...] = (),
    ) -> OutputArtifact:
        """
        Emit the output artifact (without converters).

        Args:
            resolved: The resolved schema
            settings: Target name, namespace and shape
            sources: Extracted source schemas, kept on the artifact

        Returns:
            OutputArtifact with field definitions and the runtime class

        Raises:
            InvalidTargetError: If the name or a field name cannot be emitted
        """
        self._validate_target(settings)
        field_defs = self.build_field_defs(resolved, settings.shape)
        cls = self._build_class(settings, field_defs)

        logger.debug("Emitted %s %s with fields %s", settings.shape.value, settings.qualified_name, resolved.names())

        return OutputArtifact(
            name=settings.name,
            namespace=settings.namespace,
            shape=settings.shape,
            fields=resolved,
            field_defs=field_defs,
            sources=tuple(sources),
            type=cls,
        )

    def build_field_defs(self, resolved: ResolvedSchema, shape: OutputShape) -> tuple[FieldDef, ...]:
        """
        Derive the initialization contract of every field.

        Fields keep the resolved order. For IMMUTABLE, a defaulted field that
        precedes a required one becomes keyword-only instead of being moved.
        Mutable shapes take keyword arguments only; reference-typed fields
        without a default must be supplied by the caller.
        """
        for prop in resolved:
            self._validate_field_name(prop.name, shape)

        properties = list(resolved)
        field_defs = []
        for index, prop in enumerate(properties):
            if shape == OutputShape.IMMUTABLE:
                requires_init = not prop.has_default
                later_required = any(not p.has_default for p in properties[index + 1 :])
                kw_only = prop.has_default and later_required
            else:
                requires_init = not prop.has_default and prop.type_ref.requires_init
                kw_only = True

            field_defs.append(
                FieldDef(
                    name=prop.name,
                    type_ref=prop.type_ref,
                    default=prop.default,
                    has_default=prop.has_default,
                    requires_init=requires_init,
                    kw_only=kw_only,
                )
            )
        return tuple(field_defs)

    def _build_class(self, settings: TargetSettings, field_defs: tuple[FieldDef, ...]) -> type:
        specs = []
        for field_def in field_defs:
            annotation = field_def.type_ref.to_annotation()
            if field_def.requires_init:
                spec = dataclasses.field(kw_only=field_def.kw_only)
            else:
                value = field_def.default if field_def.has_default else field_def.type_ref.zero_value()
                if _is_mutable(value):
                    spec = dataclasses.field(
                        default_factory=functools.partial(copy.deepcopy, value),
                        kw_only=field_def.kw_only,
                    )
                else:
                    spec = dataclasses.field(default=value, kw_only=field_def.kw_only)
            specs.append((field_def.name, annotation, spec))

        namespace: dict[str, Any] = {"__shape__": settings.shape}
        if settings.shape == OutputShape.BY_VALUE:
            namespace.update(
                {
                    "__by_value__": True,
                    "__setattr__": _copying_setattr,
                    "__copy__": _copy_instance,
                    "copy": _copy_instance,
                }
            )

        cls = dataclasses.make_dataclass(
            settings.name,
            specs,
            namespace=namespace,
            frozen=settings.shape == OutputShape.IMMUTABLE,
            eq=settings.shape != OutputShape.MUTABLE,
            module=settings.namespace,
        )
        cls.__doc__ = f"{settings.shape.value} {settings.qualified_name}({', '.join(f.name for f in field_defs)})"
        return cls

    def _validate_target(self, settings: TargetSettings) -> None:
        if not settings.name:
            raise InvalidTargetError("No target type name was given")
        if not is_valid_identifier(settings.name) or is_dunder(settings.name):
            raise InvalidTargetError(f"'{settings.name}' is not a valid type name")
        if settings.namespace and not all(is_valid_identifier(part) for part in settings.namespace.split(".")):
            raise InvalidTargetError(f"'{settings.namespace}' is not a valid namespace")

    def _validate_field_name(self, name: str, shape: OutputShape) -> None:
        if not is_valid_identifier(name) or is_dunder(name):
            raise InvalidTargetError(f"'{name}' is not a valid field name")
        if shape == OutputShape.BY_VALUE and name in BY_VALUE_MEMBERS:
            raise InvalidTargetError(f"'{name}' is reserved on {shape.value} types")


def _is_mutable(value: Any) -> bool:
    return type(value).__hash__ is None


def _detach(value: Any) -> Any:
    """Copy values that could otherwise be shared between instances."""
    if _is_mutable(value) or getattr(type(value), "__by_value__", False):
        return copy.deepcopy(value)
    return value


def _copying_setattr(self, name: str, value: Any) -> None:
    object.__setattr__(self, name, _detach(value))


def _copy_instance(self):
    return copy.deepcopy(self)
