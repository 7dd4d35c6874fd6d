"""
Schema combinator.

Folds a directive log, strictly left to right, into a ResolvedSchema. The
running state is an ordered ``name -> ResolvedProperty`` map:

- AddSource appends each property of the source's schema; a name that is
  already present is overwritten in place (the later contribution wins and
  the original position is kept).
- AddProperty inserts or overwrites in place, storing its default.
- ExcludeProperty / ExcludePropertyIf (when true) remove whatever is mapped
  at that point. A later add re-inserts the name at the end.
- RetypeProperty rewrites the type of a present entry in place.

Directives referencing an absent name are no-ops.
"""

from __future__ import annotations

import logging

from ..config import CombinatorConfig
from ..directives import (
    AddProperty,
    AddSource,
    Directive,
    EnableConverters,
    ExcludeProperty,
    ExcludePropertyIf,
    RetypeProperty,
    SetName,
    SetOutputShape,
)
from .ir_nodes import ResolvedProperty, ResolvedSchema, SourceSchema, TargetSettings

logger = logging.getLogger(__name__)

ADDED_ORIGIN = "add"


class SchemaCombinator:
    """Resolves a directive sequence into a single ResolvedSchema."""

    def combine(self, directives: list[Directive] | tuple[Directive, ...], sources: dict[str, SourceSchema]) -> ResolvedSchema:
        """
        Fold the directives into a ResolvedSchema.

        Args:
            directives: The directive log, in append order
            sources: Extracted schema per AddSource source_id

        Returns:
            The resolved, ordered, unique-by-name property list

        Raises:
            KeyError: If an AddSource directive has no extracted schema
        """
        resolved: dict[str, ResolvedProperty] = {}

        for directive in directives:
            match directive:
                case AddSource():
                    source = sources[directive.source_id]
                    for prop in source.schema:
                        resolved[prop.name] = ResolvedProperty(
                            name=prop.name,
                            type_ref=prop.type_ref,
                            origin=directive.source_id,
                        )

                case AddProperty():
                    resolved[directive.name] = ResolvedProperty(
                        name=directive.name,
                        type_ref=directive.type_ref,
                        origin=ADDED_ORIGIN,
                        default=directive.default,
                        has_default=directive.has_default,
                    )

                case ExcludeProperty():
                    self._remove(resolved, directive.name)

                case ExcludePropertyIf():
                    if directive.condition:
                        self._remove(resolved, directive.name)

                case RetypeProperty():
                    current = resolved.get(directive.name)
                    if current is None:
                        logger.debug("Retype of absent property %s ignored", directive.name)
                        continue
                    resolved[directive.name] = ResolvedProperty(
                        name=current.name,
                        type_ref=directive.new_type,
                        origin=current.origin,
                        default=current.default,
                        has_default=current.has_default,
                    )

                case _:
                    # Settings directives do not touch the property map
                    continue

            logger.debug("Applied %s -> %s", type(directive).__name__, list(resolved))

        return ResolvedSchema(tuple(resolved.values()))

    @staticmethod
    def _remove(resolved: dict[str, ResolvedProperty], name: str) -> None:
        if resolved.pop(name, None) is None:
            logger.debug("Exclusion of absent property %s ignored", name)


def resolve_settings(directives: list[Directive] | tuple[Directive, ...], config: CombinatorConfig) -> TargetSettings:
    """
    Fold the setting directives of a log; the last directive of each kind wins.

    Args:
        directives: The directive log
        config: Provides the default namespace and shape

    Returns:
        The target settings
    """
    name = ""
    namespace = config.default_namespace
    shape = config.default_shape
    converters_enabled = False

    for directive in directives:
        if isinstance(directive, SetName):
            name = directive.identifier
            if directive.namespace:
                namespace = directive.namespace
        elif isinstance(directive, SetOutputShape):
            shape = directive.shape
        elif isinstance(directive, EnableConverters):
            converters_enabled = directive.enabled

    return TargetSettings(
        name=name,
        namespace=namespace,
        shape=shape,
        converters_enabled=converters_enabled,
    )
