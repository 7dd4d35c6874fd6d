"""
Analyzer module.

Contains the IR nodes and the schema combinator.
"""

from __future__ import annotations

from .combinator import SchemaCombinator, resolve_settings
from .ir_nodes import (
    ConverterSet,
    DeclaredSchema,
    FieldDef,
    OutputArtifact,
    Property,
    ResolvedProperty,
    ResolvedSchema,
    Schema,
    SourceSchema,
    TargetSettings,
)

__all__ = [
    "ConverterSet",
    "DeclaredSchema",
    "FieldDef",
    "OutputArtifact",
    "Property",
    "ResolvedProperty",
    "ResolvedSchema",
    "Schema",
    "SchemaCombinator",
    "SourceSchema",
    "TargetSettings",
    "resolve_settings",
]
