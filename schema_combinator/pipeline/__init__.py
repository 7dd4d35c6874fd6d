"""
Pipeline - directive-driven type synthesis.

1. Directives: an append-only log describing the type to build
2. Extractor: one Schema per property source (classes, literals, projections)
3. Analyzer: fold the log into a ResolvedSchema
4. Emitters: runtime type and optional converters
5. Backends: optional Python / C# source rendering
6. Sinks: in-process registry or source files
"""

from __future__ import annotations

from .analyzer import (
    ConverterSet,
    DeclaredSchema,
    FieldDef,
    OutputArtifact,
    Property,
    ResolvedProperty,
    ResolvedSchema,
    Schema,
    SchemaCombinator,
    SourceSchema,
    TargetSettings,
)
from .builder import TypeCombiner
from .config import CombinatorConfig, OutputConfig, OutputMode, OutputShape
from .description import load_description, load_description_file
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
from .errors import ArtifactWriteError, CombinatorError, DescriptionError, ExtractionError, InvalidTargetError, NullInputError
from .extractor import SchemaExtractor
from .generator import PipelineGenerator
from .sinks import ArtifactRegistry, AtomicWriter, EmissionSink, SourceFileSink, default_registry
from .type_refs import TypeKind, TypeRef, parse_type_ref

__all__ = [
    "AddProperty",
    "AddSource",
    "ArtifactRegistry",
    "ArtifactWriteError",
    "AtomicWriter",
    "CombinatorConfig",
    "CombinatorError",
    "ConverterSet",
    "DeclaredSchema",
    "DescriptionError",
    "Directive",
    "DirectiveLog",
    "EmissionSink",
    "EnableConverters",
    "ExcludeProperty",
    "ExcludePropertyIf",
    "ExtractionError",
    "FieldDef",
    "InvalidTargetError",
    "NullInputError",
    "OutputArtifact",
    "OutputConfig",
    "OutputMode",
    "OutputShape",
    "PipelineGenerator",
    "Property",
    "ResolvedProperty",
    "ResolvedSchema",
    "RetypeProperty",
    "Schema",
    "SchemaCombinator",
    "SchemaExtractor",
    "SetName",
    "SetOutputShape",
    "SourceFileSink",
    "SourceKind",
    "SourceSchema",
    "TargetSettings",
    "TypeCombiner",
    "TypeKind",
    "TypeRef",
    "default_registry",
    "load_description",
    "load_description_file",
    "parse_type_ref",
]
