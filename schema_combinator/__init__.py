"""Schema Combinator

A Python package for synthesizing data-record types from property sources
(classes, object literals and collection projections) refined by add,
exclude and retype directives, with optional converters from the source
shapes and Python or C# source rendering.
"""

__version__ = "1.0.0"

from .pipeline import (
    ArtifactRegistry,
    CombinatorConfig,
    CombinatorError,
    DeclaredSchema,
    DirectiveLog,
    ExtractionError,
    InvalidTargetError,
    NullInputError,
    OutputArtifact,
    OutputShape,
    PipelineGenerator,
    ResolvedSchema,
    Schema,
    SourceFileSink,
    TypeCombiner,
    TypeRef,
    default_registry,
    load_description,
)

__all__ = [
    "ArtifactRegistry",
    "CombinatorConfig",
    "CombinatorError",
    "DeclaredSchema",
    "DirectiveLog",
    "ExtractionError",
    "InvalidTargetError",
    "NullInputError",
    "OutputArtifact",
    "OutputShape",
    "PipelineGenerator",
    "ResolvedSchema",
    "Schema",
    "SourceFileSink",
    "TypeCombiner",
    "TypeRef",
    "default_registry",
    "load_description",
]
