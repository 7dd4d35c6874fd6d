"""
Emitters.

Turn a ResolvedSchema into an OutputArtifact: the runtime type and its
converters.
"""

from __future__ import annotations

from .converter_emitter import ConverterEmitter, ConverterKind, ConverterPlan, read_fields
from .type_emitter import TypeEmitter

__all__ = [
    "ConverterEmitter",
    "ConverterKind",
    "ConverterPlan",
    "TypeEmitter",
    "read_fields",
]
