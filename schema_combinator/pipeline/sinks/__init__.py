"""
Emission sinks.

Destinations for resolved artifacts: an in-process registry and a source
file writer.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .file_sink import SourceFileSink
from .registry import ArtifactRegistry, EmissionSink, default_registry

__all__ = [
    "ArtifactRegistry",
    "AtomicWriter",
    "EmissionSink",
    "SourceFileSink",
    "default_registry",
]
