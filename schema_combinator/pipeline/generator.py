"""
Pipeline generator.

Orchestrates the phases of one resolution:

1. Extraction: one Schema per AddSource directive
2. Combination: fold the directive log into a ResolvedSchema
3. Type emission: field definitions and the runtime class
4. Converter emission: optional conversion functions
5. Rendering: optional source code through a language backend

Every call re-runs the pipeline from the directive snapshot taken at
construction, so repeated calls produce equal artifacts.

Sources are extracted once per source id. Two different sources that
share an id (same-named declarations, classes with the same qualified
name) are given distinct ids in the snapshot so neither is dropped.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable

from .analyzer import DeclaredSchema, OutputArtifact, ResolvedSchema, SchemaCombinator, SourceSchema, TargetSettings, resolve_settings
from .backends import get_backend
from .config import CombinatorConfig
from .directives import AddSource, Directive
from .emitters import ConverterEmitter, TypeEmitter
from .extractor import SchemaExtractor

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """Runs the extraction, combination and emission phases over a directive log."""

    def __init__(
        self,
        directives: Iterable[Directive],
        config: CombinatorConfig | None = None,
        extractor: SchemaExtractor | None = None,
    ):
        """
        Initialize the generator.

        Args:
            directives: The directive log (a DirectiveLog or any directive iterable)
            config: Combinator configuration
            extractor: Schema extractor; defaults to Python reflection
        """
        self.directives: tuple[Directive, ...] = key_sources(directives)
        self.config = config or CombinatorConfig()
        self.extractor = extractor or SchemaExtractor()
        self.combinator = SchemaCombinator()
        self.type_emitter = TypeEmitter()
        self.converter_emitter = ConverterEmitter()

    def extract_sources(self) -> dict[str, SourceSchema]:
        """
        Extract every distinct source referenced by the log.

        Returns:
            Source schemas keyed by source id, in first-reference order

        Raises:
            ExtractionError: If any source cannot yield a schema
        """
        sources: dict[str, SourceSchema] = {}
        for directive in self.directives:
            if isinstance(directive, AddSource) and directive.source_id not in sources:
                sources[directive.source_id] = self.extractor.extract_source(directive)
        return sources

    def resolve(self) -> ResolvedSchema:
        """Extract the sources and fold the log into a ResolvedSchema."""
        return self.combinator.combine(self.directives, self.extract_sources())

    def settings(self) -> TargetSettings:
        """Target name, namespace, shape and converter switch."""
        return resolve_settings(self.directives, self.config)

    def generate(self) -> OutputArtifact:
        """
        Run the whole pipeline.

        Returns:
            The OutputArtifact, with converters when they are enabled

        Raises:
            ExtractionError: If a source cannot yield a schema
            InvalidTargetError: If the target or a field cannot be emitted
        """
        sources = self.extract_sources()
        resolved = self.combinator.combine(self.directives, sources)
        settings = self.settings()

        artifact = self.type_emitter.emit(resolved, settings, tuple(sources.values()))
        converters = self.converter_emitter.emit(artifact, settings.converters_enabled)
        if converters is not None:
            artifact = dataclasses.replace(artifact, converters=converters)

        logger.debug("Generated %s from %d directives", artifact.qualified_name, len(self.directives))
        return artifact

    def render(self, language: str = "python", command_line: str | None = None) -> str:
        """
        Generate the artifact and render it as source code.

        Args:
            language: "python" or "cs"
            command_line: Optional command line recorded in the generation comment

        Returns:
            The rendered source
        """
        backend = get_backend(language, self.config)
        return backend.render(self.generate(), command_line)


def key_sources(directives: Iterable[Directive]) -> tuple[Directive, ...]:
    """
    Snapshot a directive log, giving every distinct source its own source id.

    An AddSource that repeats the id of an earlier one keeps that id only when
    it carries the same source (the same object, or an equal declared schema).
    Otherwise it is renamed ``<id>#<n>``.

    Args:
        directives: The directive log

    Returns:
        The directives, with colliding AddSource ids made unique
    """
    seen: dict[str, list[tuple[str, object]]] = {}
    keyed: list[Directive] = []
    for directive in directives:
        if isinstance(directive, AddSource):
            variants = seen.setdefault(directive.source_id, [])
            source_id = next((key for key, source in variants if _same_source(source, directive.source)), None)
            if source_id is None:
                source_id = directive.source_id if not variants else f"{directive.source_id}#{len(variants) + 1}"
                variants.append((source_id, directive.source))
            if source_id != directive.source_id:
                logger.debug("Source id %s is shared by different sources; using %s", directive.source_id, source_id)
                directive = dataclasses.replace(directive, source_id=source_id)
        keyed.append(directive)
    return tuple(keyed)


def _same_source(left: object, right: object) -> bool:
    if left is right:
        return True
    return isinstance(left, DeclaredSchema) and isinstance(right, DeclaredSchema) and left == right
