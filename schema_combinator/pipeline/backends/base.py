"""
Base class for source backends.

Defines the interface that all language-specific backends must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ...utils import snake_to_pascal_case
from ..analyzer.ir_nodes import FieldDef, OutputArtifact
from ..config import CombinatorConfig
from ..emitters.converter_emitter import ConverterEmitter, ConverterPlan
from ..type_refs import TypeRef


class SourceBackend(ABC):
    """Abstract base class for source backends."""

    # Type mapping from primitive names to language types
    TYPE_MAP: dict[str, str] = {}

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    # Line comment prefix
    COMMENT_PREFIX: str = "#"

    def __init__(self, config: CombinatorConfig | None = None):
        """
        Initialize the backend.

        Args:
            config: Combinator configuration
        """
        self.config = config or CombinatorConfig()
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
        )
        self.jinja_env.filters["snake_to_pascal"] = snake_to_pascal_case

        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.class_template = self.jinja_env.get_template(f"class.{self.FILE_EXTENSION}.jinja2")
        self.suffix_template = self.jinja_env.get_template(f"suffix.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def render(self, artifact: OutputArtifact, command_line: str | None = None) -> str:
        """
        Render an artifact as source code.

        Args:
            artifact: The emitted artifact
            command_line: Optional command line recorded in the generation comment

        Returns:
            Source code as a string
        """

    @abstractmethod
    def translate_type(self, type_ref: TypeRef) -> str:
        """
        Translate a type descriptor to a language-specific type string.

        Args:
            type_ref: The type reference

        Returns:
            Language-specific type string
        """

    @abstractmethod
    def format_default_value(self, value: Any, type_ref: TypeRef) -> str:
        """
        Format a default value for the target language.

        Args:
            value: The default value
            type_ref: The type of the value

        Returns:
            Formatted default value string
        """

    def file_name(self, artifact: OutputArtifact) -> str:
        """File name of the rendered artifact."""
        return f"{artifact.name}.{self.FILE_EXTENSION}"

    def _generation_comment(self, command_line: str | None) -> str:
        """Deterministic generation comment, empty when disabled."""
        if not self.config.add_generation_comment:
            return ""

        from ... import __version__

        comment = f"{self.COMMENT_PREFIX} Generated by schema_combinator v{__version__}"
        if command_line:
            comment += f" : {command_line}"
        return comment

    def _converter_plans(self, artifact: OutputArtifact) -> list[ConverterPlan]:
        """Plans of the converters present on the artifact."""
        if artifact.converters is None:
            return []
        return ConverterEmitter().plan(artifact)

    def _fallback_expression(self, field: FieldDef) -> str:
        """Value used for a field that a converter has nothing to copy into."""
        if field.has_default:
            return self.format_default_value(field.default, field.type_ref)
        return self.format_default_value(field.type_ref.zero_value(), field.type_ref)
