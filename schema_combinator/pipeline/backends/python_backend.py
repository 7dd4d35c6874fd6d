"""
Python source backend.

Renders an artifact as a Python dataclass module.
"""

from __future__ import annotations

import collections
import json
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from ..analyzer.ir_nodes import FieldDef, OutputArtifact
from ..config import OutputShape
from ..emitters.converter_emitter import ConverterKind, ConverterPlan
from ..type_refs import TypeKind, TypeRef
from .base import SourceBackend

# Decorator per output shape
DECORATORS = {
    OutputShape.IMMUTABLE: "@dataclass(frozen=True)",
    OutputShape.MUTABLE: "@dataclass(eq=False, kw_only=True)",
    OutputShape.BY_VALUE: "@dataclass(kw_only=True)",
}


class PythonBackend(SourceBackend):
    """Python source backend."""

    TEMPLATE_LANG = "python"
    FILE_EXTENSION = "py"
    COMMENT_PREFIX = "#"

    TYPE_MAP = {
        "string": "str",
        "int": "int",
        "long": "int",
        "float": "float",
        "double": "float",
        "decimal": "Decimal",
        "bool": "bool",
        "datetime": "datetime",
        "date": "date",
        "time": "time",
        "uuid": "UUID",
        "bytes": "bytes",
        "object": "Any",
    }

    # Primitive names that need an import, and where it comes from
    TYPE_IMPORTS = {
        "decimal": ("decimal", "Decimal"),
        "datetime": ("datetime", "datetime"),
        "date": ("datetime", "date"),
        "time": ("datetime", "time"),
        "uuid": ("uuid", "UUID"),
        "object": ("typing", "Any"),
    }

    # Standard library modules, grouped before third party imports
    STDLIB_MODULES = {"collections", "collections.abc", "copy", "dataclasses", "datetime", "decimal", "typing", "uuid"}

    def __init__(self, config=None):
        super().__init__(config)
        self.python_imports: set[tuple[str, str]] = set()
        self.module_imports: set[str] = set()

    def render(self, artifact: OutputArtifact, command_line: str | None = None) -> str:
        """Render a Python module declaring the artifact's dataclass."""
        # Reset import tracking
        self.python_imports = {("dataclasses", "dataclass")}
        self.module_imports = set()

        if self.config.use_future_annotations:
            self.python_imports.add(("__future__", "annotations"))

        plans = self._converter_plans(artifact)
        class_ctx = self._prepare_class_context(artifact, plans)
        class_content = self.class_template.render(class_ctx)

        if plans:
            self.python_imports.add(("collections.abc", "Mapping"))
            self.python_imports.add(("typing", "Any"))

        prefix = self.prefix_template.render(
            generation_comment=self._generation_comment(command_line),
            required_imports=self._assemble_imports(),
            read_fields_helper=bool(plans),
        )
        suffix = self.suffix_template.render(exports=json.dumps(artifact.name))

        return prefix.rstrip("\n") + "\n\n\n" + class_content.rstrip("\n") + "\n" + suffix.rstrip("\n") + "\n"

    def translate_type(self, type_ref: TypeRef) -> str:
        """Translate a type descriptor to a Python type string."""
        if type_ref.kind == TypeKind.PRIMITIVE:
            if type_ref.name in self.TYPE_IMPORTS:
                self.python_imports.add(self.TYPE_IMPORTS[type_ref.name])
            result = self.TYPE_MAP.get(type_ref.name, type_ref.name)
        elif type_ref.kind == TypeKind.NAMED:
            result = type_ref.name
        elif type_ref.kind == TypeKind.LIST:
            result = f"list[{self.translate_type(type_ref.type_args[0])}]"
        else:
            key, value = type_ref.type_args
            result = f"dict[{self.translate_type(key)}, {self.translate_type(value)}]"

        if type_ref.is_nullable and not result.endswith(" | None"):
            result = f"{result} | None"
        return result

    def format_default_value(self, value: Any, type_ref: TypeRef) -> str:
        """Format a default value as a Python expression."""
        if value is None or isinstance(value, (bool, int, float)):
            return repr(value)

        if isinstance(value, str):
            return json.dumps(value)

        if isinstance(value, Decimal):
            self.python_imports.add(("decimal", "Decimal"))
            return f'Decimal("{value}")'

        if isinstance(value, datetime):
            self.python_imports.add(("datetime", "datetime"))
            return "datetime.min" if value == datetime.min else f'datetime.fromisoformat("{value.isoformat()}")'

        if isinstance(value, date):
            self.python_imports.add(("datetime", "date"))
            return "date.min" if value == date.min else f'date.fromisoformat("{value.isoformat()}")'

        if isinstance(value, time):
            self.python_imports.add(("datetime", "time"))
            return "time.min" if value == time.min else f'time.fromisoformat("{value.isoformat()}")'

        if isinstance(value, UUID):
            self.python_imports.add(("uuid", "UUID"))
            return f'UUID("{value}")'

        if isinstance(value, Enum):
            return f"{type(value).__name__}.{value.name}"

        item_type = type_ref.type_args[0] if type_ref.type_args else TypeRef.any()
        if isinstance(value, (list, tuple)):
            return "[" + ", ".join(self.format_default_value(v, item_type) for v in value) + "]"

        if isinstance(value, dict):
            value_type = type_ref.type_args[1] if len(type_ref.type_args) == 2 else TypeRef.any()
            items = [f"{self.format_default_value(k, item_type)}: {self.format_default_value(v, value_type)}" for k, v in value.items()]
            return "{" + ", ".join(items) + "}"

        return repr(value)

    def _prepare_class_context(self, artifact: OutputArtifact, plans: list[ConverterPlan]) -> dict[str, Any]:
        """
        Prepare the template context for the artifact's class.

        Args:
            artifact: The emitted artifact
            plans: Converters to render as static methods

        Returns:
            Dictionary of template variables
        """
        by_value = artifact.shape == OutputShape.BY_VALUE
        if by_value:
            self.module_imports.add("copy")
            self.python_imports.add(("typing", "Any"))

        return {
            "CLASS_NAME": artifact.name,
            "SELF_TYPE": self._forward(artifact.name),
            "DECORATOR": DECORATORS[artifact.shape],
            "DOCSTRING": f"{artifact.shape.value} {artifact.qualified_name}",
            "FIELDS": [self._field_line(f, artifact.shape) for f in artifact.field_defs],
            "BY_VALUE": by_value,
            "CONVERTERS": [self._prepare_converter_context(artifact, plan) for plan in plans],
        }

    def _field_line(self, field_def: FieldDef, shape: OutputShape) -> str:
        type_str = self.translate_type(field_def.type_ref)
        if field_def.type_ref.kind == TypeKind.NAMED and not self.config.use_future_annotations:
            type_str = f'"{type_str}"'

        if field_def.requires_init:
            if field_def.kw_only and shape == OutputShape.IMMUTABLE:
                self.python_imports.add(("dataclasses", "field"))
                return f"{field_def.name}: {type_str} = field(kw_only=True)"
            return f"{field_def.name}: {type_str}"

        value = self._fallback_expression(field_def)
        is_container = isinstance(field_def.default, (list, tuple, dict)) or (value.startswith(("[", "{")))
        kw_only = field_def.kw_only and shape == OutputShape.IMMUTABLE

        if is_container or kw_only:
            self.python_imports.add(("dataclasses", "field"))
            spec = f"default_factory=lambda: {value}" if is_container else f"default={value}"
            if kw_only:
                spec += ", kw_only=True"
            return f"{field_def.name}: {type_str} = field({spec})"
        return f"{field_def.name}: {type_str} = {value}"

    def _prepare_converter_context(self, artifact: OutputArtifact, plan: ConverterPlan) -> dict[str, Any]:
        name = artifact.name
        error = f"raise ValueError({json.dumps(f'Converter {plan.name!r} received None')})"

        if plan.kind == ConverterKind.COLLECTION:
            item = plan.source_types[0] if plan.source_types else "object"
            return {
                "name": plan.name,
                "params": "source: Any",
                "returns": self._forward(f"list[{name}]"),
                "doc": f"Convert every {item} element to {name}, preserving order.",
                "body": [
                    "if source is None:",
                    f"    {error}",
                    f"return [{name}.{plan.item_converter}(item) for item in source]",
                ],
            }

        if plan.kind == ConverterKind.FROM_BOTH:
            first, second = plan.field_groups
            body = [
                "if first is None or second is None:",
                f"    {error}",
                f"values = _read_fields(first, {self._tuple_literal(first)})",
                f"values.update(_read_fields(second, {self._tuple_literal(second)}))",
            ]
            doc = f"Build a {name} from a {plan.source_types[0]} and a {plan.source_types[1]}; the second wins."
            params = "first: Any, second: Any"
        else:
            body = [
                "if source is None:",
                f"    {error}",
                f"values = _read_fields(source, {self._tuple_literal(plan.field_groups[0])})",
            ]
            source_type = plan.source_types[0] if plan.source_types else "object"
            doc = f"Build a {name} from a {source_type}."
            params = "source: Any"

        copied = {n for group in plan.field_groups for n in group}
        body.append(f"return {name}(")
        for field_def in artifact.field_defs:
            fallback = self._fallback_expression(field_def)
            if field_def.name in copied:
                body.append(f"    {field_def.name}=values.get({json.dumps(field_def.name)}, {fallback}),")
            else:
                body.append(f"    {field_def.name}={fallback},")
        body.append(")")

        return {
            "name": plan.name,
            "params": params,
            "returns": self._forward(name),
            "doc": doc,
            "body": body,
        }

    def _forward(self, annotation: str) -> str:
        """Quote annotations referring to the class being defined."""
        return annotation if self.config.use_future_annotations else f'"{annotation}"'

    @staticmethod
    def _tuple_literal(names: tuple[str, ...]) -> str:
        if len(names) == 1:
            return f"({json.dumps(names[0])},)"
        return "(" + ", ".join(json.dumps(n) for n in names) + ")"

    def _assemble_imports(self) -> list[str]:
        """Assemble Python import statements."""
        # Group imports by module
        import_groups: dict[str, set[str]] = collections.defaultdict(set)
        for module, name in self.python_imports:
            import_groups[module].add(name)

        stdlib_groups = {m: import_groups[m] for m in import_groups if m in self.STDLIB_MODULES}
        third_party_groups = {m: import_groups[m] for m in import_groups if m not in self.STDLIB_MODULES and m != "__future__"}

        assembled = []

        # __future__ imports first
        if "__future__" in import_groups:
            names = sorted(import_groups["__future__"])
            assembled.append(f"from __future__ import {', '.join(names)}")
            if stdlib_groups or third_party_groups or self.module_imports:
                assembled.append("")

        for module in sorted(self.module_imports):
            assembled.append(f"import {module}")

        # Standard library
        for module in sorted(stdlib_groups.keys()):
            names = sorted(stdlib_groups[module])
            assembled.append(f"from {module} import {', '.join(names)}")

        if stdlib_groups and third_party_groups:
            assembled.append("")

        # Third party
        for module in sorted(third_party_groups.keys()):
            names = sorted(third_party_groups[module])
            assembled.append(f"from {module} import {', '.join(names)}")

        return assembled
