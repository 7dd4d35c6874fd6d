"""
C# source backend.

Renders an artifact as a C# record, class or struct declaration.
"""

from __future__ import annotations

import json
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from ...utils import snake_to_pascal_case
from ..analyzer.ir_nodes import FieldDef, OutputArtifact
from ..config import OutputShape
from ..emitters.converter_emitter import ConverterKind, ConverterPlan
from ..type_refs import TypeKind, TypeRef
from .base import SourceBackend

INDENT = "    "

# Reflection lookup used by FromSingle
READ_MEMBER_HELPER = [
    "private static T ReadMember<T>(object source, string name, T fallback)",
    "{",
    f"{INDENT}var property = source.GetType().GetProperty(name);",
    f"{INDENT}return property?.GetValue(source) is T value ? value : fallback;",
    "}",
]


class CSharpBackend(SourceBackend):
    """C# source backend."""

    TEMPLATE_LANG = "cs"
    FILE_EXTENSION = "cs"
    COMMENT_PREFIX = "//"

    TYPE_MAP = {
        "string": "string",
        "int": "int",
        "long": "long",
        "float": "float",
        "double": "double",
        "decimal": "decimal",
        "bool": "bool",
        "datetime": "DateTime",
        "date": "DateOnly",
        "time": "TimeOnly",
        "uuid": "Guid",
        "bytes": "byte[]",
        "object": "object",
    }

    # Literal suffix per numeric primitive
    NUMERIC_SUFFIXES = {"long": "L", "float": "f", "double": "d", "decimal": "m"}

    def __init__(self, config=None):
        super().__init__(config)
        self.required_imports: set[str] = set()

    def render(self, artifact: OutputArtifact, command_line: str | None = None) -> str:
        """Render a C# file declaring the artifact's type."""
        # Reset import tracking
        self.required_imports = {"System"}
        self.required_imports.update(self.config.csharp_additional_usings)

        plans = self._converter_plans(artifact)
        class_ctx = self._prepare_class_context(artifact, plans)
        class_content = self.class_template.render(class_ctx)

        if plans:
            self.required_imports.update({"System.Collections.Generic", "System.Linq"})

        prefix = self.prefix_template.render(
            generation_comment=self._generation_comment(command_line),
            required_imports=sorted(self.required_imports),
            namespace=artifact.namespace or self.config.default_namespace,
        )
        suffix = self.suffix_template.render()

        return prefix.rstrip("\n") + "\n" + class_content.rstrip("\n") + "\n" + suffix.rstrip("\n") + "\n"

    def translate_type(self, type_ref: TypeRef) -> str:
        """Translate a type descriptor to a C# type string."""
        if type_ref.kind == TypeKind.PRIMITIVE:
            result = self.TYPE_MAP.get(type_ref.name, type_ref.name)
        elif type_ref.kind == TypeKind.NAMED:
            result = type_ref.name
        elif type_ref.kind == TypeKind.LIST:
            self.required_imports.add("System.Collections.Generic")
            result = f"List<{self.translate_type(type_ref.type_args[0])}>"
        else:
            self.required_imports.add("System.Collections.Generic")
            key, value = type_ref.type_args
            result = f"Dictionary<{self.translate_type(key)}, {self.translate_type(value)}>"

        # Handle nullability
        if type_ref.is_nullable and not result.endswith("?"):
            result = f"{result}?"
        return result

    def format_default_value(self, value: Any, type_ref: TypeRef) -> str:
        """Format a default value as a C# expression."""
        if value is None:
            return "null"

        if isinstance(value, bool):
            return "true" if value else "false"

        if isinstance(value, str):
            return json.dumps(value)

        if isinstance(value, (int, float, Decimal)):
            suffix = self.NUMERIC_SUFFIXES.get(type_ref.name, "")
            if not suffix and isinstance(value, float):
                suffix = "d"
            return f"{value}{suffix}"

        if isinstance(value, datetime):
            return "DateTime.MinValue" if value == datetime.min else f'DateTime.Parse("{value.isoformat()}")'

        if isinstance(value, date):
            return "DateOnly.MinValue" if value == date.min else f'DateOnly.Parse("{value.isoformat()}")'

        if isinstance(value, time):
            return "TimeOnly.MinValue" if value == time.min else f'TimeOnly.Parse("{value.isoformat()}")'

        if isinstance(value, UUID):
            return "Guid.Empty" if value.int == 0 else f'Guid.Parse("{value}")'

        if isinstance(value, Enum):
            return f"{type(value).__name__}.{snake_to_pascal_case(value.name)}"

        type_name = self.translate_type(type_ref).rstrip("?")
        item_type = type_ref.type_args[0] if type_ref.type_args else TypeRef.any()
        if isinstance(value, (list, tuple)):
            if not value:
                return f"new {type_name}()"
            return f"new {type_name} {{ {', '.join(self.format_default_value(v, item_type) for v in value)} }}"

        if isinstance(value, dict):
            if not value:
                return f"new {type_name}()"
            value_type = type_ref.type_args[1] if len(type_ref.type_args) == 2 else TypeRef.any()
            items = [f"[{self.format_default_value(k, item_type)}] = {self.format_default_value(v, value_type)}" for k, v in value.items()]
            return f"new {type_name} {{ {', '.join(items)} }}"

        return str(value)

    def _fallback_expression(self, field: FieldDef) -> str:
        if field.has_default:
            return self.format_default_value(field.default, field.type_ref)
        if field.type_ref.is_nullable or field.type_ref.is_value_kind:
            return "default"
        return "default!"

    @staticmethod
    def _is_constant(value: Any) -> bool:
        """Whether a default can appear as an optional parameter value."""
        return value is None or isinstance(value, (bool, str, int, float, Decimal))

    def _prepare_class_context(self, artifact: OutputArtifact, plans: list[ConverterPlan]) -> dict[str, Any]:
        """
        Prepare the template context for the artifact's type.

        Records take their fields as positional parameters; defaulted fields
        that cannot be optional parameters become init-only properties.
        Classes and structs declare settable properties, with ``required``
        on reference-typed members that have no default.
        """
        name = artifact.name
        keyword = artifact.shape.value
        positional, members = self._split_members(artifact)

        body: list[str] = []
        for field_def in members:
            body.append(self._property_line(field_def, artifact.shape))

        if artifact.shape == OutputShape.BY_VALUE and any(f.has_default for f in members):
            # Struct field initializers need an explicit parameterless constructor
            body.append(f"public {name}() {{ }}")

        for plan in plans:
            if body:
                body.append("")
            body.extend(self._converter_lines(artifact, plan, positional))

        if any(plan.kind == ConverterKind.FROM_SINGLE for plan in plans):
            body.append("")
            body.extend(READ_MEMBER_HELPER)

        declaration = f"public partial {keyword} {name}"
        if positional:
            declaration += "(" + ", ".join(self._parameter(f) for f in positional) + ")"

        return {
            "DECLARATION": declaration,
            "BODY": [f"{INDENT * 2}{line}" if line else "" for line in body],
            "TERMINATED": bool(positional) and not body,
        }

    def _split_members(self, artifact: OutputArtifact) -> tuple[list[FieldDef], list[FieldDef]]:
        """Split fields into record parameters and declared properties."""
        if artifact.shape != OutputShape.IMMUTABLE:
            return [], list(artifact.field_defs)

        positional, members = [], []
        for field_def in artifact.field_defs:
            if field_def.has_default and (field_def.kw_only or not self._is_constant(field_def.default)):
                members.append(field_def)
            else:
                positional.append(field_def)
        return positional, members

    def _parameter(self, field_def: FieldDef) -> str:
        result = f"{self.translate_type(field_def.type_ref)} {self._member_name(field_def)}"
        if field_def.has_default:
            result += f" = {self.format_default_value(field_def.default, field_def.type_ref)}"
        return result

    def _property_line(self, field_def: FieldDef, shape: OutputShape) -> str:
        type_str = self.translate_type(field_def.type_ref)
        accessors = "{ get; init; }" if shape == OutputShape.IMMUTABLE else "{ get; set; }"
        modifier = "required " if field_def.requires_init and shape != OutputShape.IMMUTABLE else ""
        line = f"public {modifier}{type_str} {self._member_name(field_def)} {accessors}"
        if field_def.has_default:
            line += f" = {self.format_default_value(field_def.default, field_def.type_ref)};"
        return line

    @staticmethod
    def _member_name(field_def: FieldDef) -> str:
        return snake_to_pascal_case(field_def.name)

    def _converter_lines(self, artifact: OutputArtifact, plan: ConverterPlan, positional: list[FieldDef]) -> list[str]:
        name = artifact.name
        method = snake_to_pascal_case(plan.name)

        if plan.kind == ConverterKind.COLLECTION:
            item = plan.source_types[0] if plan.source_types else "object"
            item_converter = snake_to_pascal_case(plan.item_converter)
            return [
                f"public static List<{name}> {method}(IEnumerable<{item}> source)",
                "{",
                f"{INDENT}ArgumentNullException.ThrowIfNull(source);",
                f"{INDENT}return source.Select(item => {item_converter}(item)).ToList();",
                "}",
            ]

        if plan.kind == ConverterKind.FROM_BOTH:
            first_type, second_type = plan.source_types
            params = f"{first_type} first, {second_type} second"
            checks = ["ArgumentNullException.ThrowIfNull(first);", "ArgumentNullException.ThrowIfNull(second);"]
            readers = [("second", set(plan.field_groups[1])), ("first", set(plan.field_groups[0]))]
        elif plan.kind == ConverterKind.FROM_SINGLE:
            params = "object source"
            checks = ["ArgumentNullException.ThrowIfNull(source);"]
            readers = []
        else:
            params = f"{plan.source_types[0]} source"
            checks = ["ArgumentNullException.ThrowIfNull(source);"]
            readers = [("source", set(plan.field_groups[0]))]

        def read(field_def: FieldDef) -> str | None:
            if plan.kind == ConverterKind.FROM_SINGLE:
                # Members are looked up by name at run time; missing ones keep the fallback
                type_str = self.translate_type(field_def.type_ref)
                member = self._member_name(field_def)
                return f'ReadMember<{type_str}>(source, "{member}", {self._fallback_expression(field_def)})'
            for variable, names in readers:
                if field_def.name in names:
                    return f"{variable}.{self._member_name(field_def)}"
            return None

        lines = [f"public static {name} {method}({params})", "{"]
        lines.extend(f"{INDENT}{check}" for check in checks)

        arguments = [read(f) or self._fallback_expression(f) for f in positional]
        creation = f"new {name}({', '.join(arguments)})" if positional else f"new {name}"

        assignments = []
        for field_def in artifact.field_defs:
            if field_def in positional:
                continue
            value = read(field_def)
            if value is None and field_def.requires_init and artifact.shape != OutputShape.IMMUTABLE:
                value = self._fallback_expression(field_def)
            if value is not None:
                assignments.append(f"{self._member_name(field_def)} = {value},")

        if assignments:
            lines.append(f"{INDENT}return {creation}")
            lines.append(f"{INDENT}{{")
            lines.extend(f"{INDENT * 2}{assignment}" for assignment in assignments)
            lines.append(f"{INDENT}}};")
        elif positional:
            lines.append(f"{INDENT}return {creation};")
        else:
            lines.append(f"{INDENT}return {creation}();")
        lines.append("}")
        return lines
