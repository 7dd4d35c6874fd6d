"""
JSON combination descriptions.

A description lets hosts without reflection build a directive log from an
explicit document. Sources carry their schema literally:

    {
        "name": "CustomerCard",
        "namespace": "Crm",
        "shape": "class",
        "converters": true,
        "directives": [
            {"op": "source", "id": "Customer", "properties": {"name": "string", "age": "int"}},
            {"op": "exclude", "name": "age"},
            {"op": "add", "name": "notes", "type": "string?", "default": null}
        ]
    }

Top-level ``name``, ``shape`` and ``converters`` are applied before the
directive list, so directives in the list override them.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .analyzer.ir_nodes import DeclaredSchema, Schema
from .config import OutputShape
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
from .errors import DescriptionError
from .type_refs import parse_type_ref

# Shape spellings accepted besides the OutputShape values
SHAPE_ALIASES = {
    "immutable": OutputShape.IMMUTABLE,
    "mutable": OutputShape.MUTABLE,
    "by_value": OutputShape.BY_VALUE,
}


def load_description(data: Any) -> DirectiveLog:
    """
    Build a directive log from a parsed description document.

    Args:
        data: The parsed JSON document

    Returns:
        The DirectiveLog

    Raises:
        DescriptionError: If the document is malformed
    """
    if not isinstance(data, Mapping):
        raise DescriptionError("Description must be a JSON object")

    log = DirectiveLog()
    try:
        if "name" in data:
            log.append(SetName(_string(data, "name"), _optional_string(data, "namespace")))
        if "shape" in data:
            log.append(SetOutputShape(_shape(data["shape"])))
        if "converters" in data:
            log.append(EnableConverters(_bool(data, "converters")))
    except ValueError as e:
        raise DescriptionError(f"Invalid description header: {e}") from e

    directives = data.get("directives", [])
    if not isinstance(directives, list):
        raise DescriptionError("'directives' must be a list")

    for index, entry in enumerate(directives):
        try:
            log.append(parse_directive(entry))
        except ValueError as e:
            raise DescriptionError(f"Invalid directive {index}: {e}") from e
    return log


def load_description_file(path: str | Path) -> DirectiveLog:
    """Read and load a description file."""
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise DescriptionError(f"{path} is not valid JSON: {e}") from e
    return load_description(data)


def parse_directive(entry: Any) -> Directive:
    """
    Parse one directive object.

    Raises:
        ValueError: If the object is not a valid directive
    """
    if not isinstance(entry, Mapping):
        raise ValueError("directive must be an object")

    op = _string(entry, "op")
    match op:
        case "source":
            source_id = _string(entry, "id")
            properties = entry.get("properties", {})
            if not isinstance(properties, Mapping):
                raise ValueError("'properties' must be an object of name -> type")
            schema = Schema.from_pairs([(name, parse_type_ref(_type_text(name, text))) for name, text in properties.items()])
            kind = SourceKind.NAMED if _bool(entry, "named", True) else SourceKind.LITERAL
            return AddSource(DeclaredSchema(source_id, schema), kind, f"declared:{source_id}")

        case "add":
            return AddProperty(
                name=_string(entry, "name"),
                type_ref=parse_type_ref(_string(entry, "type")),
                default=entry.get("default"),
                has_default="default" in entry,
            )

        case "exclude":
            return ExcludeProperty(_string(entry, "name"))

        case "exclude_if":
            return ExcludePropertyIf(_string(entry, "name"), _bool(entry, "condition"))

        case "retype":
            return RetypeProperty(_string(entry, "name"), parse_type_ref(_string(entry, "type")))

        case "shape":
            return SetOutputShape(_shape(entry.get("shape")))

        case "name":
            return SetName(_string(entry, "name"), _optional_string(entry, "namespace"))

        case "converters":
            return EnableConverters(_bool(entry, "enabled", True))

    raise ValueError(f"unknown op '{op}'")


def _string(entry: Mapping, key: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"'{key}' must be a non-empty string")
    return value


def _optional_string(entry: Mapping, key: str) -> str | None:
    if entry.get(key) is None:
        return None
    return _string(entry, key)


def _bool(entry: Mapping, key: str, default: bool | None = None) -> bool:
    value = entry.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be a boolean")
    return value


def _shape(value: Any) -> OutputShape:
    if not isinstance(value, str):
        raise ValueError(f"shape must be a string, got {value!r}")
    if value in SHAPE_ALIASES:
        return SHAPE_ALIASES[value]
    if value in {s.value for s in OutputShape}:
        return OutputShape(value)
    raise ValueError(f"unknown shape {value!r}; expected one of {[s.value for s in OutputShape] + list(SHAPE_ALIASES)}")


def _type_text(name: str, text: Any) -> str:
    if not isinstance(text, str):
        raise ValueError(f"type of property '{name}' must be a string")
    return text
