"""
Type descriptors shared by every phase of the pipeline.

A TypeRef is an opaque, language neutral descriptor: a primitive kind, a
named type token, or a list/dict of other descriptors, plus a nullability
flag. Equality is by descriptor value, never by structural shape.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import re
import types
import typing
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


class TypeKind(Enum):
    """Kind of type descriptor."""

    PRIMITIVE = "primitive"  # string, int, decimal, object, ...
    NAMED = "named"  # A named complex type (class token)
    LIST = "list"  # list[T]
    DICT = "dict"  # dict[K, V]


# Primitive name -> Python type used when synthesizing runtime classes
PRIMITIVE_PYTHON_TYPES: dict[str, Any] = {
    "string": str,
    "int": int,
    "long": int,
    "float": float,
    "double": float,
    "decimal": Decimal,
    "bool": bool,
    "datetime": datetime,
    "date": date,
    "time": time,
    "uuid": UUID,
    "bytes": bytes,
    "object": Any,
}

# Value-kind primitives and their zero values; everything else is reference-typed
ZERO_VALUES: dict[str, Any] = {
    "int": 0,
    "long": 0,
    "float": 0.0,
    "double": 0.0,
    "decimal": Decimal("0"),
    "bool": False,
    "datetime": datetime.min,
    "date": date.min,
    "time": time.min,
    "uuid": UUID(int=0),
}

# Python type -> primitive name (exact type match)
_PYTHON_TYPE_NAMES: dict[Any, str] = {
    str: "string",
    bool: "bool",
    int: "int",
    float: "double",
    Decimal: "decimal",
    datetime: "datetime",
    date: "date",
    time: "time",
    UUID: "uuid",
    bytes: "bytes",
    bytearray: "bytes",
    object: "object",
}

# Spellings accepted in textual type descriptions
_TYPE_ALIASES: dict[str, str] = {
    "str": "string",
    "integer": "int",
    "boolean": "bool",
    "number": "double",
    "Decimal": "decimal",
    "DateTime": "datetime",
    "DateOnly": "date",
    "TimeOnly": "time",
    "UUID": "uuid",
    "Guid": "uuid",
    "Any": "object",
    "any": "object",
}

_LIST_NAMES = {"list", "List", "Sequence", "IEnumerable", "tuple", "set", "array"}
_DICT_NAMES = {"dict", "Dict", "Mapping", "Dictionary", "map"}
_GENERIC_PATTERN = re.compile(r"^([A-Za-z_][\w]*)\[(.*)\]$")
_NAMED_PATTERN = re.compile(r"^[A-Za-z_][\w]*(\.[A-Za-z_][\w]*)*$")


@dataclass(frozen=True)
class TypeRef:
    """A resolved type descriptor."""

    kind: TypeKind = TypeKind.PRIMITIVE
    name: str = "object"

    # For list/dict types
    type_args: tuple[TypeRef, ...] = ()

    is_nullable: bool = False

    # Python class behind a NAMED type, when known
    target: Any = field(default=None, compare=False, repr=False)

    @staticmethod
    def primitive(name: str) -> TypeRef:
        name = _TYPE_ALIASES.get(name, name)
        if name not in PRIMITIVE_PYTHON_TYPES:
            raise ValueError(f"Unknown primitive type: {name}")
        return TypeRef(kind=TypeKind.PRIMITIVE, name=name)

    @staticmethod
    def named(target: Any) -> TypeRef:
        if isinstance(target, str):
            return TypeRef(kind=TypeKind.NAMED, name=target)
        return TypeRef(kind=TypeKind.NAMED, name=target.__name__, target=target)

    @staticmethod
    def list_of(item: TypeRef) -> TypeRef:
        return TypeRef(kind=TypeKind.LIST, name="list", type_args=(item,))

    @staticmethod
    def dict_of(key: TypeRef, value: TypeRef) -> TypeRef:
        return TypeRef(kind=TypeKind.DICT, name="dict", type_args=(key, value))

    @staticmethod
    def any() -> TypeRef:
        return TypeRef(kind=TypeKind.PRIMITIVE, name="object")

    def as_nullable(self) -> TypeRef:
        return dataclasses.replace(self, is_nullable=True)

    @property
    def is_value_kind(self) -> bool:
        """Whether the type has a zero value (numbers, bool, dates, uuid)."""
        return self.kind == TypeKind.PRIMITIVE and self.name in ZERO_VALUES

    @property
    def requires_init(self) -> bool:
        """Reference-typed and not nullable: callers must initialize it."""
        return not self.is_nullable and not self.is_value_kind

    def zero_value(self) -> Any:
        """Zero value of the type, None for nullable and reference types."""
        if self.is_nullable:
            return None
        return ZERO_VALUES.get(self.name) if self.kind == TypeKind.PRIMITIVE else None

    def to_annotation(self) -> Any:
        """Python annotation for this descriptor."""
        if self.kind == TypeKind.PRIMITIVE:
            result = PRIMITIVE_PYTHON_TYPES[self.name]
        elif self.kind == TypeKind.NAMED:
            result = self.target if self.target is not None else typing.ForwardRef(self.name)
        elif self.kind == TypeKind.LIST:
            result = list[self.type_args[0].to_annotation()]
        else:
            key, value = self.type_args
            result = dict[key.to_annotation(), value.to_annotation()]

        if self.is_nullable:
            return typing.Optional[result]
        return result

    def __str__(self) -> str:
        if self.kind == TypeKind.LIST:
            text = f"list[{self.type_args[0]}]"
        elif self.kind == TypeKind.DICT:
            text = f"dict[{self.type_args[0]}, {self.type_args[1]}]"
        else:
            text = self.name
        return f"{text}?" if self.is_nullable else text


def type_ref_from_annotation(annotation: Any) -> TypeRef:
    """
    Build a TypeRef from a Python annotation.

    Args:
        annotation: A class, typing construct, or string forward reference

    Returns:
        The matching TypeRef; unknown constructs map to object
    """
    if isinstance(annotation, TypeRef):
        return annotation

    if annotation is None or annotation is type(None):
        return TypeRef.any().as_nullable()

    if isinstance(annotation, str):
        return parse_type_ref(annotation)

    if isinstance(annotation, typing.ForwardRef):
        return parse_type_ref(annotation.__forward_arg__)

    if annotation is Any:
        return TypeRef.any()

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Annotated:
        return type_ref_from_annotation(args[0])

    if origin in (typing.Union, types.UnionType):
        non_null = [a for a in args if a is not type(None)]
        inner = type_ref_from_annotation(non_null[0]) if len(non_null) == 1 else TypeRef.any()
        return inner.as_nullable() if len(non_null) != len(args) else inner

    if origin is typing.Literal:
        return type_ref_from_value(args[0]) if args else TypeRef.any()

    if origin in (list, tuple, set, frozenset, collections.abc.Sequence, collections.abc.Iterable, collections.abc.Set):
        item_args = [a for a in args if a is not Ellipsis]
        item = type_ref_from_annotation(item_args[0]) if item_args else TypeRef.any()
        return TypeRef.list_of(item)

    if origin in (dict, collections.abc.Mapping, collections.abc.MutableMapping):
        if len(args) == 2:
            return TypeRef.dict_of(type_ref_from_annotation(args[0]), type_ref_from_annotation(args[1]))
        return TypeRef.dict_of(TypeRef.any(), TypeRef.any())

    if isinstance(annotation, type):
        if annotation in _PYTHON_TYPE_NAMES:
            return TypeRef.primitive(_PYTHON_TYPE_NAMES[annotation])
        if annotation in (list, tuple, set, frozenset):
            return TypeRef.list_of(TypeRef.any())
        if annotation is dict:
            return TypeRef.dict_of(TypeRef.any(), TypeRef.any())
        return TypeRef.named(annotation)

    return TypeRef.any()


def type_ref_from_value(value: Any) -> TypeRef:
    """
    Infer a TypeRef from a literal value.

    Args:
        value: A value taken from an object literal or projection row

    Returns:
        The inferred TypeRef; None infers a nullable object
    """
    if value is None:
        return TypeRef.any().as_nullable()

    # bool is a subclass of int and datetime of date: check them first
    if isinstance(value, bool):
        return TypeRef.primitive("bool")
    if isinstance(value, datetime):
        return TypeRef.primitive("datetime")
    if isinstance(value, Enum):
        return TypeRef.named(type(value))

    for python_type, name in _PYTHON_TYPE_NAMES.items():
        if python_type is not object and isinstance(value, python_type):
            return TypeRef.primitive(name)

    if isinstance(value, collections.abc.Mapping):
        for key, item in value.items():
            return TypeRef.dict_of(type_ref_from_value(key), type_ref_from_value(item))
        return TypeRef.dict_of(TypeRef.any(), TypeRef.any())

    if isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            return TypeRef.list_of(type_ref_from_value(item))
        return TypeRef.list_of(TypeRef.any())

    return TypeRef.named(type(value))


def parse_type_ref(text: str) -> TypeRef:
    """
    Parse a textual type description.

    Accepted forms: ``string``, ``int?``, ``decimal | None``,
    ``Optional[int]``, ``list[string]``, ``string[]``,
    ``dict[string, int]`` and named types such as ``Address``.

    Args:
        text: The type text

    Returns:
        The parsed TypeRef

    Raises:
        ValueError: If the text is not a type description
    """
    text = text.strip()
    if not text:
        raise ValueError("Empty type description")

    if text.endswith("?"):
        return parse_type_ref(text[:-1]).as_nullable()
    if text.endswith("| None"):
        return parse_type_ref(text[: -len("| None")]).as_nullable()
    if text.startswith("None |"):
        return parse_type_ref(text[len("None |") :]).as_nullable()
    if text.endswith("[]"):
        return TypeRef.list_of(parse_type_ref(text[:-2]))

    match = _GENERIC_PATTERN.match(text)
    if match:
        base, inner = match.group(1), match.group(2)
        parts = _split_top_level(inner)
        if base == "Optional" and len(parts) == 1:
            return parse_type_ref(parts[0]).as_nullable()
        if base in _LIST_NAMES:
            return TypeRef.list_of(parse_type_ref(parts[0]) if parts and parts[0] != "..." else TypeRef.any())
        if base in _DICT_NAMES and len(parts) == 2:
            return TypeRef.dict_of(parse_type_ref(parts[0]), parse_type_ref(parts[1]))
        raise ValueError(f"Unsupported generic type: {text}")

    name = _TYPE_ALIASES.get(text, text)
    if name in PRIMITIVE_PYTHON_TYPES:
        return TypeRef.primitive(name)
    if name in _LIST_NAMES:
        return TypeRef.list_of(TypeRef.any())
    if name in _DICT_NAMES:
        return TypeRef.dict_of(TypeRef.any(), TypeRef.any())
    if _NAMED_PATTERN.match(name):
        return TypeRef.named(name)

    raise ValueError(f"Invalid type description: {text}")


def coerce_type_ref(value: Any) -> TypeRef:
    """Accept a TypeRef, a type description string, or a Python annotation."""
    if isinstance(value, TypeRef):
        return value
    if isinstance(value, str):
        return parse_type_ref(value)
    return type_ref_from_annotation(value)


def _split_top_level(text: str) -> list[str]:
    """Split on commas that are not nested inside brackets."""
    parts = []
    depth = 0
    current = ""
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        parts.append(current.strip())
    return parts
