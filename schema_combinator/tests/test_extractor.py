from dataclasses import dataclass, field
from decimal import Decimal
from typing import ClassVar, NamedTuple

import pytest

from schema_combinator.pipeline import (
    AddSource,
    DeclaredSchema,
    ExtractionError,
    Schema,
    SchemaExtractor,
    SourceKind,
    TypeRef,
)


@dataclass
class Customer:
    id: int
    name: str
    email: str | None = None
    tags: list[str] = field(default_factory=list)
    _secret: str = ""


class Base:
    id: int


class Employee(Base):
    name: str
    registry: ClassVar[dict] = {}
    _cache: dict

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def _hidden(self) -> int:
        return 0


class Row(NamedTuple):
    sku: str
    price: Decimal


class Plain:
    def __init__(self):
        self.title = "x"
        self.count = 3
        self._private = True


def extract(source, kind, source_id="src"):
    return SchemaExtractor().extract(AddSource(source, kind, source_id))


def as_pairs(schema):
    return [(p.name, str(p.type_ref)) for p in schema]


class TestNamedSources:
    def test_dataclass_fields_in_declaration_order(self):
        schema = extract(Customer, SourceKind.NAMED)
        assert as_pairs(schema) == [("id", "int"), ("name", "string"), ("email", "string?"), ("tags", "list[string]")]

    def test_annotations_across_mro_and_properties(self):
        schema = extract(Employee, SourceKind.NAMED)
        assert as_pairs(schema) == [("id", "int"), ("name", "string"), ("display_name", "string")]

    def test_unresolvable_forward_reference_becomes_named(self):
        class Order:
            customer: "MissingType"
            total: "Decimal"

        schema = extract(Order, SourceKind.NAMED)
        assert schema.get("customer").type_ref == TypeRef.named("MissingType")
        assert schema.get("total").type_ref == TypeRef.primitive("decimal")

    def test_non_class_raises(self):
        with pytest.raises(ExtractionError) as excinfo:
            extract(Customer(1, "a"), SourceKind.NAMED, "bad")
        assert excinfo.value.source_id == "bad"

    def test_declared_schema_returned_verbatim(self):
        declared = DeclaredSchema("Point", Schema.from_pairs([("x", TypeRef.primitive("double"))]))
        assert extract(declared, SourceKind.NAMED) is declared.schema

    def test_extract_source_records_type_name(self):
        source = SchemaExtractor().extract_source(AddSource(Customer, SourceKind.NAMED, "c"))
        assert source.type_name == "Customer"
        assert source.target is Customer
        assert source.is_named


class TestLiteralSources:
    def test_mapping_in_insertion_order(self):
        schema = extract({"b": 1, "a": "x", "c": None}, SourceKind.LITERAL)
        assert as_pairs(schema) == [("b", "int"), ("a", "string"), ("c", "object?")]

    def test_dataclass_instance_uses_annotations(self):
        schema = extract(Customer(1, "a"), SourceKind.LITERAL)
        assert schema.names() == ["id", "name", "email", "tags"]
        assert schema.get("email").type_ref == TypeRef.primitive("string").as_nullable()

    def test_named_tuple(self):
        schema = extract(Row("a", Decimal("1")), SourceKind.LITERAL)
        assert as_pairs(schema) == [("sku", "string"), ("price", "decimal")]

    def test_plain_object_skips_private(self):
        schema = extract(Plain(), SourceKind.LITERAL)
        assert as_pairs(schema) == [("title", "string"), ("count", "int")]

    @pytest.mark.parametrize("value", [None, 42, "text", b"raw", 1.5, Customer])
    def test_non_objects_raise(self, value):
        with pytest.raises(ExtractionError):
            extract(value, SourceKind.LITERAL)

    def test_non_string_keys_raise(self):
        with pytest.raises(ExtractionError):
            extract({1: "a"}, SourceKind.LITERAL)


class TestCollectionSources:
    def test_first_element_only(self):
        rows = [{"id": 1, "name": "a"}, {"other": True}]
        assert as_pairs(extract(rows, SourceKind.COLLECTION)) == [("id", "int"), ("name", "string")]

    def test_empty_collection_yields_empty_schema(self):
        schema = extract([], SourceKind.COLLECTION)
        assert len(schema) == 0

    def test_tuple_of_objects(self):
        schema = extract((Row("a", Decimal("1")),), SourceKind.COLLECTION)
        assert schema.names() == ["sku", "price"]

    @pytest.mark.parametrize("value", [None, 3, "abc", {"a": 1}])
    def test_non_collections_raise(self, value):
        with pytest.raises(ExtractionError):
            extract(value, SourceKind.COLLECTION)


if __name__ == "__main__":
    pytest.main([__file__])
