"""
Tests for JSON combination descriptions.
"""

import json
import tempfile
from pathlib import Path

import pytest

from schema_combinator.pipeline import (
    AddProperty,
    AddSource,
    DescriptionError,
    EnableConverters,
    ExcludeProperty,
    ExcludePropertyIf,
    OutputShape,
    PipelineGenerator,
    RetypeProperty,
    SetName,
    SetOutputShape,
    SourceKind,
    TypeRef,
    load_description,
    load_description_file,
)
from schema_combinator.pipeline.description import parse_directive

TEST_DATA_DIR = Path(__file__).parent / "test_data"


class TestParseDirective:
    def test_source(self):
        directive = parse_directive({"op": "source", "id": "Customer", "properties": {"name": "string", "age": "int?"}})

        assert isinstance(directive, AddSource)
        assert directive.kind == SourceKind.NAMED
        assert directive.source_id == "declared:Customer"
        assert directive.source.name == "Customer"
        assert directive.source.schema.names() == ["name", "age"]
        assert directive.source.schema.get("age").type_ref == TypeRef.primitive("int").as_nullable()

    def test_literal_source(self):
        directive = parse_directive({"op": "source", "id": "extra", "named": False, "properties": {}})
        assert directive.kind == SourceKind.LITERAL

    def test_add_with_and_without_default(self):
        with_default = parse_directive({"op": "add", "name": "notes", "type": "string?", "default": None})
        without_default = parse_directive({"op": "add", "name": "notes", "type": "string?"})

        assert with_default == AddProperty("notes", TypeRef.primitive("string").as_nullable(), None, True)
        assert without_default.has_default is False

    @pytest.mark.parametrize(
        "entry,expected",
        [
            ({"op": "exclude", "name": "password"}, ExcludeProperty("password")),
            ({"op": "exclude_if", "name": "ssn", "condition": True}, ExcludePropertyIf("ssn", True)),
            ({"op": "retype", "name": "price", "type": "string"}, RetypeProperty("price", TypeRef.primitive("string"))),
            ({"op": "shape", "shape": "struct"}, SetOutputShape(OutputShape.BY_VALUE)),
            ({"op": "shape", "shape": "mutable"}, SetOutputShape(OutputShape.MUTABLE)),
            ({"op": "name", "name": "Card", "namespace": "Crm"}, SetName("Card", "Crm")),
            ({"op": "name", "name": "Card"}, SetName("Card", None)),
            ({"op": "converters"}, EnableConverters(True)),
            ({"op": "converters", "enabled": False}, EnableConverters(False)),
        ],
    )
    def test_simple_ops(self, entry, expected):
        assert parse_directive(entry) == expected

    @pytest.mark.parametrize(
        "entry,message",
        [
            ("exclude", "must be an object"),
            ({"name": "x"}, "'op'"),
            ({"op": "rename", "name": "x"}, "unknown op 'rename'"),
            ({"op": "exclude", "name": ""}, "'name'"),
            ({"op": "exclude_if", "name": "x", "condition": "yes"}, "'condition' must be a boolean"),
            ({"op": "shape", "shape": "tuple"}, "unknown shape"),
            ({"op": "shape", "shape": 3}, "shape must be a string"),
            ({"op": "add", "name": "x", "type": "9lives"}, "Invalid type description"),
            ({"op": "source", "id": "A", "properties": ["x"]}, "'properties'"),
            ({"op": "source", "id": "A", "properties": {"x": 1}}, "type of property 'x'"),
        ],
    )
    def test_invalid_directives(self, entry, message):
        with pytest.raises(ValueError, match=message):
            parse_directive(entry)


class TestLoadDescription:
    def test_header_applies_before_directives(self):
        log = load_description(
            {
                "name": "CustomerCard",
                "namespace": "Crm",
                "shape": "class",
                "converters": True,
                "directives": [{"op": "exclude", "name": "age"}],
            }
        )

        assert log.snapshot() == (
            SetName("CustomerCard", "Crm"),
            SetOutputShape(OutputShape.MUTABLE),
            EnableConverters(True),
            ExcludeProperty("age"),
        )

    def test_empty_description(self):
        assert len(load_description({})) == 0

    def test_not_an_object(self):
        with pytest.raises(DescriptionError, match="JSON object"):
            load_description([])

    def test_directives_not_a_list(self):
        with pytest.raises(DescriptionError, match="'directives' must be a list"):
            load_description({"directives": {}})

    def test_error_names_directive_index(self):
        with pytest.raises(DescriptionError, match="Invalid directive 1: unknown op"):
            load_description({"directives": [{"op": "exclude", "name": "a"}, {"op": "bogus"}]})

    def test_header_error(self):
        with pytest.raises(DescriptionError, match="Invalid description header"):
            load_description({"shape": "tuple"})


class TestDescriptionPipeline:
    def test_sources_sharing_an_id_both_contribute(self):
        log = load_description(
            {
                "name": "Joined",
                "directives": [
                    {"op": "source", "id": "Row", "properties": {"a": "int"}},
                    {"op": "source", "id": "Row", "properties": {"b": "string"}},
                ],
            }
        )

        assert PipelineGenerator(log).generate().fields.names() == ["a", "b"]

    def test_repeated_identical_source_is_one_source(self):
        source = {"op": "source", "id": "Row", "properties": {"a": "int"}}
        artifact = PipelineGenerator(load_description({"name": "Again", "directives": [source, source]})).generate()

        assert artifact.fields.names() == ["a"]
        assert len(artifact.sources) == 1

    def test_named_type_property(self):
        description = {
            "name": "Card",
            "namespace": "Crm",
            "directives": [{"op": "source", "id": "Customer", "properties": {"name": "string", "address": "Address"}}],
        }
        artifact = PipelineGenerator(load_description(description)).generate()

        assert artifact.type("Ada", {"city": "Paris"}).address == {"city": "Paris"}
        assert str(artifact.fields.get("address").type_ref) == "Address"


class TestLoadDescriptionFile:
    def test_sample_file(self):
        log = load_description_file(TEST_DATA_DIR / "customer_card.json")

        assert log.snapshot()[0] == SetName("CustomerCard", "Crm")
        assert [d.source_id for d in log.sources()] == ["declared:Customer", "declared:Address"]

    def test_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "broken.json"
            path.write_text("{not json")

            with pytest.raises(DescriptionError, match="not valid JSON"):
                load_description_file(path)

    def test_round_trip_through_file(self):
        description = {"name": "Tiny", "directives": [{"op": "add", "name": "x", "type": "int"}]}

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "tiny.json"
            path.write_text(json.dumps(description))

            assert load_description_file(path).snapshot() == load_description(description).snapshot()


if __name__ == "__main__":
    pytest.main([__file__])
