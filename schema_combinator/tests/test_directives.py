import dataclasses

import pytest

from schema_combinator.pipeline import (
    AddProperty,
    AddSource,
    DirectiveLog,
    ExcludeProperty,
    RetypeProperty,
    SetName,
    SourceKind,
    TypeRef,
)


class TestDirectiveLog:
    def test_append_keeps_order_and_returns_log(self):
        log = DirectiveLog()
        result = log.append(ExcludeProperty("a")).append(SetName("Target"))

        assert result is log
        assert list(log) == [ExcludeProperty("a"), SetName("Target")]
        assert len(log) == 2

    def test_append_does_not_validate(self):
        log = DirectiveLog()
        log.append(RetypeProperty("ghost", TypeRef.primitive("int")))
        log.append(ExcludeProperty(""))

        assert len(log) == 2

    def test_snapshot_is_immutable_view(self):
        log = DirectiveLog([ExcludeProperty("a")])
        snapshot = log.snapshot()
        log.append(ExcludeProperty("b"))

        assert isinstance(snapshot, tuple)
        assert snapshot == (ExcludeProperty("a"),)
        assert len(log) == 2

    def test_sources(self):
        class Person:
            name: str

        source = AddSource(Person, SourceKind.NAMED, "Person")
        log = DirectiveLog([ExcludeProperty("a"), source, AddSource({"x": 1}, SourceKind.LITERAL, "literal:2")])

        assert [d.source_id for d in log.sources()] == ["Person", "literal:2"]
        assert log.sources()[0].is_named
        assert not log.sources()[1].is_named


class TestDirectives:
    def test_directives_are_frozen(self):
        directive = ExcludeProperty("a")
        with pytest.raises(dataclasses.FrozenInstanceError):
            directive.name = "b"

    def test_add_property_equality_includes_default(self):
        int_ref = TypeRef.primitive("int")
        assert AddProperty("a", int_ref, 1, True) == AddProperty("a", int_ref, 1, True)
        assert AddProperty("a", int_ref, 1, True) != AddProperty("a", int_ref, 2, True)
        assert AddProperty("a", int_ref) != AddProperty("a", int_ref, None, True)

    def test_add_property_with_unhashable_default_is_hashable(self):
        directive = AddProperty("tags", TypeRef.list_of(TypeRef.primitive("string")), ["a"], True)
        assert hash(directive) == hash(AddProperty("tags", TypeRef.list_of(TypeRef.primitive("string")), ["b"], True))

    def test_add_source_compares_by_id(self):
        assert AddSource({"a": 1}, SourceKind.LITERAL, "x") == AddSource({"b": 2}, SourceKind.LITERAL, "x")


if __name__ == "__main__":
    pytest.main([__file__])
