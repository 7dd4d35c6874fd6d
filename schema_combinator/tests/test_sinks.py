"""
Tests for emission sinks: the artifact registry, the atomic writer and the
source file sink.
"""

import tempfile
import threading
from pathlib import Path

import pytest

from schema_combinator.pipeline import (
    ArtifactRegistry,
    ArtifactWriteError,
    AtomicWriter,
    CombinatorConfig,
    OutputMode,
    SourceFileSink,
    TypeCombiner,
)


def make_artifact(name="Person", *fields):
    builder = TypeCombiner.anonymous().with_name(name, "Tests")
    for field_name in fields or ("name",):
        builder.add(field_name, "string")
    return builder.generate(ArtifactRegistry())


class TestArtifactRegistry:
    """Tests for ArtifactRegistry."""

    def test_register_and_get(self):
        registry = ArtifactRegistry()
        artifact = make_artifact()

        registry.register(artifact.qualified_name, artifact)

        assert registry.get("Tests.Person") is artifact
        assert "Tests.Person" in registry
        assert len(registry) == 1
        assert registry.names() == ["Tests.Person"]

    def test_last_registration_wins(self):
        """Re-registering a name replaces the earlier artifact."""
        registry = ArtifactRegistry()
        first = make_artifact("Person", "name")
        second = make_artifact("Person", "name", "age")

        registry.register("Tests.Person", first)
        registry.register("Tests.Person", second)

        assert registry.get("Tests.Person") is second
        assert len(registry) == 1

    def test_get_missing_returns_none(self):
        assert ArtifactRegistry().get("Nope") is None

    def test_clear(self):
        registry = ArtifactRegistry()
        registry.register("Tests.Person", make_artifact())
        registry.clear()
        assert len(registry) == 0

    def test_concurrent_registration(self):
        """Registrations from several threads all land in the registry."""
        registry = ArtifactRegistry()
        artifacts = [make_artifact(f"Type{i}") for i in range(16)]

        threads = [threading.Thread(target=registry.register, args=(a.qualified_name, a)) for a in artifacts]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(registry.names()) == sorted(a.qualified_name for a in artifacts)


class TestAtomicWriter:
    """Tests for AtomicWriter."""

    def test_write_creates_file(self):
        """Test that write creates a new file."""
        writer = AtomicWriter()

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / "output.py"
            code = "class Person:\n    pass\n"
            writer.write(path, code, "python")

            assert path.read_text() == code

    def test_write_if_not_exists_raises_on_existing(self):
        """Test that write_if_not_exists raises if file exists."""
        writer = AtomicWriter()

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "existing.py"
            path.write_text("existing content")

            with pytest.raises(ArtifactWriteError, match="already exists"):
                writer.write_if_not_exists(path, "new content", "python", validate=False)
            assert path.read_text() == "existing content"

    def test_write_validates_python(self):
        """A failed validation leaves neither the target nor a temporary file."""
        writer = AtomicWriter()

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "output.py"

            with pytest.raises(ArtifactWriteError):
                writer.write(path, "class Broken(", "python")

            assert not path.exists()
            assert list(Path(tmpdir).iterdir()) == []

    def test_write_validates_csharp(self):
        writer = AtomicWriter()

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "Output.cs"

            with pytest.raises(ArtifactWriteError, match="unbalanced braces"):
                writer.write(path, "namespace X\n{\n    public partial record R\n    {\n}\n", "cs")
            with pytest.raises(ArtifactWriteError, match="namespace"):
                writer.write(path, "public partial record R;\n", "cs")

            assert not path.exists()

    def test_write_without_validation(self):
        """Test that write works without validation."""
        writer = AtomicWriter()

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "output.py"
            code = "not really python code"

            writer.write(path, code, "python", validate=False)

            assert path.read_text() == code

    def test_custom_validator(self):
        calls = []
        writer = AtomicWriter(validate_python=calls.append)

        with tempfile.TemporaryDirectory() as tmpdir:
            writer.write(Path(tmpdir) / "output.py", "x = 1\n", "python")

        assert calls == ["x = 1\n"]


class TestSourceFileSink:
    """Tests for SourceFileSink."""

    def test_writes_python_file(self):
        artifact = make_artifact()

        with tempfile.TemporaryDirectory() as tmpdir:
            path = SourceFileSink(tmpdir).register(artifact.qualified_name, artifact)

            assert path == Path(tmpdir) / "Person.py"
            assert "class Person:" in path.read_text()

    def test_writes_csharp_file(self):
        artifact = make_artifact()

        with tempfile.TemporaryDirectory() as tmpdir:
            path = SourceFileSink(tmpdir, language="cs").register(artifact.qualified_name, artifact)

            assert path.name == "Person.cs"
            assert "namespace Tests" in path.read_text()

    def test_error_if_exists(self):
        """Test that default mode raises error if file exists."""
        artifact = make_artifact()

        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "Person.py").write_text("existing content")

            with pytest.raises(ArtifactWriteError):
                SourceFileSink(tmpdir).register(artifact.qualified_name, artifact)

    def test_force_overwrites(self):
        """Test that force mode overwrites an existing file."""
        config = CombinatorConfig()
        config.output.mode = OutputMode.FORCE
        artifact = make_artifact()

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "Person.py"
            path.write_text("old content")

            SourceFileSink(tmpdir, config=config).register(artifact.qualified_name, artifact)

            assert "class Person:" in path.read_text()

    def test_reregistration_replaces_own_file(self):
        """The same sink may re-register a type without force mode."""
        first = make_artifact("Person", "name")
        second = make_artifact("Person", "name", "age")

        with tempfile.TemporaryDirectory() as tmpdir:
            sink = SourceFileSink(tmpdir)
            sink.register(first.qualified_name, first)
            path = sink.register(second.qualified_name, second)

            assert "age: str" in path.read_text()
            assert sink.written == {"Tests.Person": path}

    def test_plain_write(self):
        config = CombinatorConfig()
        config.output.atomic_write = False
        artifact = make_artifact()

        with tempfile.TemporaryDirectory() as tmpdir:
            path = SourceFileSink(tmpdir, config=config).register(artifact.qualified_name, artifact)

            assert "class Person:" in path.read_text()

            with pytest.raises(ArtifactWriteError):
                SourceFileSink(tmpdir, config=config).register(artifact.qualified_name, artifact)

    def test_builder_generate_into_file_sink(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            sink = SourceFileSink(tmpdir)
            TypeCombiner.anonymous().with_name("Note").add("text", "string?").generate(sink)

            assert (Path(tmpdir) / "Note.py").exists()


if __name__ == "__main__":
    pytest.main([__file__])
