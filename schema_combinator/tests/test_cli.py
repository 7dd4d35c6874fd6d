"""
Tests for the schema_combinator command.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from schema_combinator.schema_combinator import schema_combinator

TEST_DATA_DIR = Path(__file__).parent / "test_data"
DESCRIPTION = str(TEST_DATA_DIR / "customer_card.json")


@pytest.fixture
def runner():
    return CliRunner()


def test_writes_python_file(runner, tmp_path):
    result = runner.invoke(schema_combinator, [DESCRIPTION, str(tmp_path)])

    assert result.exit_code == 0, result.output
    path = tmp_path / "CustomerCard.py"
    assert result.output.strip() == str(path)

    content = path.read_text()
    assert content.startswith("# Generated by schema_combinator v")
    assert "customer_card.json" in content.splitlines()[0]
    assert "@dataclass(eq=False, kw_only=True)" in content
    assert "password" not in content
    assert "    age: int | None = None" in content
    assert "def from_both(first: Any, second: Any) -> CustomerCard:" in content


def test_writes_csharp_file(runner, tmp_path):
    result = runner.invoke(schema_combinator, ["--language", "cs", DESCRIPTION, str(tmp_path)])

    assert result.exit_code == 0, result.output
    content = (tmp_path / "CustomerCard.cs").read_text()
    assert "namespace Crm" in content
    assert "public partial class CustomerCard" in content
    assert "--language cs" in content.splitlines()[0]


def test_existing_file_requires_force(runner, tmp_path):
    (tmp_path / "CustomerCard.py").write_text("existing content")

    result = runner.invoke(schema_combinator, [DESCRIPTION, str(tmp_path)])
    assert result.exit_code != 0
    assert "already exists" in result.output
    assert (tmp_path / "CustomerCard.py").read_text() == "existing content"

    result = runner.invoke(schema_combinator, ["--force", DESCRIPTION, str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "class CustomerCard:" in (tmp_path / "CustomerCard.py").read_text()


def test_config_file(runner, tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"add_generation_comment": False, "use_future_annotations": False}))
    out_dir = tmp_path / "out"

    result = runner.invoke(schema_combinator, ["--config", str(config_path), DESCRIPTION, str(out_dir)])

    assert result.exit_code == 0, result.output
    content = (out_dir / "CustomerCard.py").read_text()
    assert "Generated by" not in content
    assert "from __future__" not in content


def test_invalid_description(runner, tmp_path):
    description = tmp_path / "bad.json"
    description.write_text(json.dumps({"directives": [{"op": "bogus"}]}))

    result = runner.invoke(schema_combinator, [str(description), str(tmp_path / "out")])

    assert result.exit_code != 0
    assert "Invalid directive 0" in result.output


def test_invalid_target_name(runner, tmp_path):
    description = tmp_path / "bad_name.json"
    description.write_text(json.dumps({"name": "not a name"}))

    result = runner.invoke(schema_combinator, [str(description), str(tmp_path / "out")])

    assert result.exit_code != 0
    assert "Error:" in result.output


def test_unknown_language(runner, tmp_path):
    result = runner.invoke(schema_combinator, ["--language", "rust", DESCRIPTION, str(tmp_path)])
    assert result.exit_code == 2


if __name__ == "__main__":
    pytest.main([__file__])
