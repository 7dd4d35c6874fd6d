#!/usr/bin/env python3

import pytest

from schema_combinator.cli_utils import reconstruct_command_line
from schema_combinator.schema_combinator import schema_combinator


class TestCliUtils:
    """Test cases for CLI utilities"""

    def test_reconstruct_command_line_without_context(self):
        """Without an active Click context only the command name is returned"""
        assert reconstruct_command_line(schema_combinator) == "schema_combinator"

    def test_reconstruct_command_line_with_context(self, tmp_path):
        """Arguments come first, then non-default options; flags carry no value"""
        description = tmp_path / "card.json"
        description.write_text("{}")
        params = {
            "language": "cs",
            "config": None,
            "force": True,
            "verbose": False,
            "description": str(description),
            "output_dir": "generated",
        }

        with schema_combinator.make_context("schema_combinator", [str(description), "generated"]) as ctx:
            ctx.params = params
            result = reconstruct_command_line(schema_combinator)

        assert result == "schema_combinator card.json generated --language cs --force"


if __name__ == "__main__":
    pytest.main([__file__])
