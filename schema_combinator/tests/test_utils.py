import logging

import pytest

from schema_combinator.logging_utils import configure_logging
from schema_combinator.utils import is_dunder, is_valid_identifier, pascal_to_snake_case, snake_to_pascal_case


@pytest.mark.parametrize(
    "text,expected",
    [
        ("first_name", "FirstName"),
        ("actionTemplate", "ActionTemplate"),
        ("first 3 rows", "First3Rows"),
        ("from_a_collection", "FromACollection"),
        ("", ""),
    ],
)
def test_snake_to_pascal_case(text, expected):
    assert snake_to_pascal_case(text) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Customer", "customer"),
        ("PersonalInfo", "personal_info"),
        ("HTTPRequest", "http_request"),
        ("order_line", "order_line"),
        ("", ""),
    ],
)
def test_pascal_to_snake_case(text, expected):
    assert pascal_to_snake_case(text) == expected


@pytest.mark.parametrize("name,valid", [("Card", True), ("_private", True), ("class", False), ("two words", False), ("3d", False), (None, False)])
def test_is_valid_identifier(name, valid):
    assert is_valid_identifier(name) is valid


def test_is_dunder():
    assert is_dunder("__init__")
    assert not is_dunder("_private")


class TestConfigureLogging:
    def test_levels(self):
        assert configure_logging(verbose=True).level == logging.DEBUG
        assert configure_logging().level == logging.WARNING

    def test_single_handler_after_repeated_calls(self):
        configure_logging()
        logger = configure_logging()
        assert len(logger.handlers) == 1
        assert logger.name == "schema_combinator"


if __name__ == "__main__":
    pytest.main([__file__])
