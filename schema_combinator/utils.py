"""
Utility functions for the schema combinator.
"""

import keyword
import re

# Regex pattern to split text into words, handling camelCase boundaries
_WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[a-z]+|[A-Z][a-z]*|[0-9]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, dots) to spaces."""
    return text.replace("_", " ").replace("-", " ").replace(".", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(_normalize_separators(text))


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "actionTemplate" -> "ActionTemplate"
        "first 3 rows" -> "First3Rows"

    Args:
        text: The text to convert

    Returns:
        PascalCase string
    """
    if not text:
        return ""
    return "".join(word.capitalize() for word in _split_into_words(text) if word)


def pascal_to_snake_case(text: str) -> str:
    """Convert PascalCase or camelCase text to snake_case.

    Examples:
        "PersonalInfo" -> "personal_info"
        "HTTPRequest" -> "http_request"
        "order_line" -> "order_line"

    Args:
        text: The text to convert

    Returns:
        snake_case string
    """
    if not text:
        return ""
    return "_".join(word.lower() for word in _split_into_words(text) if word)


def is_valid_identifier(name: str) -> bool:
    """Check that a name can be used as a generated type or field name."""
    return isinstance(name, str) and name.isidentifier() and not keyword.iskeyword(name)


def is_dunder(name: str) -> bool:
    """Check for reserved double-underscore names."""
    return name.startswith("__") and name.endswith("__")
