"""
Source backends.

Contains language-specific renderers for emitted artifacts.
"""

from __future__ import annotations

from ..config import CombinatorConfig
from .base import SourceBackend
from .csharp_backend import CSharpBackend
from .python_backend import PythonBackend

BACKENDS: dict[str, type[SourceBackend]] = {
    "python": PythonBackend,
    "cs": CSharpBackend,
}


def get_backend(language: str, config: CombinatorConfig | None = None) -> SourceBackend:
    """
    Create the backend for a language.

    Args:
        language: "python" or "cs"
        config: Combinator configuration

    Returns:
        The backend instance

    Raises:
        ValueError: If the language is not supported
    """
    if language not in BACKENDS:
        raise ValueError(f"Unsupported language: {language}. Choose from {sorted(BACKENDS)}")
    return BACKENDS[language](config)


__all__ = [
    "BACKENDS",
    "CSharpBackend",
    "PythonBackend",
    "SourceBackend",
    "get_backend",
]
