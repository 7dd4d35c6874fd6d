"""
Atomic file writer for rendered artifacts.

Ensures that file writes are atomic so an interrupted emission never
leaves a half-written source file behind.
"""

from __future__ import annotations

import ast
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import ArtifactWriteError

logger = logging.getLogger(__name__)

# Keywords that introduce a C# type declaration
CSHARP_TYPE_KEYWORDS = ("record ", "class ", "struct ")


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(
        self,
        validate_python: Callable[[str], None] | None = None,
        validate_csharp: Callable[[str], None] | None = None,
    ):
        """Initialize the atomic writer.

        Args:
            validate_python: Optional validation function for Python code
            validate_csharp: Optional validation function for C# code
        """
        self._validate_python = validate_python or self._default_validate_python
        self._validate_csharp = validate_csharp or self._default_validate_csharp

    def write(
        self,
        path: Path,
        content: str,
        language: str,
        validate: bool = True,
    ) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            language: Language for validation ("python" or "cs")
            validate: Whether to validate before finalizing

        Raises:
            ArtifactWriteError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate:
                self.validate(content, language)

            temp_path.replace(path)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise

        logger.debug("Wrote %s", path)

    def write_if_not_exists(
        self,
        path: Path,
        content: str,
        language: str,
        validate: bool = True,
    ) -> None:
        """Write content only if the file doesn't exist.

        Raises:
            ArtifactWriteError: If the file already exists or validation fails
        """
        if path.exists():
            raise ArtifactWriteError(f"Output file already exists: {path}. Use force mode to overwrite.")

        self.write(path, content, language, validate)

    def validate(self, content: str, language: str) -> None:
        """Validate content for a language; unknown languages are not checked."""
        if language == "python":
            self._validate_python(content)
        elif language == "cs":
            self._validate_csharp(content)

    def _default_validate_python(self, content: str) -> None:
        """Default Python validation.

        Raises:
            ArtifactWriteError: If the code does not parse
        """
        try:
            ast.parse(content)
        except SyntaxError as e:
            raise ArtifactWriteError(f"Generated Python code is not valid: {e}") from e

    def _default_validate_csharp(self, content: str) -> None:
        """Default C# validation.

        Structural checks only; there is no C# parser available.

        Raises:
            ArtifactWriteError: If a structural check fails
        """
        if "namespace " not in content:
            raise ArtifactWriteError("Generated C# code is missing namespace declaration")

        if not any(keyword in content for keyword in CSHARP_TYPE_KEYWORDS):
            raise ArtifactWriteError("Generated C# code has no type definitions")

        open_braces = content.count("{")
        close_braces = content.count("}")
        if open_braces != close_braces:
            raise ArtifactWriteError(f"Generated C# code has unbalanced braces: {open_braces} open, {close_braces} close")
