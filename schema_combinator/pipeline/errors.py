"""
Error types raised by the combinator pipeline.

Directives that reference a property that is not present (exclude,
conditional exclude, retype) are no-ops and never raise.
"""

from __future__ import annotations


class CombinatorError(Exception):
    """Base class for all schema combinator errors."""


class ExtractionError(CombinatorError):
    """Raised when a source cannot yield a schema.

    Fatal for the resolution that requested the source: no partial
    ResolvedSchema is ever produced.
    """

    def __init__(self, source_id: str, message: str):
        self.source_id = source_id
        self.message = message
        super().__init__(f"Cannot extract schema from source '{source_id}': {message}")


class NullInputError(CombinatorError, ValueError):
    """Raised when a generated converter is called with None."""

    def __init__(self, converter_name: str):
        self.converter_name = converter_name
        super().__init__(f"Converter '{converter_name}' received None")


class InvalidTargetError(CombinatorError):
    """Raised when the target type or one of its fields cannot be emitted.

    This can happen when:
    - No target name was supplied
    - The target name or namespace is not a valid identifier
    - A resolved property name is not a valid field name
    """


class DescriptionError(CombinatorError):
    """Raised when a JSON combination description is malformed."""


class ArtifactWriteError(CombinatorError):
    """Raised when a rendered artifact cannot be written.

    This can happen when:
    - The output file exists and the output mode forbids overwriting
    - The rendered source fails validation
    """
