"""
Configuration for the schema combinator pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OutputShape(str, Enum):
    """Shape of the synthesized aggregate type.

    The values match the keywords used by the C# backend.
    """

    IMMUTABLE = "record"  # positional init, no setters, structural equality
    MUTABLE = "class"  # settable members, identity equality
    BY_VALUE = "struct"  # settable members, copy semantics


class OutputMode(str, Enum):
    """Output mode for file emission.

    Controls behavior when the output file already exists.
    """

    ERROR_IF_EXISTS = "error"  # Default: raise error if file exists
    FORCE = "force"  # Overwrite the existing file


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        validate_before_write: Whether to validate code before writing
        atomic_write: Whether to use atomic file writes
    """

    mode: OutputMode = OutputMode.ERROR_IF_EXISTS
    validate_before_write: bool = True
    atomic_write: bool = True


@dataclass
class CombinatorConfig:
    """Configuration options for type synthesis and rendering."""

    # Namespace used when no SetName directive supplies one
    default_namespace: str = "Generated"

    # Shape used when no SetOutputShape directive is present
    default_shape: OutputShape = OutputShape.IMMUTABLE

    # Add generation comment at top of rendered files
    add_generation_comment: bool = True

    # Use from __future__ import annotations in rendered Python
    use_future_annotations: bool = True

    # Extra using statements for rendered C#
    csharp_additional_usings: list[str] = field(default_factory=list)

    # Output configuration for file sinks
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> CombinatorConfig:
        """Create a config from a dictionary."""
        config = CombinatorConfig()
        for k, v in d.items():
            if k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.ERROR_IF_EXISTS)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    validate_before_write=v.get("validate_before_write", True),
                    atomic_write=v.get("atomic_write", True),
                )
            elif k == "default_shape":
                config.default_shape = OutputShape(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "default_namespace": self.default_namespace,
            "default_shape": self.default_shape.value,
            "add_generation_comment": self.add_generation_comment,
            "use_future_annotations": self.use_future_annotations,
            "csharp_additional_usings": self.csharp_additional_usings,
            "output": {
                "mode": self.output.mode.value,
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }
