"""
Source file sink.

Renders registered artifacts with a source backend and writes one file per
type into an output directory.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..analyzer.ir_nodes import OutputArtifact
from ..backends import get_backend
from ..config import CombinatorConfig, OutputMode
from ..errors import ArtifactWriteError
from .atomic_writer import AtomicWriter

logger = logging.getLogger(__name__)


class SourceFileSink:
    """Emission sink writing ``<Name>.<ext>`` files."""

    def __init__(
        self,
        output_dir: str | Path,
        language: str = "python",
        config: CombinatorConfig | None = None,
        command_line: str | None = None,
    ):
        """
        Args:
            output_dir: Directory receiving the rendered files
            language: "python" or "cs"
            config: Combinator configuration; its output section selects the write mode
            command_line: Optional command line recorded in the generation comment
        """
        self.output_dir = Path(output_dir)
        self.language = language
        self.config = config or CombinatorConfig()
        self.command_line = command_line
        self.backend = get_backend(language, self.config)
        self.writer = AtomicWriter()
        self.written: dict[str, Path] = {}

    def register(self, qualified_name: str, artifact: OutputArtifact) -> Path:
        """
        Render and write an artifact.

        Args:
            qualified_name: Namespace-qualified type name
            artifact: The artifact to write

        Returns:
            Path of the written file

        Raises:
            ArtifactWriteError: If the file exists in error mode or fails validation
        """
        path = self.output_dir / self.backend.file_name(artifact)
        content = self.backend.render(artifact, self.command_line)
        output = self.config.output

        # A type re-registered within this sink replaces its own earlier file
        overwrite = output.mode == OutputMode.FORCE or self.written.get(qualified_name) == path
        if not output.atomic_write:
            self._write_plain(path, content, overwrite)
        elif overwrite:
            self.writer.write(path, content, self.language, output.validate_before_write)
        else:
            self.writer.write_if_not_exists(path, content, self.language, output.validate_before_write)

        self.written[qualified_name] = path
        logger.info("Wrote %s to %s", qualified_name, path)
        return path

    def _write_plain(self, path: Path, content: str, overwrite: bool) -> None:
        if not overwrite and path.exists():
            raise ArtifactWriteError(f"Output file already exists: {path}. Use force mode to overwrite.")
        if self.config.output.validate_before_write:
            self.writer.validate(content, self.language)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
