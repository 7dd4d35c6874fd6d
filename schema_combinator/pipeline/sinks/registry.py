"""
Artifact registry.

In-process emission sink keyed by qualified name.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from ..analyzer.ir_nodes import OutputArtifact

logger = logging.getLogger(__name__)


class EmissionSink(Protocol):
    """Destination of emitted artifacts."""

    def register(self, qualified_name: str, artifact: OutputArtifact) -> object: ...


class ArtifactRegistry:
    """Thread-safe store of emitted artifacts.

    Registering a name that is already present replaces the stored
    artifact: the last registration wins.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._artifacts: dict[str, OutputArtifact] = {}

    def register(self, qualified_name: str, artifact: OutputArtifact) -> None:
        """
        Store an artifact under its qualified name.

        Args:
            qualified_name: Namespace-qualified type name
            artifact: The artifact to store
        """
        with self._lock:
            replaced = qualified_name in self._artifacts
            self._artifacts[qualified_name] = artifact
        logger.debug("%s %s", "Replaced" if replaced else "Registered", qualified_name)

    def get(self, qualified_name: str) -> OutputArtifact | None:
        with self._lock:
            return self._artifacts.get(qualified_name)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._artifacts)

    def clear(self) -> None:
        with self._lock:
            self._artifacts.clear()

    def __contains__(self, qualified_name: object) -> bool:
        with self._lock:
            return qualified_name in self._artifacts

    def __len__(self) -> int:
        with self._lock:
            return len(self._artifacts)


# Process-wide registry used when no sink is given
default_registry = ArtifactRegistry()
