"""Base interface for dependency graph scanners.

Scanners read a project's resolved dependency graph from some source
(the installed Python environment, ``cargo metadata`` output, a generic
JSON graph) and report the raw metadata of every distributed dependency.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from license_tool.models import RawPackageInfo

logger = logging.getLogger(__name__)


class BaseScanner(ABC):
    """Abstract base class for dependency graph scanners.

    Attributes:
        source_path: Path to the file describing the graph.
        features: Optional feature (extra) names to include.
        all_features: Include every optional feature.
    """

    def __init__(
        self,
        source_path: Optional[Path] = None,
        features: Sequence[str] = (),
        all_features: bool = False,
    ) -> None:
        """Initialize the scanner.

        Args:
            source_path: Path to the manifest or graph file.
            features: Feature names selecting optional dependencies.
            all_features: Select every optional dependency group.
        """
        self.source_path = source_path
        self.features = tuple(features)
        self.all_features = all_features

    @abstractmethod
    def scan(self) -> list[RawPackageInfo]:
        """Scan the source and extract raw package metadata.

        Returns:
            One RawPackageInfo per distributed dependency, sorted by identity.

        Raises:
            FileNotFoundError: If the source file does not exist.
            ValueError: If the source format is invalid.
        """
        ...

    @classmethod
    @abstractmethod
    def can_handle(cls, path: Path) -> bool:
        """Check if this scanner can handle the given file.

        Args:
            path: Path to check.

        Returns:
            True if this scanner can process the file, False otherwise.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return a human-readable name for this scanner's source type."""
        ...

    def _require_source(self) -> Path:
        if self.source_path is None:
            raise ValueError("source_path must be set before calling scan()")
        if not self.source_path.exists():
            raise FileNotFoundError(f"File not found: {self.source_path}")
        return self.source_path

    def _ignore_features(self) -> None:
        if self.features or self.all_features:
            logger.warning(
                "%s already reflects its feature selection; ignoring feature options",
                self.source_name,
            )
