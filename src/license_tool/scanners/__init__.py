"""Dependency graph scanners.

This module provides scanners that extract raw package metadata from
different descriptions of a project's dependency graph.
"""

from collections.abc import Sequence
from pathlib import Path

from license_tool.scanners.base import BaseScanner
from license_tool.scanners.cargo import CargoMetadataScanner
from license_tool.scanners.environment import EnvironmentScanner
from license_tool.scanners.graph import GraphFileScanner

__all__ = [
    "BaseScanner",
    "CargoMetadataScanner",
    "EnvironmentScanner",
    "GraphFileScanner",
    "get_scanner",
]

# Registry of available scanners in priority order
_SCANNERS: list[type[BaseScanner]] = [
    EnvironmentScanner,
    CargoMetadataScanner,
    GraphFileScanner,
]


def get_scanner(
    path: Path, features: Sequence[str] = (), all_features: bool = False
) -> BaseScanner:
    """Get the appropriate scanner for a given file path.

    Args:
        path: Path to the manifest or graph file.
        features: Feature names selecting optional dependencies.
        all_features: Select every optional dependency group.

    Returns:
        Scanner instance configured for the given file.

    Raises:
        ValueError: If no scanner can handle the given file.
    """
    for scanner_cls in _SCANNERS:
        if scanner_cls.can_handle(path):
            return scanner_cls(path, features=features, all_features=all_features)

    raise ValueError(
        f"No scanner available for '{path.name}'. "
        f"Supported files: pyproject.toml, cargo metadata JSON, dependency graph JSON"
    )
