"""Scanner for ``cargo metadata`` output.

Reads the JSON written by ``cargo metadata --format-version 1`` and keeps
the crates that end up in a built artifact: everything reachable from the
root (or every workspace member) through normal dependencies. Build and
dev dependencies, and local path crates, are left out.
"""

import json
import logging
from pathlib import Path
from typing import Any

from license_tool.models import PackageIdentity, RawPackageInfo
from license_tool.scanners.base import BaseScanner

logger = logging.getLogger(__name__)


def _load_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e


def _is_normal_dependency(dep: dict[str, Any]) -> bool:
    # Cargo older than 1.41 does not report dependency kinds
    if "dep_kinds" not in dep:
        return True
    return any(kind.get("kind") in (None, "normal") for kind in dep["dep_kinds"])


class CargoMetadataScanner(BaseScanner):
    """Scanner for the JSON output of ``cargo metadata``.

    Example structure::

        {
            "packages": [{"id": "...", "name": "serde", "version": "1.0.0",
                          "license": "MIT OR Apache-2.0", "source": "registry+...",
                          "manifest_path": ".../Cargo.toml", ...}],
            "workspace_members": ["..."],
            "resolve": {"root": "...", "nodes": [{"id": "...", "deps": [...]}]}
        }
    """

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        if path.suffix.lower() != ".json" or not path.is_file():
            return False
        try:
            data = _load_json(path)
        except (OSError, ValueError):
            return False
        return isinstance(data, dict) and "resolve" in data and "packages" in data

    @property
    def source_name(self) -> str:
        return "cargo metadata"

    def scan(self) -> list[RawPackageInfo]:
        """Extract the distributed crates from cargo metadata.

        Returns:
            One RawPackageInfo per crate with a registry or git source.

        Raises:
            FileNotFoundError: If the metadata file does not exist.
            ValueError: If the metadata has no dependency tree or refers to
                unknown packages.
        """
        path = self._require_source()
        self._ignore_features()
        data = _load_json(path)

        resolve = data.get("resolve")
        if not resolve:
            raise ValueError(f"Metadata in {path} is missing a dependency tree")

        packages = {package["id"]: package for package in data.get("packages", [])}
        nodes = {node["id"]: node for node in resolve.get("nodes", [])}

        if resolve.get("root"):
            roots = [resolve["root"]]
        else:
            # Virtual workspace: start from every member
            roots = list(data.get("workspace_members") or nodes)

        result = []
        for package_id in sorted(self._reachable(roots, nodes)):
            package = packages.get(package_id)
            if package is None:
                raise ValueError(f"Missing package {package_id} in {path}")
            if package.get("source") is None:
                logger.debug("Skipping local crate %s", package["name"])
                continue
            result.append(self._package_info(package))

        return sorted(result, key=lambda p: p.identity)

    def _reachable(
        self, roots: list[str], nodes: dict[str, dict[str, Any]]
    ) -> set[str]:
        found: set[str] = set()
        visited: set[str] = set()
        stack = list(roots)
        while stack:
            node_id = stack.pop()
            if node_id in visited:
                continue
            visited.add(node_id)

            node = nodes.get(node_id)
            if node is None:
                raise ValueError(f"Missing dependency node {node_id}")
            for dep in node.get("deps", []):
                if _is_normal_dependency(dep):
                    found.add(dep["pkg"])
                    stack.append(dep["pkg"])
        return found

    def _package_info(self, package: dict[str, Any]) -> RawPackageInfo:
        source = package["source"]
        return RawPackageInfo(
            identity=PackageIdentity(package["name"], package["version"]),
            declared_license=package.get("license"),
            homepage=package.get("homepage"),
            repository=package.get("repository"),
            source_dir=Path(package["manifest_path"]).parent,
            license_file=package.get("license_file"),
            vcs_url=source if source.startswith("git+") else None,
        )
