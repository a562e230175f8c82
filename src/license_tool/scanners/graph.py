"""Scanner for pre-computed dependency graphs in JSON.

Any tool can feed license_tool by writing the resolved graph as JSON,
either a bare list or an object with a ``packages`` list::

    {
        "packages": [
            {
                "name": "left-pad",
                "version": "1.3.0",
                "license": "WTFPL",
                "repository": "https://github.com/left-pad/left-pad",
                "homepage": null,
                "source_dir": "node_modules/left-pad",
                "license_file": null
            }
        ]
    }

Relative ``source_dir`` values are resolved against the JSON file's
directory.
"""

import json
from pathlib import Path
from typing import Any, Optional

from license_tool.models import PackageIdentity, RawPackageInfo
from license_tool.scanners.base import BaseScanner

_OPTIONAL_FIELDS = ("license", "homepage", "repository", "source_dir", "license_file", "vcs_url")


class GraphFileScanner(BaseScanner):
    """Scanner for generic JSON dependency graphs."""

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        return path.suffix.lower() == ".json"

    @property
    def source_name(self) -> str:
        return "dependency graph"

    def scan(self) -> list[RawPackageInfo]:
        """Read every package entry from the graph file.

        Returns:
            One RawPackageInfo per entry, sorted by identity.

        Raises:
            FileNotFoundError: If the graph file does not exist.
            ValueError: If the JSON is invalid or an entry is malformed.
        """
        path = self._require_source()
        self._ignore_features()

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

        entries = data.get("packages") if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise ValueError(f"Expected a list of packages in {path}")

        packages = [
            self._parse_entry(entry, index, path.parent)
            for index, entry in enumerate(entries)
        ]
        return sorted(packages, key=lambda p: p.identity)

    def _parse_entry(self, entry: Any, index: int, base_dir: Path) -> RawPackageInfo:
        if not isinstance(entry, dict):
            raise ValueError(f"Package entry {index} in {self.source_path} is not an object")

        for name in ("name", "version"):
            if not isinstance(entry.get(name), str) or not entry[name]:
                raise ValueError(
                    f"Package entry {index} missing required field '{name}' in {self.source_path}"
                )
        for name in _OPTIONAL_FIELDS:
            value = entry.get(name)
            if value is not None and not isinstance(value, str):
                raise ValueError(
                    f"Package entry {index} field '{name}' must be a string in {self.source_path}"
                )

        source_dir: Optional[Path] = None
        if entry.get("source_dir"):
            source_dir = base_dir / entry["source_dir"]

        return RawPackageInfo(
            identity=PackageIdentity(entry["name"], entry["version"]),
            declared_license=entry.get("license"),
            homepage=entry.get("homepage"),
            repository=entry.get("repository"),
            source_dir=source_dir,
            license_file=entry.get("license_file"),
            vcs_url=entry.get("vcs_url"),
        )
