"""Scanner for Python projects described by pyproject.toml.

Reads the project's runtime requirements (plus any selected optional
dependency groups) from ``pyproject.toml`` and walks the installed
distributions through their ``Requires-Dist`` metadata to collect the full
runtime dependency graph.
"""

import json
import logging
import tomllib
from collections import deque
from collections.abc import Iterable, Sequence
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Any, Optional

from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from license_tool.models import PackageIdentity, RawPackageInfo
from license_tool.scanners.base import BaseScanner

logger = logging.getLogger(__name__)

# Trove classifier license names mapped to SPDX identifiers
CLASSIFIER_LICENSES = {
    "Apache Software License": "Apache-2.0",
    "BSD License": "BSD-3-Clause",
    "GNU General Public License v2 (GPLv2)": "GPL-2.0-only",
    "GNU General Public License v2 or later (GPLv2+)": "GPL-2.0-or-later",
    "GNU General Public License v3 (GPLv3)": "GPL-3.0-only",
    "GNU General Public License v3 or later (GPLv3+)": "GPL-3.0-or-later",
    "GNU Lesser General Public License v2 (LGPLv2)": "LGPL-2.0-only",
    "GNU Lesser General Public License v2 or later (LGPLv2+)": "LGPL-2.0-or-later",
    "GNU Lesser General Public License v3 (LGPLv3)": "LGPL-3.0-only",
    "GNU Lesser General Public License v3 or later (LGPLv3+)": "LGPL-3.0-or-later",
    "ISC License (ISCL)": "ISC",
    "MIT License": "MIT",
    "MIT No Attribution License (MIT-0)": "MIT-0",
    "Mozilla Public License 2.0 (MPL 2.0)": "MPL-2.0",
    "Python Software Foundation License": "PSF-2.0",
    "The Unlicense (Unlicense)": "Unlicense",
    "Zope Public License": "ZPL-2.1",
}

# Project-URL labels naming the source repository, most specific first.
# Labels are compared after PEP 753 normalization.
REPOSITORY_LABELS = ("source", "sourcecode", "repository", "code", "github", "gitlab")
HOMEPAGE_LABELS = ("homepage", "home")

# License fields longer than this hold a full license text, not a name.
MAX_LICENSE_FIELD = 100


def _normalize_label(label: str) -> str:
    return "".join(ch for ch in label.lower() if ch not in " -_.")


def _known(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip() or value.strip().upper() == "UNKNOWN":
        return None
    return value.strip()


class EnvironmentScanner(BaseScanner):
    """Scanner for pyproject.toml projects and their installed dependencies.

    Only runtime requirements are followed: a dependency's optional extras
    are included only when something in the graph asks for them. Packages
    installed from a local directory and the project itself are left out
    of the result, though their requirements are still followed.

    Attributes:
        search_path: Directories searched for installed distributions
            (defaults to sys.path).
    """

    def __init__(
        self,
        source_path: Optional[Path] = None,
        features: Sequence[str] = (),
        all_features: bool = False,
        search_path: Optional[list[str]] = None,
    ) -> None:
        super().__init__(source_path, features, all_features)
        self.search_path = search_path

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        return path.name == "pyproject.toml"

    @property
    def source_name(self) -> str:
        return "pyproject.toml"

    def scan(self) -> list[RawPackageInfo]:
        """Collect the installed runtime dependency graph of the project.

        Returns:
            One RawPackageInfo per installed dependency, sorted by identity.

        Raises:
            FileNotFoundError: If pyproject.toml does not exist.
            ValueError: If pyproject.toml is invalid, has no [project] name,
                or a requested feature does not exist.
        """
        project = self._load_project()
        root_name = canonicalize_name(project["name"])
        installed = self._index_distributions()

        queue: deque[Requirement] = deque(self._root_requirements(project))
        seen: set[tuple[str, frozenset[str]]] = set()
        found: dict[str, Optional[RawPackageInfo]] = {}

        while queue:
            requirement = queue.popleft()
            key = canonicalize_name(requirement.name)
            if key == root_name:
                continue

            dist = installed.get(key)
            if dist is None:
                logger.warning("Requirement %s is not installed, skipping", requirement)
                continue

            extras = frozenset(canonicalize_name(e) for e in requirement.extras)
            if (key, extras) in seen:
                continue
            seen.add((key, extras))

            if key not in found:
                found[key] = self._package_info(dist)
            queue.extend(self._requirements(dist, extras))

        packages = [info for info in found.values() if info is not None]
        logger.debug("Found %d installed dependencies", len(packages))
        return sorted(packages, key=lambda p: p.identity)

    def _load_project(self) -> dict[str, Any]:
        path = self._require_source()
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {path}: {e}") from e

        project = data.get("project")
        if not isinstance(project, dict) or not project.get("name"):
            raise ValueError(f"No [project] name in {path}")
        return project

    def _root_requirements(self, project: dict[str, Any]) -> list[Requirement]:
        optional = {
            canonicalize_name(group): deps
            for group, deps in project.get("optional-dependencies", {}).items()
        }
        if self.all_features:
            selected = sorted(optional)
        else:
            selected = [canonicalize_name(f) for f in self.features]
            unknown = [f for f in selected if f not in optional]
            if unknown:
                raise ValueError(
                    f"Unknown feature(s): {', '.join(unknown)}. "
                    f"Available: {', '.join(sorted(optional)) or 'none'}"
                )

        requirements = self._parse(project.get("dependencies", []), extras=())
        for group in selected:
            requirements += self._parse(optional[group], extras=(group,))
        return requirements

    def _requirements(
        self, dist: importlib_metadata.Distribution, extras: frozenset[str]
    ) -> list[Requirement]:
        return self._parse(dist.requires or [], extras=tuple(sorted(extras)))

    def _parse(self, specs: Iterable[str], extras: Sequence[str]) -> list[Requirement]:
        """Parse requirement strings, keeping those active for extras."""
        requirements = []
        environments = [{"extra": ""}] + [{"extra": extra} for extra in extras]
        for spec in specs:
            try:
                requirement = Requirement(spec)
            except InvalidRequirement as e:
                logger.warning("Skipping invalid requirement %r: %s", spec, e)
                continue
            if requirement.marker is None or any(
                requirement.marker.evaluate(env) for env in environments
            ):
                requirements.append(requirement)
        return requirements

    def _index_distributions(self) -> dict[str, importlib_metadata.Distribution]:
        kwargs = {"path": self.search_path} if self.search_path is not None else {}
        installed: dict[str, importlib_metadata.Distribution] = {}
        for dist in importlib_metadata.distributions(**kwargs):
            name = dist.metadata.get("Name")
            if name:
                installed.setdefault(canonicalize_name(name), dist)
        return installed

    def _package_info(
        self, dist: importlib_metadata.Distribution
    ) -> Optional[RawPackageInfo]:
        meta = dist.metadata
        identity = PackageIdentity(meta["Name"], dist.version)

        direct_url = self._direct_url(dist)
        if "dir_info" in direct_url:
            logger.debug("Skipping local package %s", identity)
            return None

        vcs_url = direct_url.get("url") if "vcs_info" in direct_url else None
        project_urls = self._project_urls(meta)
        source_dir = self._metadata_dir(dist)

        return RawPackageInfo(
            identity=identity,
            declared_license=self._declared_license(meta),
            homepage=_known(meta.get("Home-page"))
            or self._first_url(project_urls, HOMEPAGE_LABELS),
            repository=self._first_url(project_urls, REPOSITORY_LABELS),
            source_dir=source_dir,
            license_file=self._license_file(meta, source_dir),
            vcs_url=vcs_url,
        )

    def _direct_url(self, dist: importlib_metadata.Distribution) -> dict[str, Any]:
        text = dist.read_text("direct_url.json")
        if not text:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Invalid direct_url.json for %s", dist.metadata["Name"])
            return {}
        return data if isinstance(data, dict) else {}

    def _metadata_dir(self, dist: importlib_metadata.Distribution) -> Optional[Path]:
        """Locate the .dist-info (or .egg-info) directory of a distribution."""
        for file in dist.files or []:
            top = file.parts[0] if file.parts else ""
            if top.endswith((".dist-info", ".egg-info")):
                return Path(dist.locate_file(top))
        return None

    def _license_file(self, meta: Any, source_dir: Optional[Path]) -> Optional[str]:
        if source_dir is None:
            return None
        for value in meta.get_all("License-File") or []:
            for candidate in (f"licenses/{value}", value):
                if (source_dir / candidate).is_file():
                    return candidate
        return None

    def _declared_license(self, meta: Any) -> Optional[str]:
        """Pick the declared license, preferring the most structured field."""
        expression = (meta.get("License-Expression") or "").strip()
        if expression:
            return expression

        text = (meta.get("License") or "").strip()
        if (
            text
            and text.upper() != "UNKNOWN"
            and "\n" not in text
            and len(text) <= MAX_LICENSE_FIELD
        ):
            return CLASSIFIER_LICENSES.get(text, text)

        licenses: list[str] = []
        for classifier in meta.get_all("Classifier") or []:
            parts = [part.strip() for part in classifier.split("::")]
            if parts[0] != "License" or len(parts) < 2 or parts[-1] == "OSI Approved":
                continue
            spdx_id = CLASSIFIER_LICENSES.get(parts[-1], parts[-1])
            if spdx_id not in licenses:
                licenses.append(spdx_id)
        return " OR ".join(licenses) if licenses else None

    def _project_urls(self, meta: Any) -> dict[str, str]:
        urls: dict[str, str] = {}
        for entry in meta.get_all("Project-URL") or []:
            label, sep, url = entry.partition(",")
            if sep and url.strip():
                urls.setdefault(_normalize_label(label), url.strip())
        return urls

    def _first_url(self, urls: dict[str, str], labels: Sequence[str]) -> Optional[str]:
        for label in labels:
            if label in urls:
                return urls[label]
        return None
