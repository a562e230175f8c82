"""Core data models for license_tool.

This module defines the data structures that flow through the pipeline:
raw dependency-graph entries, user overrides, resolved records, the CSV
row projection, and comparison results.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from license_tool.exceptions import ResolutionError

REPORT_COLUMNS = ("Component", "Origin", "License", "Copyright")


@dataclass(frozen=True, order=True)
class PackageIdentity:
    """Immutable identity of a dependency graph node.

    Attributes:
        name: Package name as published (e.g., "requests").
        version: Exact version string (e.g., "2.31.0").
    """

    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name} {self.version}"


@dataclass(frozen=True)
class RawPackageInfo:
    """Package metadata as reported by the dependency graph source.

    Attributes:
        identity: Name and version of the package.
        declared_license: License expression declared by the package.
        homepage: Optional homepage URL.
        repository: Optional source repository URL.
        source_dir: Directory holding the package's files on disk.
        license_file: Optional license file path declared by the package,
            relative to source_dir.
        vcs_url: URL the package was installed from when it came straight
            from version control (e.g., "git+https://github.com/o/r").
    """

    identity: PackageIdentity
    declared_license: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[str] = None
    source_dir: Optional[Path] = None
    license_file: Optional[str] = None
    vcs_url: Optional[str] = None

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def version(self) -> str:
        return self.identity.version


@dataclass(frozen=True)
class Override:
    """A user-supplied correction for one package.

    Attributes:
        key: Either a bare package name or "<name>-<version>".
        origin: Optional origin URL replacing the package's repository.
        license: Optional license expression replacing the declared one.
    """

    key: str
    origin: Optional[str] = None
    license: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.origin is None and self.license is None


@dataclass(frozen=True, order=True)
class ReportRow:
    """One row of the third-party license report.

    Field order matches the CSV column order.
    """

    component: str
    origin: str
    license: str
    copyright: str

    def as_list(self) -> list[str]:
        return [self.component, self.origin, self.license, self.copyright]


@dataclass(frozen=True)
class ResolvedRecord:
    """Final license attribution for a single package.

    Attributes:
        name: Package name.
        version: Package version.
        license: Resolved license expression.
        origin: Resolved origin URL.
        copyright: Copyright line found in the package's files, or "".
    """

    name: str
    version: str
    license: str
    origin: str
    copyright: str = ""

    @property
    def identity(self) -> PackageIdentity:
        return PackageIdentity(self.name, self.version)

    def to_row(self) -> ReportRow:
        """Project the record onto the report columns.

        Returns:
            The ReportRow for this record. The version is not a report
            column and is dropped.
        """
        return ReportRow(
            component=self.name,
            origin=self.origin,
            license=self.license,
            copyright=self.copyright,
        )


@dataclass
class ResolutionReport:
    """Outcome of resolving a whole dependency graph.

    Attributes:
        records: Successfully resolved records in canonical order.
        errors: Every per-package resolution failure.
        missing_copyright: Packages for which no copyright line was found.
    """

    records: list[ResolvedRecord] = field(default_factory=list)
    errors: list["ResolutionError"] = field(default_factory=list)
    missing_copyright: list[PackageIdentity] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class FieldDifference:
    """A single mismatch between the expected and actual report.

    Attributes:
        component: Component name the difference belongs to.
        field: Column name, or "row" when a whole row is missing or extra.
        expected: Value in the persisted report (None if absent).
        actual: Value computed from the current graph (None if absent).
    """

    component: str
    field: str
    expected: Optional[str]
    actual: Optional[str]


@dataclass
class ComparisonResult:
    """Differences found between two record sets."""

    differences: list[FieldDifference] = field(default_factory=list)

    @property
    def identical(self) -> bool:
        return not self.differences

    def by_component(self) -> dict[str, list[FieldDifference]]:
        """Group differences by component, preserving order."""
        grouped: dict[str, list[FieldDifference]] = {}
        for difference in self.differences:
            grouped.setdefault(difference.component, []).append(difference)
        return grouped
