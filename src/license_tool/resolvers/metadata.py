"""Metadata resolver merging graph data, overrides and license files.

Precedence per field (highest first):

* license: override (version-scoped, then bare name) > declared license
* origin: override (version-scoped, then bare name) > repository > VCS
  source URL > homepage
* copyright: first copyright line in the package's license files, or ""
"""

import asyncio
import logging
from functools import lru_cache
from typing import Optional

from license_expression import ExpressionError, get_spdx_licensing

from license_tool.config import OverrideStore
from license_tool.copyright import LicenseFileScanner
from license_tool.exceptions import MissingLicense, MissingOrigin, ResolutionError
from license_tool.models import (
    Override,
    RawPackageInfo,
    ResolutionReport,
    ResolvedRecord,
)
from license_tool.reporters.rows import canonical_order
from license_tool.resolvers.base import BaseResolver

logger = logging.getLogger(__name__)

# Initialize SPDX licensing library for normalization
SPDX = get_spdx_licensing()


@lru_cache(maxsize=1024)
def normalize_license(expression: str) -> str:
    """Normalize a license expression.

    "/" separators (an old Cargo convention) become " OR ", then the
    expression is parsed against the SPDX license list and rendered back
    in canonical form. Text that does not parse is kept as written.

    Args:
        expression: Raw license expression.

    Returns:
        The normalized expression.
    """
    text = " ".join(expression.replace("/", " OR ").split())
    try:
        parsed = SPDX.parse(text)
    except ExpressionError as e:
        logger.debug("Keeping license expression %r as written: %s", text, e)
        return text
    return str(parsed) if parsed is not None else text


def normalize_origin(url: str) -> str:
    """Normalize a repository or VCS URL.

    Strips a "git+" scheme prefix along with any query or fragment that
    comes with it, then a trailing ".git" and a trailing "/".

    Args:
        url: Raw URL.

    Returns:
        The normalized URL.
    """
    url = url.strip()
    if url.startswith("git+"):
        url = url[len("git+"):].split("?", 1)[0].split("#", 1)[0]
    return url.removesuffix(".git").removesuffix("/")


def _present(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())


class MetadataResolver(BaseResolver):
    """Resolves final report records from raw dependency-graph entries.

    Attributes:
        overrides: User overrides, consulted before the package's own data.
        scanner: Scanner used to find copyright lines on disk.
    """

    def __init__(
        self,
        overrides: Optional[OverrideStore] = None,
        scanner: Optional[LicenseFileScanner] = None,
    ) -> None:
        self.overrides = overrides if overrides is not None else OverrideStore()
        self.scanner = scanner if scanner is not None else LicenseFileScanner()

    @property
    def name(self) -> str:
        return "metadata"

    def resolve(self, raw: RawPackageInfo) -> ResolvedRecord:
        """Resolve the final record for one package.

        Args:
            raw: Package metadata from the dependency graph.

        Returns:
            The resolved record. Its copyright is "" when none was found.

        Raises:
            MissingLicense: If neither an override nor the package provides
                a license.
            MissingOrigin: If no origin URL is available.
        """
        record, problems = self._resolve(raw)
        if problems:
            raise problems[0]
        return record

    async def resolve_batch(
        self, packages: list[RawPackageInfo], fail_fast: bool = False
    ) -> ResolutionReport:
        """Resolve every package, collecting failures instead of stopping.

        Packages are resolved in worker threads since copyright lookup
        reads from disk. Records come back in canonical order no matter
        which worker finishes first.

        Args:
            packages: Every package to resolve.
            fail_fast: Resolve one package at a time and raise the first
                failure.

        Returns:
            ResolutionReport with records, errors and the packages whose
            copyright could not be found.

        Raises:
            ResolutionError: Only when fail_fast is set.
        """
        logger.info("Starting batch resolution of %d packages", len(packages))

        report = ResolutionReport()
        records: list[ResolvedRecord] = []

        if fail_fast:
            for raw in packages:
                record = await asyncio.to_thread(self.resolve, raw)
                self._collect(report, records, raw, record, [])
        else:
            tasks = [asyncio.to_thread(self._resolve, raw) for raw in packages]
            outcomes = await asyncio.gather(*tasks, return_exceptions=True)

            for raw, outcome in zip(packages, outcomes):
                if isinstance(outcome, Exception):
                    logger.error("Exception resolving %s: %s", raw.identity, outcome)
                    problems = [
                        ResolutionError(raw.identity, f"could not be resolved: {outcome}")
                    ]
                    self._collect(report, records, raw, None, problems)
                else:
                    record, problems = outcome
                    self._collect(report, records, raw, record, problems)

        report.records = canonical_order(records)
        report.errors.sort(key=lambda error: error.identity)
        report.missing_copyright.sort()

        logger.info(
            "Batch resolution complete: %d/%d successful",
            len(report.records),
            len(packages),
        )
        return report

    def _collect(
        self,
        report: ResolutionReport,
        records: list[ResolvedRecord],
        raw: RawPackageInfo,
        record: Optional[ResolvedRecord],
        problems: list[ResolutionError],
    ) -> None:
        if problems:
            report.errors.extend(problems)
            return
        records.append(record)
        if not record.copyright:
            report.missing_copyright.append(raw.identity)

    def _resolve(
        self, raw: RawPackageInfo
    ) -> tuple[Optional[ResolvedRecord], list[ResolutionError]]:
        overrides = self.overrides.lookup(raw.identity)
        for override in overrides:
            logger.debug("Applying override '%s' to %s", override.key, raw.identity)

        license = self._resolve_license(raw, overrides)
        origin = self._resolve_origin(raw, overrides)

        problems: list[ResolutionError] = []
        if license is None:
            problems.append(MissingLicense(raw.identity))
        if origin is None:
            problems.append(MissingOrigin(raw.identity))
        if problems:
            return None, problems

        copyright = self.scanner.scan(raw.source_dir, raw.license_file)
        if not copyright:
            logger.debug("No copyright found for %s", raw.identity)

        return (
            ResolvedRecord(
                name=raw.name,
                version=raw.version,
                license=license,
                origin=origin,
                copyright=copyright or "",
            ),
            [],
        )

    def _resolve_license(
        self, raw: RawPackageInfo, overrides: list[Override]
    ) -> Optional[str]:
        for override in overrides:
            if _present(override.license):
                return normalize_license(override.license)
        if _present(raw.declared_license):
            return normalize_license(raw.declared_license)
        return None

    def _resolve_origin(
        self, raw: RawPackageInfo, overrides: list[Override]
    ) -> Optional[str]:
        for override in overrides:
            if _present(override.origin):
                return normalize_origin(override.origin)
        if _present(raw.repository):
            return normalize_origin(raw.repository)
        if _present(raw.vcs_url):
            return normalize_origin(raw.vcs_url)
        if _present(raw.homepage):
            return raw.homepage.strip()
        return None
