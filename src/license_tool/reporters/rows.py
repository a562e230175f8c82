"""Canonical ordering and projection of resolved records onto report rows."""

from collections.abc import Iterable
from dataclasses import replace
from typing import Optional

from packaging.version import InvalidVersion, Version

from license_tool.models import ReportRow, ResolvedRecord

# Affixes stripped from a repository name when looking for the component
# that gives a shared repository its name.
_NAME_PREFIXES = ("python-", "py-", "rust-")
_NAME_SUFFIXES = ("-python", "-py", "-rs")


def _version_key(version: str) -> tuple:
    try:
        return (0, Version(version), version)
    except InvalidVersion:
        return (1, version, version)


def canonical_order(records: Iterable[ResolvedRecord]) -> list[ResolvedRecord]:
    """Sort records by name, then version.

    Names compare case-insensitively (exact spelling breaks ties). Versions
    compare by PEP 440 ordering when they parse, and as plain strings
    after every parseable version otherwise.

    Args:
        records: Records in any order.

    Returns:
        A new list in canonical order.
    """
    return sorted(
        records,
        key=lambda r: (r.name.lower(), r.name, _version_key(r.version)),
    )


def build_rows(
    records: Iterable[ResolvedRecord], merge_aliases: bool = False
) -> list[ReportRow]:
    """Project records onto report rows in canonical order.

    Rows that come out identical (e.g. two versions of a package with the
    same metadata) are written once.

    Args:
        records: Resolved records in any order.
        merge_aliases: Collapse components that share origin, license and
            copyright into the single component named after the origin
            repository, when one of them is.

    Returns:
        Report rows, sorted by component.
    """
    rows: list[ReportRow] = []
    seen: set[ReportRow] = set()
    for record in canonical_order(records):
        row = record.to_row()
        if row not in seen:
            seen.add(row)
            rows.append(row)

    if merge_aliases:
        rows = _merge_aliases(rows)

    return sorted(rows, key=lambda r: (r.component.lower(), r.component))


def _merge_aliases(rows: list[ReportRow]) -> list[ReportRow]:
    groups: dict[tuple[str, str, str], list[ReportRow]] = {}
    for row in rows:
        groups.setdefault((row.origin, row.license, row.copyright), []).append(row)

    merged: list[ReportRow] = []
    for (origin, _, _), group in groups.items():
        names = {row.component for row in group}
        if len(names) > 1:
            primary = _primary_name(origin, names)
            if primary is not None:
                merged.append(replace(group[0], component=primary))
                continue
        merged.extend(group)
    return merged


def _primary_name(origin: str, names: set[str]) -> Optional[str]:
    if "/" not in origin:
        return None
    suffix = origin.rstrip("/").rsplit("/", 1)[1]

    candidates = [suffix]
    candidates += [suffix[len(p):] for p in _NAME_PREFIXES if suffix.startswith(p)]
    candidates += [suffix[: -len(s)] for s in _NAME_SUFFIXES if suffix.endswith(s)]

    by_lower: dict[str, str] = {}
    for name in sorted(names):
        by_lower.setdefault(name.lower(), name)

    for candidate in candidates:
        if candidate.lower() in by_lower:
            return by_lower[candidate.lower()]
    return None
