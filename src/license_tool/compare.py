"""Comparison of a freshly computed report against the persisted one."""

from collections import Counter
from collections.abc import Sequence

from license_tool.models import (
    REPORT_COLUMNS,
    ComparisonResult,
    FieldDifference,
    ReportRow,
)
from license_tool.reporters.csvfile import encode

# Column name -> ReportRow attribute, component excluded
_FIELDS = tuple(zip(REPORT_COLUMNS[1:], ("origin", "license", "copyright")))


def _group(rows: Sequence[ReportRow]) -> dict[str, list[ReportRow]]:
    grouped: dict[str, list[ReportRow]] = {}
    for row in rows:
        grouped.setdefault(row.component, []).append(row)
    return grouped


def _describe(row: ReportRow) -> str:
    return f"origin={row.origin!r} license={row.license!r} copyright={row.copyright!r}"


def diff(expected: Sequence[ReportRow], actual: Sequence[ReportRow]) -> ComparisonResult:
    """Compare two row sets, ignoring order.

    Rows are matched by component. When each side has exactly one row for
    a component, every differing column is reported separately. Otherwise
    rows present on one side only are reported whole, under the "row"
    field.

    Args:
        expected: Rows from the persisted report.
        actual: Rows computed from the current dependency graph.

    Returns:
        ComparisonResult listing every difference, grouped by component.
    """
    old_rows = _group(expected)
    new_rows = _group(actual)
    differences: list[FieldDifference] = []

    for component in sorted(set(old_rows) | set(new_rows), key=lambda c: (c.lower(), c)):
        old = old_rows.get(component, [])
        new = new_rows.get(component, [])

        if len(old) == 1 and len(new) == 1:
            for column, attribute in _FIELDS:
                old_value = getattr(old[0], attribute)
                new_value = getattr(new[0], attribute)
                if old_value != new_value:
                    differences.append(
                        FieldDifference(component, column, old_value, new_value)
                    )
            continue

        old_counts = Counter(old)
        new_counts = Counter(new)
        for row in sorted((old_counts - new_counts).elements()):
            differences.append(FieldDifference(component, "row", _describe(row), None))
        for row in sorted((new_counts - old_counts).elements()):
            differences.append(FieldDifference(component, "row", None, _describe(row)))

    return ComparisonResult(differences)


def is_canonical(text: str, rows: Sequence[ReportRow]) -> bool:
    """Check that report text is byte-for-byte what encoding rows produces.

    Catches row order drift and formatting changes that diff() ignores.
    """
    return text == encode(rows)
