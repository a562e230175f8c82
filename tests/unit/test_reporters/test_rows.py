"""Tests for canonical ordering and row projection."""

from license_tool.models import ReportRow, ResolvedRecord
from license_tool.reporters.rows import build_rows, canonical_order


def _record(name: str, version: str = "1.0.0", **kwargs) -> ResolvedRecord:
    fields = {"license": "MIT", "origin": f"https://github.com/o/{name}", "copyright": ""}
    fields.update(kwargs)
    return ResolvedRecord(name=name, version=version, **fields)


def test_canonical_order_by_name_then_version() -> None:
    """Test that names sort case-insensitively and versions numerically."""
    records = [
        _record("zlib"),
        _record("Bytes", "0.10.0"),
        _record("bytes", "0.9.0"),
        _record("bytes", "0.10.0"),
        _record("Anyhow"),
    ]

    ordered = canonical_order(records)

    assert [(r.name, r.version) for r in ordered] == [
        ("Anyhow", "1.0.0"),
        ("Bytes", "0.10.0"),
        ("bytes", "0.9.0"),
        ("bytes", "0.10.0"),
        ("zlib", "1.0.0"),
    ]


def test_canonical_order_invalid_versions_last() -> None:
    """Test that non-PEP 440 versions sort after valid ones."""
    records = [_record("a", "not-a-version"), _record("a", "2.0"), _record("a", "10.0")]

    assert [r.version for r in canonical_order(records)] == ["2.0", "10.0", "not-a-version"]


def test_canonical_order_does_not_modify_input() -> None:
    records = [_record("b"), _record("a")]
    canonical_order(records)
    assert [r.name for r in records] == ["b", "a"]


def test_build_rows_drops_duplicate_rows() -> None:
    """Test that two versions with identical metadata give one row."""
    rows = build_rows([_record("serde", "1.0.1"), _record("serde", "1.0.0")])

    assert rows == [ReportRow("serde", "https://github.com/o/serde", "MIT", "")]


def test_build_rows_keeps_differing_versions() -> None:
    rows = build_rows(
        [_record("rand", "0.8.5"), _record("rand", "0.7.3", copyright="Copyright 2018")]
    )

    assert len(rows) == 2
    assert {row.copyright for row in rows} == {"", "Copyright 2018"}


def test_build_rows_sorted_by_component() -> None:
    rows = build_rows([_record("b"), _record("C"), _record("a")])
    assert [row.component for row in rows] == ["a", "b", "C"]


class TestMergeAliases:
    """Tests for collapsing components that share a repository."""

    def test_merges_into_repository_name(self) -> None:
        """Test that crates from one repository collapse to its name."""
        origin = "https://github.com/serde-rs/serde"
        records = [
            _record("serde", origin=origin),
            _record("serde_derive", origin=origin),
        ]

        rows = build_rows(records, merge_aliases=True)

        assert rows == [ReportRow("serde", origin, "MIT", "")]

    def test_strips_common_affixes(self) -> None:
        """Test that "python-" style repository names still match."""
        origin = "https://github.com/o/python-dateutil"
        records = [
            _record("dateutil", origin=origin),
            _record("dateutil-extras", origin=origin),
        ]

        rows = build_rows(records, merge_aliases=True)

        assert [row.component for row in rows] == ["dateutil"]

    def test_no_matching_name_keeps_all(self) -> None:
        """Test that rows stay separate when none is named after the origin."""
        origin = "https://github.com/o/monorepo"
        records = [_record("alpha", origin=origin), _record("beta", origin=origin)]

        rows = build_rows(records, merge_aliases=True)

        assert [row.component for row in rows] == ["alpha", "beta"]

    def test_different_licenses_not_merged(self) -> None:
        origin = "https://github.com/serde-rs/serde"
        records = [
            _record("serde", origin=origin),
            _record("serde_json", origin=origin, license="Apache-2.0"),
        ]

        rows = build_rows(records, merge_aliases=True)

        assert [row.component for row in rows] == ["serde", "serde_json"]

    def test_disabled_by_default(self) -> None:
        origin = "https://github.com/serde-rs/serde"
        records = [_record("serde", origin=origin), _record("serde_derive", origin=origin)]

        assert len(build_rows(records)) == 2
