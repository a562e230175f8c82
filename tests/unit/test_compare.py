"""Tests for comparing a computed report against the persisted one."""

from license_tool.compare import diff, is_canonical
from license_tool.models import FieldDifference, ReportRow
from license_tool.reporters.csvfile import encode

SERDE = ReportRow("serde", "https://github.com/serde-rs/serde", "MIT OR Apache-2.0", "")
ANYHOW = ReportRow(
    "anyhow", "https://github.com/dtolnay/anyhow", "MIT OR Apache-2.0", "Copyright (c) David"
)


def test_identical_ignores_order() -> None:
    assert diff([SERDE, ANYHOW], [ANYHOW, SERDE]).identical


def test_changed_field() -> None:
    """Test that a single changed column is reported on its own."""
    changed = ReportRow(SERDE.component, SERDE.origin, "MIT", SERDE.copyright)

    result = diff([ANYHOW, SERDE], [ANYHOW, changed])

    assert result.differences == [
        FieldDifference("serde", "License", "MIT OR Apache-2.0", "MIT")
    ]


def test_several_changed_fields() -> None:
    changed = ReportRow("serde", "https://github.com/fork/serde", "MIT", "Copyright 2024")

    result = diff([SERDE], [changed])

    assert [d.field for d in result.differences] == ["Origin", "License", "Copyright"]


def test_added_and_removed_components() -> None:
    """Test that new and dropped components are reported as whole rows."""
    result = diff([SERDE], [ANYHOW])

    assert [(d.component, d.expected is None, d.actual is None) for d in result.differences] == [
        ("anyhow", True, False),
        ("serde", False, True),
    ]
    assert "license='MIT OR Apache-2.0'" in result.differences[1].expected


def test_duplicate_component_rows() -> None:
    """Test that a component with several rows is compared row by row."""
    old_rand = ReportRow("rand", "https://github.com/rust-random/rand", "MIT", "")
    new_rand = ReportRow("rand", "https://github.com/rust-random/rand", "MIT", "Copyright 2018")

    result = diff([old_rand], [old_rand, new_rand])

    assert len(result.differences) == 1
    assert result.differences[0].field == "row"
    assert result.differences[0].expected is None
    assert "Copyright 2018" in result.differences[0].actual


def test_is_canonical() -> None:
    rows = [ANYHOW, SERDE]
    assert is_canonical(encode(rows), rows)
    assert not is_canonical(encode([SERDE, ANYHOW]), rows)
    assert not is_canonical(encode(rows).replace("\n", "\r\n"), rows)
