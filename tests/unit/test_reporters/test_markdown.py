"""Tests for the Markdown reporter."""

from pathlib import Path

from license_tool.models import ReportRow
from license_tool.reporters.markdown import MarkdownReporter


def test_render_default_template() -> None:
    """Test that rows render as a Markdown table."""
    rows = [
        ReportRow("serde", "https://github.com/serde-rs/serde", "MIT OR Apache-2.0", ""),
    ]

    output = MarkdownReporter().render(rows)

    assert output.startswith("# Third-Party Licenses\n")
    assert "| Component | Origin | License | Copyright |" in output
    assert (
        "| serde | https://github.com/serde-rs/serde | MIT OR Apache-2.0 |  |\n" in output
    )


def test_render_escapes_table_cells() -> None:
    """Test that pipes and line breaks cannot break the table."""
    rows = [ReportRow("a|b", "https://x", "MIT", "Copyright 2020\nJane <jane@x.org>")]

    output = MarkdownReporter().render(rows)

    assert "| a\\|b | https://x | MIT | Copyright 2020 Jane <jane@x.org> |" in output


def test_render_no_rows() -> None:
    output = MarkdownReporter().render([])
    assert output.rstrip().endswith("| --- | --- | --- | --- |")


def test_custom_template(tmp_path: Path) -> None:
    """Test that a user template replaces the bundled one."""
    template = tmp_path / "custom.j2"
    template.write_text("{% for row in rows %}{{ row.component }}={{ row.license }};{% endfor %}")

    output = MarkdownReporter(template_path=template).render(
        [ReportRow("a", "https://x", "MIT", ""), ReportRow("b", "https://y", "ISC", "")]
    )

    assert output == "a=MIT;b=ISC;"


def test_format() -> None:
    reporter = MarkdownReporter()
    assert reporter.format_name == "markdown"
    assert reporter.default_extension == ".md"
