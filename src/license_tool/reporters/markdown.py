"""Markdown reporter for license attribution tables.

This module renders report rows as a Markdown table using Jinja2 templates.
"""

from collections.abc import Sequence
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import BaseLoader, Environment, FileSystemLoader, Template

from license_tool.models import ReportRow
from license_tool.reporters.base import BaseReporter


def _table_cell(value: str) -> str:
    """Make a value safe for a single Markdown table cell."""
    return " ".join(value.split()).replace("|", "\\|")


def _environment(loader: Optional[BaseLoader] = None) -> Environment:
    env = Environment(
        loader=loader,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["cell"] = _table_cell
    return env


class MarkdownReporter(BaseReporter):
    """Reporter that renders report rows as a Markdown document.

    Attributes:
        template: The Jinja2 template to use for rendering.
    """

    def __init__(self, template_path: Optional[Path] = None) -> None:
        """Initialize the Markdown reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the default bundled template.
        """
        if template_path:
            env = _environment(FileSystemLoader(template_path.parent))
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template()

    def _load_default_template(self) -> Template:
        template_content = (
            files("license_tool.templates")
            .joinpath("licenses.md.j2")
            .read_text(encoding="utf-8")
        )
        return _environment().from_string(template_content)

    def render(self, rows: Sequence[ReportRow]) -> str:
        return self.template.render(rows=rows)

    @property
    def format_name(self) -> str:
        return "markdown"

    @property
    def default_extension(self) -> str:
        return ".md"
