"""Base interface for output reporters.

Reporters render report rows into a document format (CSV, Markdown).
"""

import contextlib
import os
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from license_tool.models import ReportRow


class BaseReporter(ABC):
    """Abstract base class for output reporters."""

    @abstractmethod
    def render(self, rows: Sequence[ReportRow]) -> str:
        """Render report rows to formatted output.

        Args:
            rows: Report rows in the order they should appear.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(self, rows: Sequence[ReportRow], output_path: Path) -> None:
        """Render and write output to a file.

        The content goes to a temporary file next to output_path which is
        then renamed over it, so readers never see a partial report.

        Args:
            rows: Report rows in the order they should appear.
            output_path: Path to write the output file.
        """
        content = self.render(rows)
        temp_path = output_path.with_name(f"{output_path.name}.tmp.{os.getpid()}")
        try:
            with open(temp_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(temp_path, output_path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(temp_path)
            raise

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name, like "csv" or "markdown"."""
        ...

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Return the default file extension for this format."""
        ...
