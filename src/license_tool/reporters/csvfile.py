"""CSV codec for the third-party license report.

The report is UTF-8 CSV with the header ``Component,Origin,License,Copyright``
and ``\\n`` line endings. Fields are quoted only when they contain a comma,
a quote or a line break; embedded quotes are doubled (RFC 4180). A row with a
carriage return in any field is quoted in full.
"""

import csv
import io
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Union

from license_tool.exceptions import ParseError
from license_tool.models import REPORT_COLUMNS, ReportRow, ResolvedRecord
from license_tool.reporters.base import BaseReporter

logger = logging.getLogger(__name__)

DEFAULT_REPORT_FILENAME = "LICENSE-3rdparty.csv"


def _as_row(item: Union[ReportRow, ResolvedRecord]) -> ReportRow:
    if isinstance(item, ResolvedRecord):
        return item.to_row()
    return item


def encode(rows: Iterable[Union[ReportRow, ResolvedRecord]]) -> str:
    """Serialize rows into report text.

    Args:
        rows: Rows (or resolved records) in the order they should appear.

    Returns:
        The CSV text, header included.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    # Minimal quoting only looks for "\n" in the line terminator, not a bare "\r"
    quote_all = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_ALL)
    writer.writerow(REPORT_COLUMNS)
    for item in rows:
        fields = _as_row(item).as_list()
        if any("\r" in value for value in fields):
            quote_all.writerow(fields)
        else:
            writer.writerow(fields)
    return buffer.getvalue()


def decode(text: str) -> list[ReportRow]:
    """Parse report text back into rows.

    Blank lines are skipped; anything else that is not a four-column row
    under the canonical header is rejected.

    Args:
        text: Report text.

    Returns:
        Rows in file order.

    Raises:
        ParseError: If the header is missing or wrong, a row has the wrong
            number of fields, or the CSV itself is malformed.
    """
    reader = csv.reader(io.StringIO(text.removeprefix("\ufeff"), newline=""), strict=True)
    rows: list[ReportRow] = []
    try:
        header = next(reader, None)
        if header is None:
            raise ParseError("missing header row", line=1)
        if tuple(header) != REPORT_COLUMNS:
            raise ParseError(
                f"expected header {','.join(REPORT_COLUMNS)!r}, found {','.join(header)!r}",
                line=1,
            )

        for fields in reader:
            if not fields:
                continue
            if len(fields) != len(REPORT_COLUMNS):
                raise ParseError(
                    f"expected {len(REPORT_COLUMNS)} fields, found {len(fields)}",
                    line=reader.line_num,
                )
            rows.append(ReportRow(*fields))
    except csv.Error as e:
        raise ParseError(str(e), line=reader.line_num) from e

    return rows


class CsvReporter(BaseReporter):
    """Reporter for the canonical LICENSE-3rdparty.csv file."""

    def render(self, rows: Sequence[ReportRow]) -> str:
        return encode(rows)

    def read(self, path: Path) -> tuple[str, list[ReportRow]]:
        """Read an existing report.

        Args:
            path: Report file.

        Returns:
            Tuple of (raw text, parsed rows).

        Raises:
            OSError: If the file cannot be read.
            ParseError: If the contents are not a valid report.
        """
        with open(path, "r", encoding="utf-8", newline="") as f:
            text = f.read()
        logger.debug("Read %d bytes from %s", len(text), path)
        return text, decode(text)

    @property
    def format_name(self) -> str:
        return "csv"

    @property
    def default_extension(self) -> str:
        return ".csv"
