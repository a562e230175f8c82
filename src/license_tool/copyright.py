"""Copyright extraction from on-disk license files.

Looks through a package's source directory for conventionally named
license, notice and readme files and pulls out the first line that looks
like a copyright declaration.
"""

import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

# Searched in this order; matching is case-insensitive.
LICENSE_FILE_NAMES = (
    "LICENSE",
    "LICENSE.md",
    "LICENSE.txt",
    "LICENSE.rst",
    "LICENSE-APACHE",
    "LICENSE-MIT",
    "COPYING",
    "COPYING.txt",
    "NOTICE",
    "README",
    "README.md",
    "README.rst",
    "README.mdown",
    "README.markdown",
    "COPYRIGHT",
    "COPYRIGHT.txt",
)

# Subdirectory searched after the top level (wheel metadata 2.4 layout).
LICENSES_SUBDIR = "licenses"

# Anything that looks like a copyright declaration at the start of a
# (comment-stripped) line: "Copyright (c) 2019-2024 by Jane Doe".
COPYRIGHT_LINE = re.compile(
    r"^(?:[#*;/>-]+|\.\.)?\s*"
    r"(copyright\s+(?:©\s*|\(c\)\s*)?(?:(?:[0-9 ,-]|present)+\s+)?(?:by\s+)?.*)$",
    re.IGNORECASE,
)

# Boilerplate from license texts that names no owner.
COPYRIGHT_IGNORE = re.compile(
    r"^(?:copyright(?: and license)?$"
    r"|copyright (?:holder|owner|notice|license|statement|interest|disclaimer|law|protection)"
    r"|copyright & license -"
    r"|copyright .yyyy. .name of copyright owner"
    r"|copyright (?:\(c\) |© )?[\[<{](?:yyyy|year))",
    re.IGNORECASE,
)


def extract_copyright(text: str) -> Optional[str]:
    """Return the first copyright declaration in a block of text.

    Args:
        text: File contents.

    Returns:
        The matching line with surrounding whitespace removed, or None.
    """
    for line in text.splitlines():
        match = COPYRIGHT_LINE.match(line.strip())
        if not match:
            continue
        copyright = match.group(1).strip()
        if COPYRIGHT_IGNORE.match(copyright):
            continue
        return copyright
    return None


class LicenseFileScanner:
    """Finds copyright text in a package's license files.

    Scanning never fails: missing or unreadable directories and files
    simply yield no copyright.

    Attributes:
        file_names: Conventional file names, highest priority first.
    """

    def __init__(self, file_names: Sequence[str] = LICENSE_FILE_NAMES) -> None:
        self.file_names = tuple(file_names)
        self._priority = {}
        for index, name in enumerate(self.file_names):
            self._priority.setdefault(name.lower(), index)

    def scan(
        self,
        source_dir: Optional[Union[str, Path]],
        license_file: Optional[str] = None,
    ) -> Optional[str]:
        """Extract a copyright line from the files in source_dir.

        Args:
            source_dir: Package source directory.
            license_file: Optional license file declared by the package,
                relative to source_dir. Searched before anything else.

        Returns:
            The first copyright line found, or None.
        """
        if source_dir is None:
            return None

        source_dir = Path(source_dir)
        try:
            exists = source_dir.is_dir()
        except OSError as e:
            logger.warning("Could not access %s: %s", source_dir, e)
            return None
        if not exists:
            logger.warning("Source directory %s does not exist", source_dir)
            return None

        for path in self.candidates(source_dir, license_file):
            copyright = self._read_copyright(path)
            if copyright:
                logger.debug("Found copyright in %s", path)
                return copyright

        logger.debug("No copyright found under %s", source_dir)
        return None

    def candidates(
        self, source_dir: Path, license_file: Optional[str] = None
    ) -> list[Path]:
        """List the files to search, in the order they are searched.

        The declared license file comes first, then a file named exactly
        "LICENSE", then the remaining conventional names in priority order
        (ties broken by file name). The top-level directory is searched
        before its "licenses" subdirectory.

        Args:
            source_dir: Package source directory.
            license_file: Optional declared license file.

        Returns:
            Ordered list of existing candidate files.
        """
        ordered: list[Path] = []
        if license_file:
            declared = source_dir / license_file
            try:
                if declared.is_file():
                    ordered.append(declared)
            except OSError as e:
                logger.warning("Could not access %s: %s", declared, e)

        for directory in (source_dir, source_dir / LICENSES_SUBDIR):
            for path in self._list_directory(directory):
                if path not in ordered:
                    ordered.append(path)
        return ordered

    def _list_directory(self, directory: Path) -> list[Path]:
        try:
            if not directory.is_dir():
                return []
            entries = [
                path
                for path in directory.iterdir()
                if path.name.lower() in self._priority and path.is_file()
            ]
        except OSError as e:
            logger.warning("Could not list %s: %s", directory, e)
            return []

        return sorted(
            entries,
            key=lambda p: (
                p.name != "LICENSE",
                self._priority[p.name.lower()],
                p.name,
            ),
        )

    def _read_copyright(self, path: Path) -> Optional[str]:
        try:
            text = path.read_bytes().decode("utf-8", errors="replace")
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            return None
        return extract_copyright(text)
