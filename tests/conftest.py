"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from license_tool.models import PackageIdentity, RawPackageInfo, ResolvedRecord

MIT_LICENSE = """MIT License

Copyright (c) 2020 Jane Doe

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction.
"""


@pytest.fixture
def identity() -> PackageIdentity:
    """Return a sample package identity."""
    return PackageIdentity("left-pad", "1.3.0")


@pytest.fixture
def package_dir(tmp_path: Path) -> Path:
    """Return a package source directory holding an MIT LICENSE file."""
    directory = tmp_path / "left-pad"
    directory.mkdir()
    (directory / "LICENSE").write_text(MIT_LICENSE)
    return directory


@pytest.fixture
def raw_package(identity: PackageIdentity, package_dir: Path) -> RawPackageInfo:
    """Return fully populated raw metadata for left-pad."""
    return RawPackageInfo(
        identity=identity,
        declared_license="MIT",
        homepage="https://left-pad.io",
        repository="https://github.com/left-pad/left-pad",
        source_dir=package_dir,
    )


@pytest.fixture
def records() -> list[ResolvedRecord]:
    """Return resolved records in canonical order."""
    return [
        ResolvedRecord(
            name="anyhow",
            version="1.0.86",
            license="MIT OR Apache-2.0",
            origin="https://github.com/dtolnay/anyhow",
            copyright="Copyright (c) David Tolnay",
        ),
        ResolvedRecord(
            name="serde",
            version="1.0.203",
            license="MIT OR Apache-2.0",
            origin="https://github.com/serde-rs/serde",
            copyright="",
        ),
    ]


@pytest.fixture
def graph_file(tmp_path: Path, package_dir: Path) -> Path:
    """Return a dependency graph JSON file with two packages."""
    path = tmp_path / "deps.json"
    path.write_text(
        json.dumps(
            {
                "packages": [
                    {
                        "name": "left-pad",
                        "version": "1.3.0",
                        "license": "MIT",
                        "repository": "https://github.com/left-pad/left-pad.git",
                        "source_dir": package_dir.name,
                    },
                    {
                        "name": "Zlib-Wrapper",
                        "version": "0.2.0",
                        "license": "Zlib",
                        "homepage": "https://example.org/zlib-wrapper",
                    },
                ]
            }
        )
    )
    return path
