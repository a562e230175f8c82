"""License Tool - third-party license report generator.

This package scans a project's dependency graph, resolves license, origin
and copyright information for every dependency, and writes or verifies
the canonical LICENSE-3rdparty.csv report.
"""

__version__ = "1.0.0"
__author__ = "license-tool contributors"

from license_tool.models import (
    ComparisonResult,
    FieldDifference,
    Override,
    PackageIdentity,
    RawPackageInfo,
    ReportRow,
    ResolutionReport,
    ResolvedRecord,
)

__all__ = [
    "__version__",
    "ComparisonResult",
    "FieldDifference",
    "Override",
    "PackageIdentity",
    "RawPackageInfo",
    "ReportRow",
    "ResolutionReport",
    "ResolvedRecord",
]
