"""Resolvers turning raw dependency metadata into report records."""

from license_tool.resolvers.base import BaseResolver
from license_tool.resolvers.metadata import (
    MetadataResolver,
    normalize_license,
    normalize_origin,
)

__all__ = [
    "BaseResolver",
    "MetadataResolver",
    "normalize_license",
    "normalize_origin",
]
