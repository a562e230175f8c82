"""Base interface for metadata resolvers.

Resolvers turn raw dependency-graph entries into final report records,
merging in user overrides and on-disk copyright information.
"""

from abc import ABC, abstractmethod

from license_tool.models import RawPackageInfo, ResolutionReport, ResolvedRecord


class BaseResolver(ABC):
    """Abstract base class for metadata resolvers.

    Each package is resolved independently of every other package, so a
    batch can be fanned out freely as long as the result is put back into
    canonical order.
    """

    @abstractmethod
    def resolve(self, raw: RawPackageInfo) -> ResolvedRecord:
        """Resolve the final record for one package.

        Args:
            raw: Package metadata from the dependency graph.

        Returns:
            The resolved record.

        Raises:
            ResolutionError: If a required field cannot be resolved.
        """
        ...

    @abstractmethod
    async def resolve_batch(
        self, packages: list[RawPackageInfo], fail_fast: bool = False
    ) -> ResolutionReport:
        """Resolve a whole dependency graph.

        Args:
            packages: Every package to resolve.
            fail_fast: Raise on the first failure instead of collecting.

        Returns:
            Records in canonical order plus every failure encountered.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the resolver name for logging/debugging."""
        ...
