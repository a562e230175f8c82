"""Exception hierarchy for license_tool."""

from typing import Optional

from license_tool.models import PackageIdentity


class LicenseToolError(Exception):
    """Base class for all errors raised by license_tool."""


class ConfigError(LicenseToolError):
    """Raised when the override configuration is malformed."""


class ParseError(LicenseToolError):
    """Raised when an existing report cannot be parsed.

    Attributes:
        line: 1-based line number of the offending record, if known.
    """

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class ResolutionError(LicenseToolError):
    """Raised when a package's metadata cannot be resolved.

    Attributes:
        identity: The package that failed to resolve.
    """

    def __init__(self, identity: PackageIdentity, message: str) -> None:
        super().__init__(f"Package {identity.name}-{identity.version} {message}")
        self.identity = identity


class MissingLicense(ResolutionError):
    """No license from either an override or the package itself."""

    def __init__(self, identity: PackageIdentity) -> None:
        super().__init__(identity, "is missing a license")


class MissingOrigin(ResolutionError):
    """No origin from an override, repository, VCS source or homepage."""

    def __init__(self, identity: PackageIdentity) -> None:
        super().__init__(identity, "is missing a repository")
