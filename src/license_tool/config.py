"""Override configuration for license_tool.

The configuration file (``license-tool.toml`` by default) holds a single
``[overrides]`` table mapping a package name, or ``<name>-<version>``, to
replacement ``origin`` and/or ``license`` values::

    [overrides]
    "openssl" = { origin = "https://github.com/openssl/openssl" }
    "ring-0.17.8" = { license = "ISC AND MIT AND OpenSSL" }
"""

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional, Union

from license_tool.exceptions import ConfigError
from license_tool.models import Override, PackageIdentity

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "license-tool.toml"

_TOP_LEVEL_KEYS = frozenset({"overrides"})
_OVERRIDE_KEYS = ("origin", "license")


class OverrideStore:
    """Read-only lookup of package overrides.

    Built once at startup and passed explicitly to the resolver. For each
    field, a version-scoped entry wins over a bare-name entry.

    Attributes:
        source: Where the overrides were loaded from (for messages).
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, Override]] = None,
        source: str = "<defaults>",
    ) -> None:
        self._overrides = MappingProxyType(dict(overrides or {}))
        self.source = source

    def __len__(self) -> int:
        return len(self._overrides)

    @property
    def keys(self) -> list[str]:
        return sorted(self._overrides)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "OverrideStore":
        """Load overrides from a TOML file.

        A missing file is not an error: it simply means there are no
        overrides.

        Args:
            path: Path to the configuration file.

        Returns:
            The populated OverrideStore.

        Raises:
            ConfigError: If the file cannot be read or is malformed.
        """
        path = Path(path)
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            logger.debug("No override configuration at %s", path)
            return cls(source=str(path))
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Could not parse {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Could not load from {path}: {e}") from e

        return cls.from_dict(data, source=str(path))

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], source: str = "<dict>"
    ) -> "OverrideStore":
        """Build a store from an already-parsed configuration mapping.

        Args:
            data: Parsed configuration document.
            source: Name used in error messages.

        Returns:
            The populated OverrideStore.

        Raises:
            ConfigError: If the structure does not match the schema.
        """
        unknown = sorted(set(data) - _TOP_LEVEL_KEYS)
        if unknown:
            raise ConfigError(
                f"Unknown key(s) in {source}: {', '.join(unknown)}"
            )

        section = data.get("overrides", {})
        if not isinstance(section, Mapping):
            raise ConfigError(f"'overrides' in {source} must be a table")

        overrides: dict[str, Override] = {}
        for key, body in section.items():
            overrides[key] = _parse_override(key, body, source)

        logger.debug("Loaded %d override(s) from %s", len(overrides), source)
        return cls(overrides, source=source)

    def lookup(self, identity: PackageIdentity) -> list[Override]:
        """Find the overrides that apply to a package.

        Fields are meant to be taken from the first override that sets
        them, so a version-scoped entry can change the license while the
        bare-name entry still supplies the origin. Empty entries are left
        out.

        Args:
            identity: Package to look up.

        Returns:
            The "<name>-<version>" override followed by the bare-name
            override, each only if present and not empty.
        """
        keys = (f"{identity.name}-{identity.version}", identity.name)
        return [
            override
            for override in (self._overrides.get(key) for key in keys)
            if override is not None and not override.is_empty
        ]


def _parse_override(key: str, body: Any, source: str) -> Override:
    if not isinstance(body, Mapping):
        raise ConfigError(f"Override '{key}' in {source} must be a table")

    unknown = sorted(set(body) - set(_OVERRIDE_KEYS))
    if unknown:
        raise ConfigError(
            f"Unknown key(s) for override '{key}' in {source}: {', '.join(unknown)}"
        )

    for name in _OVERRIDE_KEYS:
        value = body.get(name)
        if value is not None and not isinstance(value, str):
            raise ConfigError(
                f"Override '{key}' in {source}: '{name}' must be a string"
            )

    override = Override(key=key, origin=body.get("origin"), license=body.get("license"))
    if override.is_empty:
        logger.debug("Override '%s' in %s sets nothing", key, source)
    return override
