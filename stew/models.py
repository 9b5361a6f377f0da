"""Records kept in the stew lockfile."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

_PACKAGE_KEYS = (
    ("source", "source"),
    ("owner", "owner"),
    ("repo", "repo"),
    ("tag", "tag"),
    ("asset", "asset"),
    ("binary", "binary"),
    ("url", "url"),
    ("binary_hash", "binaryHash"),
)


def _as_str(value: Any, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"expected a string for {key!r}, got {type(value).__name__}")
    return value


def _as_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"expected an object for {what}, got {type(data).__name__}")
    return data


@dataclass
class PackageData:
    """One installed binary and where it came from."""

    source: str = ""
    owner: str = ""
    repo: str = ""
    tag: str = ""
    asset: str = ""
    binary: str = ""
    url: str = ""
    binary_hash: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "PackageData":
        """Build a package from its lockfile JSON object; missing keys become empty."""
        mapping = _as_mapping(data, "package")
        return cls(**{attr: _as_str(mapping.get(key), key) for attr, key in _PACKAGE_KEYS})

    def to_dict(self) -> dict[str, str]:
        """Return the lockfile JSON object for this package."""
        return {key: getattr(self, attr) for attr, key in _PACKAGE_KEYS}


@dataclass
class LockFile:
    """The contents of Stewfile.lock.json."""

    os: str = ""
    arch: str = ""
    packages: list[PackageData] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "LockFile":
        """Build a lockfile from its JSON object."""
        mapping = _as_mapping(data, "lockfile")
        raw_packages = mapping.get("packages")
        if raw_packages is None:
            raw_packages = []
        if not isinstance(raw_packages, list):
            raise ValueError("expected a list for 'packages'")
        return cls(
            os=_as_str(mapping.get("os"), "os"),
            arch=_as_str(mapping.get("arch"), "arch"),
            packages=[PackageData.from_dict(item) for item in raw_packages],
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object for this lockfile."""
        return {
            "os": self.os,
            "arch": self.arch,
            "packages": [pkg.to_dict() for pkg in self.packages],
        }

    def find_binary(self, binary_name: str) -> Optional[int]:
        """Return the index of the package providing binary_name, or None."""
        return next(
            (index for index, pkg in enumerate(self.packages) if pkg.binary == binary_name),
            None,
        )