"""
Version and loader parsing.

Turns user and catalog supplied strings into typed values: Minecraft
versions, release selectors and mod loader descriptors.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from packaging import version as pkg_version

from .exceptions import LoaderParseError, VersionParseError

_MC_VERSION_RE = re.compile(r'^(\d+)\.(\d+)(?:\.(\d+))?$')


@dataclass(frozen=True)
class McVersion:
    """A release Minecraft version such as ``1.19.2`` or ``1.20``."""

    major: int
    minor: int
    patch: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> 'McVersion':
        match = _MC_VERSION_RE.match(text.strip()) if isinstance(text, str) else None
        if match is None:
            raise VersionParseError(f"Invalid Minecraft version: {text!r}")
        major, minor, patch = match.groups()
        return cls(int(major), int(minor), int(patch) if patch is not None else None)

    def as_str(self) -> str:
        if self.patch is None:
            return f"{self.major}.{self.minor}"
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_packaging(self) -> pkg_version.Version:
        return pkg_version.Version(self.as_str())

    def __str__(self) -> str:
        return self.as_str()


# Version selectors

@dataclass(frozen=True)
class Latest:
    """Select the release the catalog marks as the main file."""


@dataclass(frozen=True)
class ExplicitFileId:
    """Select a release by numeric file id, keeping the text for name search fallback."""

    file_id: int
    text: str


@dataclass(frozen=True)
class NameFragment:
    """Select the first release whose display name contains ``text``."""

    text: str


VersionSelector = Union[Latest, ExplicitFileId, NameFragment]


def parse_selector(text: str) -> VersionSelector:
    """Derive a selector from a user string.

    ``latest`` (any case) selects the main file, a string of digits is a
    file id, and anything else is a display name fragment.
    """
    if text.lower() == "latest":
        return Latest()
    if text.isascii() and text.isdigit():
        return ExplicitFileId(int(text), text)
    return NameFragment(text)


# Mod loaders

class LoaderKind(Enum):
    FORGE = "forge"
    FABRIC = "fabric"
    QUILT = "quilt"
    NEOFORGE = "neoforge"


@dataclass(frozen=True)
class LoaderDescriptor:
    kind: LoaderKind
    version: str

    def __str__(self) -> str:
        return f"{self.kind.value}-{self.version}"


# Longer names first so "neoforge" is not taken for "forge"
_LOADER_PREFIXES = (
    ("neoforge", LoaderKind.NEOFORGE),
    ("forge", LoaderKind.FORGE),
    ("fabric", LoaderKind.FABRIC),
    ("quilt", LoaderKind.QUILT),
)


def parse_loader_id(loader_id: str) -> LoaderDescriptor:
    """Parse a loader id token like ``forge-43.2.21`` or ``fabric-0.14.21``.

    The name is everything before the first dash and the version is the
    rest. A name that is not an exact loader name is matched by prefix.
    """
    token = loader_id.strip() if isinstance(loader_id, str) else ""
    name, _, loader_version = token.partition("-")
    name = name.lower()

    if not name or not loader_version:
        raise LoaderParseError(f"Invalid mod loader id: {loader_id!r}")

    for kind in LoaderKind:
        if name == kind.value:
            return LoaderDescriptor(kind, loader_version)

    for prefix, kind in _LOADER_PREFIXES:
        if name.startswith(prefix):
            return LoaderDescriptor(kind, loader_version)

    raise LoaderParseError(f"Unsupported mod loader: {loader_id!r}")
