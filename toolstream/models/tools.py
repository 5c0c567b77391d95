"""Tools version and candidate models."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

_NUMBER_PATTERN = re.compile(r"^(\d{1,9})\.(\d{1,9})\.(\d{1,9})(?:\.(\d{1,9}))?$")
_BINARY_PATTERN = re.compile(
    r"^(\d{1,9}\.\d{1,9}\.\d{1,9}(?:\.\d{1,9})?)-([^-]+)-([^-]+)$"
)


class VersionNumber(BaseModel):
    """A ``major.minor.patch[.build]`` tools version number."""

    model_config = ConfigDict(frozen=True)

    major: int
    minor: int = 0
    patch: int = 0
    build: int = 0

    @classmethod
    def parse(cls, text: str) -> VersionNumber:
        """Parse a version number, raising ``ValueError`` if malformed."""
        match = _NUMBER_PATTERN.match(text)
        if match is None:
            raise ValueError(f"invalid version number {text!r}")
        major, minor, patch, build = match.groups()
        return cls(
            major=int(major),
            minor=int(minor),
            patch=int(patch),
            build=int(build or 0),
        )

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.major, self.minor, self.patch, self.build)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.build:
            text += f".{self.build}"
        return text


class BinaryVersion(BaseModel):
    """Version number plus the series and architecture a build targets."""

    model_config = ConfigDict(frozen=True)

    number: VersionNumber
    series: str
    arch: str

    @classmethod
    def parse(cls, text: str) -> BinaryVersion:
        """Parse ``<number>-<series>-<arch>``, e.g. ``1.2.3-precise-amd64``."""
        match = _BINARY_PATTERN.match(text)
        if match is None:
            raise ValueError(f"invalid binary version {text!r}")
        number, series, arch = match.groups()
        return cls(number=VersionNumber.parse(number), series=series, arch=arch)

    def __str__(self) -> str:
        return f"{self.number}-{self.series}-{self.arch}"


class ToolsFilter(BaseModel):
    """Constraints applied to discovered tools; unset fields match anything."""

    model_config = ConfigDict(frozen=True)

    number: VersionNumber | None = None
    series: str | None = None
    arch: str | None = None

    def matches(self, version: BinaryVersion) -> bool:
        if self.number is not None and version.number != self.number:
            return False
        if self.series is not None and version.series != self.series:
            return False
        if self.arch is not None and version.arch != self.arch:
            return False
        return True


class ArtifactCandidate(BaseModel):
    """A tools tarball found in storage, addressed by its retrieval URL."""

    model_config = ConfigDict(frozen=True)

    url: str
    version: BinaryVersion

    @property
    def number(self) -> VersionNumber:
        return self.version.number

    @property
    def series(self) -> str:
        return self.version.series

    @property
    def arch(self) -> str:
        return self.version.arch

    def sort_key(self) -> tuple:
        return (self.number.as_tuple(), self.series, self.arch, self.url)
