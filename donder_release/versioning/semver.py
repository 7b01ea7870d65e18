"""Semantic version parsing, ordering and bumping."""

import re
from dataclasses import dataclass, field, replace
from functools import total_ordering

SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)(?:\.(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*))*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)
"""Pattern for a semantic version 2.0.0 string without prefix."""


@total_ordering
@dataclass(frozen=True)
class SemVer:
    """A semantic version. Ordering follows semver precedence and ignores build metadata."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = field(default_factory=tuple)
    build: tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += "-" + ".".join(self.prerelease)
        if self.build:
            version += "+" + ".".join(self.build)
        return version

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence_key() < other._precedence_key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence_key() == other._precedence_key()

    def __hash__(self) -> int:
        return hash(self._precedence_key())

    def _precedence_key(self) -> tuple[int, int, int, int, tuple[tuple[int, int, str], ...]]:
        # A release ranks above any of its prereleases; numeric ids rank below alphanumeric ones.
        identifiers = tuple((0, int(part), "") if part.isdigit() else (1, 0, part) for part in self.prerelease)
        return (self.major, self.minor, self.patch, 0 if self.prerelease else 1, identifiers)

    @property
    def is_prerelease(self) -> bool:
        """Whether the version carries prerelease identifiers."""
        return bool(self.prerelease)

    @property
    def prerelease_id(self) -> str | None:
        """The leading prerelease identifier, e.g. 'beta' for 1.0.0-beta.2."""
        return self.prerelease[0] if self.prerelease else None

    def bump(self, kind: str) -> "SemVer":
        """Return the next stable version for a major, minor or patch bump."""
        match kind:
            case "major":
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise ValueError(f"Unexpected bump kind: {kind}")

    def without_prerelease(self) -> "SemVer":
        """Return the same version with prerelease and build metadata removed."""
        return replace(self, prerelease=(), build=())

    def with_prerelease(self, pre_id: str, number: int = 0) -> "SemVer":
        """Return the same base version with a `<pre_id>.<number>` prerelease."""
        return SemVer(self.major, self.minor, self.patch, prerelease=(pre_id, str(number)))

    def to_tag(self, prefix: str = "v") -> str:
        """Format the version as a tag name."""
        return f"{prefix}{self}"


ZERO_VERSION = SemVer(0, 0, 0)
"""Version assumed when no previous release exists."""


def parse_version(text: str) -> SemVer:
    """Parse a semantic version string such as '1.2.3-rc.1+build.5'.

    Raises:
        ValueError: If the text is not a valid semantic version.
    """
    match = SEMVER_PATTERN.match(text.strip())
    if match is None:
        raise ValueError(f"Invalid semantic version: {text!r}")
    major, minor, patch, prerelease, build = match.groups()
    return SemVer(
        int(major),
        int(minor),
        int(patch),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=tuple(build.split(".")) if build else (),
    )


def parse_tag(tag_name: str, prefix: str) -> SemVer | None:
    """Parse a tag name carrying the given prefix, or return None when it is not a version tag."""
    if not tag_name.startswith(prefix):
        return None
    try:
        return parse_version(tag_name[len(prefix) :])
    except ValueError:
        return None
