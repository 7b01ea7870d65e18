"""Data models for version bump decisions."""

from dataclasses import dataclass
from enum import Enum

from .semver import SemVer


class VersionBump(str, Enum):
    """Magnitude of a version increase."""

    NONE = "none"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @property
    def precedence(self) -> int:
        """Rank used to pick the largest bump of a set."""
        return BUMP_PRECEDENCE[self]


BUMP_PRECEDENCE = {
    VersionBump.NONE: 0,
    VersionBump.PATCH: 1,
    VersionBump.MINOR: 2,
    VersionBump.MAJOR: 3,
}


@dataclass(frozen=True)
class VersionResolution:
    """A release is needed: the bump and the version it leads to."""

    bump: VersionBump
    current_version: SemVer
    next_version: SemVer


@dataclass(frozen=True)
class NoReleaseNeeded:
    """No commit in the range warrants a release. This is a normal outcome."""

    current_version: SemVer
    reason: str = "No releasable commits found"
