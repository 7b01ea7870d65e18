"""Semantic versions and next-version resolution."""

from .models import NoReleaseNeeded, VersionBump, VersionResolution
from .resolver import determine_bump, is_superseded_prerelease, resolve_next_version, select_current_version
from .semver import SemVer, parse_version

__all__ = [
    "NoReleaseNeeded",
    "SemVer",
    "VersionBump",
    "VersionResolution",
    "determine_bump",
    "is_superseded_prerelease",
    "parse_version",
    "resolve_next_version",
    "select_current_version",
]
