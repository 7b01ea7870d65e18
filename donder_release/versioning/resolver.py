"""Resolves the next release version from a set of parsed commits."""

from typing import Iterable, Mapping

import structlog

from donder_release.commits.models import CommitType, ParsedCommit
from donder_release.git.models import Tag

from .models import NoReleaseNeeded, VersionBump, VersionResolution
from .semver import ZERO_VERSION, SemVer, parse_tag

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

DEFAULT_RELEASE_TYPES: Mapping[CommitType, VersionBump] = {
    CommitType.FEAT: VersionBump.MINOR,
    CommitType.FIX: VersionBump.PATCH,
    CommitType.PERF: VersionBump.PATCH,
    CommitType.REVERT: VersionBump.PATCH,
}
"""Bump triggered by each commit type when no configuration overrides it."""


def commit_bump(commit: ParsedCommit, release_types: Mapping[CommitType, VersionBump] = DEFAULT_RELEASE_TYPES) -> VersionBump:
    """Return the bump a single commit asks for."""
    if commit.type is CommitType.UNKNOWN:
        return VersionBump.NONE
    if commit.breaking:
        return VersionBump.MAJOR
    return release_types.get(commit.type, VersionBump.NONE)


def determine_bump(
    commits: Iterable[ParsedCommit],
    release_types: Mapping[CommitType, VersionBump] = DEFAULT_RELEASE_TYPES,
) -> VersionBump:
    """Return the largest bump asked for by any commit. Independent of commit order."""
    bump = VersionBump.NONE
    for commit in commits:
        candidate = commit_bump(commit, release_types)
        if candidate.precedence > bump.precedence:
            bump = candidate
    return bump


def _next_prerelease(current: SemVer, bump: VersionBump, pre_id: str) -> SemVer:
    """Compute the next prerelease version for the given prerelease id."""
    if not current.is_prerelease:
        return current.bump(bump.value).with_prerelease(pre_id, 0)
    base = current.without_prerelease()
    if current.prerelease_id == pre_id and len(current.prerelease) > 1 and current.prerelease[1].isdigit():
        return base.with_prerelease(pre_id, int(current.prerelease[1]) + 1)
    return base.with_prerelease(pre_id, 0)


def resolve_next_version(
    current_version: SemVer | None,
    commits: Iterable[ParsedCommit],
    *,
    release_types: Mapping[CommitType, VersionBump] = DEFAULT_RELEASE_TYPES,
    pre_id: str | None = None,
    zero_major_breaking_bump: VersionBump = VersionBump.MAJOR,
) -> VersionResolution | NoReleaseNeeded:
    """Decide the bump and the next version for a set of commits.

    Args:
        current_version: Version of the previous release, 0.0.0 when there is none.
        commits: Parsed commits since the previous release.
        release_types: Bump triggered by each commit type.
        pre_id: Optional prerelease identifier (e.g. alpha, beta, rc).
        zero_major_breaking_bump: Bump applied to breaking changes while the
            major version is 0. MAJOR keeps the regular table.

    Returns:
        A VersionResolution, or NoReleaseNeeded when no commit warrants a release.
    """
    current = current_version or ZERO_VERSION
    bump = determine_bump(commits, release_types)
    if bump is VersionBump.NONE:
        logger.info("No releasable commits found", current_version=str(current))
        return NoReleaseNeeded(current_version=current)

    if bump is VersionBump.MAJOR and current.major == 0 and zero_major_breaking_bump is not VersionBump.MAJOR:
        logger.info("Breaking change before 1.0.0 downgraded", bump=zero_major_breaking_bump.value)
        bump = zero_major_breaking_bump

    if pre_id:
        next_version = _next_prerelease(current, bump, pre_id)
    elif current.is_prerelease:
        # Releasing without a prerelease id promotes the prerelease to its stable version.
        next_version = current.without_prerelease()
    else:
        next_version = current.bump(bump.value)

    logger.info("Resolved next version", bump=bump.value, current_version=str(current), next_version=str(next_version))
    return VersionResolution(bump=bump, current_version=current, next_version=next_version)


def select_current_version(tags: Iterable[Tag], tag_prefix: str, pre_id: str | None = None) -> tuple[Tag | None, SemVer]:
    """Pick the tag of the previous release.

    Stable version tags are always candidates; prerelease tags only count when
    their identifier matches pre_id. Tags that do not parse as versions are ignored.

    Returns:
        The selected tag (None when there is none) and its version (0.0.0 when there is none).
    """
    selected: tuple[Tag | None, SemVer] = (None, ZERO_VERSION)
    for tag in tags:
        version = parse_tag(tag.name, tag_prefix)
        if version is None:
            continue
        if version.is_prerelease and (pre_id is None or version.prerelease_id != pre_id):
            continue
        if selected[0] is None or version > selected[1]:
            selected = (tag, version)
    return selected


def is_superseded_prerelease(tag_name: str, tag_prefix: str, version: SemVer) -> bool:
    """Whether a tag names a prerelease ranking below the given version."""
    tag_version = parse_tag(tag_name, tag_prefix)
    return tag_version is not None and tag_version.is_prerelease and tag_version < version
