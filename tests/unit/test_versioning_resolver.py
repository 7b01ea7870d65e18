"""Unit tests for the version bump resolver."""

import random
from typing import Callable

import pytest

from donder_release.commits.models import CommitType, ParsedCommit
from donder_release.commits.parser import parse_commit
from donder_release.git.models import RawCommit, Tag
from donder_release.versioning.models import NoReleaseNeeded, VersionBump, VersionResolution
from donder_release.versioning.resolver import determine_bump, resolve_next_version, select_current_version
from donder_release.versioning.semver import SemVer, parse_version


@pytest.fixture
def parse(make_raw_commit: Callable[..., RawCommit]) -> Callable[..., list[ParsedCommit]]:
    """Parse a list of commit messages."""

    def _parse(*messages: str) -> list[ParsedCommit]:
        return [parse_commit(make_raw_commit(message)) for message in messages]

    return _parse


def test_feat_and_fix_bump_minor(parse: Callable[..., list[ParsedCommit]]) -> None:
    """Test that a feature and a fix on 1.2.3 lead to 1.3.0."""
    resolution = resolve_next_version(parse_version("1.2.3"), parse("feat: add x", "fix: correct y"))
    assert isinstance(resolution, VersionResolution)
    assert resolution.bump is VersionBump.MINOR
    assert str(resolution.next_version) == "1.3.0"


def test_breaking_fix_bumps_major(parse: Callable[..., list[ParsedCommit]]) -> None:
    """Test that a breaking fix on 1.2.3 leads to 2.0.0."""
    resolution = resolve_next_version(parse_version("1.2.3"), parse("fix!: break z"))
    assert isinstance(resolution, VersionResolution)
    assert resolution.bump is VersionBump.MAJOR
    assert str(resolution.next_version) == "2.0.0"


def test_fix_and_perf_bump_patch(parse: Callable[..., list[ParsedCommit]]) -> None:
    """Test that fixes and performance improvements bump patch."""
    assert determine_bump(parse("perf: faster")) is VersionBump.PATCH
    assert determine_bump(parse("fix: a", "docs: b")) is VersionBump.PATCH


def test_empty_commit_set_needs_no_release() -> None:
    """Test that no commits lead to NoReleaseNeeded from 0.0.0."""
    resolution = resolve_next_version(None, [])
    assert isinstance(resolution, NoReleaseNeeded)
    assert resolution.current_version == SemVer(0, 0, 0)


def test_non_releasable_commits_need_no_release(parse: Callable[..., list[ParsedCommit]]) -> None:
    """Test that docs, chores and unknown commits do not release."""
    resolution = resolve_next_version(parse_version("1.0.0"), parse("docs: readme", "chore: deps", "random message"))
    assert isinstance(resolution, NoReleaseNeeded)


def test_first_release_from_zero(parse: Callable[..., list[ParsedCommit]]) -> None:
    """Test that the first feature release is 0.1.0."""
    resolution = resolve_next_version(None, parse("feat: initial"))
    assert isinstance(resolution, VersionResolution)
    assert str(resolution.next_version) == "0.1.0"


@pytest.mark.parametrize(
    "others",
    [
        [],
        ["feat: a"],
        ["fix: b", "perf: c"],
        ["docs: d", "not conventional", "feat(x): e"],
    ],
)
def test_any_breaking_commit_forces_major(parse: Callable[..., list[ParsedCommit]], others: list[str]) -> None:
    """Test that a breaking commit always bumps major, whatever else is present."""
    for breaking in ["chore!: drop support", "docs: x\n\nBREAKING CHANGE: moved"]:
        assert determine_bump(parse(breaking, *others)) is VersionBump.MAJOR


def test_bump_is_independent_of_order(parse: Callable[..., list[ParsedCommit]]) -> None:
    """Test that shuffling the commits never changes the bump."""
    commits = parse("fix: a", "feat: b", "docs: c", "perf: d")
    expected = determine_bump(commits)
    shuffler = random.Random(7)
    for _ in range(10):
        shuffled = list(commits)
        shuffler.shuffle(shuffled)
        assert determine_bump(shuffled) is expected


def test_zero_major_follows_regular_table_by_default(parse: Callable[..., list[ParsedCommit]]) -> None:
    """Test that a breaking change on 0.x bumps major unless configured otherwise."""
    resolution = resolve_next_version(parse_version("0.4.1"), parse("feat!: new api"))
    assert isinstance(resolution, VersionResolution)
    assert str(resolution.next_version) == "1.0.0"


def test_zero_major_breaking_bump_minor(parse: Callable[..., list[ParsedCommit]]) -> None:
    """Test that a configured minor bump applies to breaking changes on 0.x only."""
    commits = parse("feat!: new api")
    zero = resolve_next_version(parse_version("0.4.1"), commits, zero_major_breaking_bump=VersionBump.MINOR)
    stable = resolve_next_version(parse_version("1.4.1"), commits, zero_major_breaking_bump=VersionBump.MINOR)
    assert isinstance(zero, VersionResolution) and isinstance(stable, VersionResolution)
    assert str(zero.next_version) == "0.5.0"
    assert str(stable.next_version) == "2.0.0"


def test_configured_release_types(parse: Callable[..., list[ParsedCommit]]) -> None:
    """Test that configured types trigger their bump."""
    release_types = {CommitType.FEAT: VersionBump.MINOR, CommitType.REFACTOR: VersionBump.PATCH}
    assert determine_bump(parse("refactor: tidy"), release_types) is VersionBump.PATCH
    assert determine_bump(parse("refactor: tidy")) is VersionBump.NONE


@pytest.mark.parametrize(
    ("current", "messages", "pre_id", "expected"),
    [
        ("1.2.3", ["feat: a"], "beta", "1.3.0-beta.0"),
        ("1.3.0-beta.0", ["fix: b"], "beta", "1.3.0-beta.1"),
        ("1.3.0-beta.4", ["feat: c"], "rc", "1.3.0-rc.0"),
        ("1.3.0-beta.4", ["fix: d"], None, "1.3.0"),
    ],
)
def test_prerelease_versions(
    parse: Callable[..., list[ParsedCommit]],
    current: str,
    messages: list[str],
    pre_id: str | None,
    expected: str,
) -> None:
    """Test prerelease numbering and promotion to a stable version."""
    resolution = resolve_next_version(parse_version(current), parse(*messages), pre_id=pre_id)
    assert isinstance(resolution, VersionResolution)
    assert str(resolution.next_version) == expected


def test_select_current_version() -> None:
    """Test that the latest stable tag is selected and prerelease tags only match their id."""
    tags = [
        Tag("v1.0.0", "a" * 40),
        Tag("v1.2.0", "b" * 40),
        Tag("v1.3.0-beta.1", "c" * 40),
        Tag("other-tag", "d" * 40),
        Tag("v1.10.0-rc.0", "e" * 40),
    ]
    assert select_current_version(tags, "v") == (tags[1], SemVer(1, 2, 0))
    assert select_current_version(tags, "v", pre_id="beta") == (tags[2], parse_version("1.3.0-beta.1"))
    assert select_current_version([], "v") == (None, SemVer(0, 0, 0))
