"""Contains the data models passed between the stages of a release run."""

from dataclasses import dataclass, field
from enum import Enum

from donder_release.commits.models import ParsedCommit
from donder_release.git.models import RawCommit, Tag
from donder_release.github.models import RemoteRelease
from donder_release.versioning.models import NoReleaseNeeded, VersionBump, VersionResolution
from donder_release.versioning.semver import SemVer


@dataclass(frozen=True)
class ReleasePlan:
    """Everything needed to publish one release. Built once per run."""

    from_ref: str | None
    to_ref: str
    next_version: SemVer
    bump: VersionBump
    commits: tuple[ParsedCommit, ...]
    changelog_body: str
    tag_name: str
    previous_tag: str | None = None
    to_sha: str | None = None


class PublishOutcome(str, Enum):
    """What the publisher did with the remote release."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class PublishResult:
    """The release as it exists on the host after publishing."""

    outcome: PublishOutcome
    release: RemoteRelease


class RunState(str, Enum):
    """States of the release run state machine."""

    START = "start"
    READ_COMMITS = "read_commits"
    PARSE_COMMITS = "parse_commits"
    RESOLVE_VERSION = "resolve_version"
    RENDER_CHANGELOG = "render_changelog"
    PUBLISH = "publish"
    NO_RELEASE_NEEDED = "no_release_needed"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = frozenset({RunState.NO_RELEASE_NEEDED, RunState.DONE, RunState.FAILED})


@dataclass(frozen=True)
class RunContext:
    """Value threaded through the transitions of a run.

    Each transition returns a new context; a context is never mutated.
    """

    state: RunState = RunState.START
    to_sha: str | None = None
    from_ref: str | None = None
    previous_tag: Tag | None = None
    current_version: SemVer | None = None
    raw_commits: tuple[RawCommit, ...] = field(default_factory=tuple)
    parsed_commits: tuple[ParsedCommit, ...] = field(default_factory=tuple)
    resolution: VersionResolution | NoReleaseNeeded | None = None
    plan: ReleasePlan | None = None
    publish_result: PublishResult | None = None
    error: Exception | None = None

    @property
    def is_terminal(self) -> bool:
        """Whether the run has ended."""
        return self.state in TERMINAL_STATES
