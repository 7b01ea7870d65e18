"""Reconciled configuration of a release run."""

from dataclasses import dataclass, field
from pathlib import Path

from donder_release.commits.models import CommitType
from donder_release.utils.constants import (
    DEFAULT_GITHUB_API_URL,
    DEFAULT_RELEASE_MESSAGE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TAG_PREFIX,
    PLACEHOLDER_REPOSITORY,
)
from donder_release.utils.github import web_url_from_api_url
from donder_release.versioning.files import VersionFile
from donder_release.versioning.models import VersionBump
from donder_release.versioning.resolver import DEFAULT_RELEASE_TYPES


@dataclass
class ReleaseConfig:
    """Configuration class for a donder-release run.

    repo is None only for dry runs of a repository whose GitHub counterpart
    is unknown; links in the notes then point at a placeholder repository.
    """

    repo: str | None
    repository_path: Path = Path(".")
    github_api_url: str = DEFAULT_GITHUB_API_URL
    github_token: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    from_ref: str | None = None
    to_ref: str | None = None
    dry_run: bool = False
    draft: bool = False
    prerelease: bool = False
    overwrite: bool = False
    tag_prefix: str = DEFAULT_TAG_PREFIX
    pre_id: str | None = None
    release_types: dict[CommitType, VersionBump] = field(default_factory=lambda: dict(DEFAULT_RELEASE_TYPES))
    section_titles: dict[CommitType, str] = field(default_factory=dict)
    include_unknown: bool = False
    zero_major_breaking_bump: VersionBump = VersionBump.MAJOR
    changelog_file: Path | None = None
    version_files: list[VersionFile] = field(default_factory=list)
    release_message: str | None = DEFAULT_RELEASE_MESSAGE
    clean_pre_releases: bool = False
    debug: bool = False

    @property
    def repository_url(self) -> str:
        """Web URL of the repository, used for links in the release notes."""
        repo = self.repo or PLACEHOLDER_REPOSITORY
        return f"{web_url_from_api_url(self.github_api_url)}/{repo.strip('/')}"

    def release_commit_message(self, tag_name: str) -> str | None:
        """Message of the commit recording the release files, None when disabled."""
        if not self.release_message:
            return None
        return self.release_message.replace("%s", tag_name)
