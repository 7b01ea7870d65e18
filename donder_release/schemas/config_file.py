"""Pydantic schema for the optional donder-release.yaml configuration file."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from donder_release.commits.models import CommitType
from donder_release.utils.constants import DEFAULT_RELEASE_MESSAGE, DEFAULT_TAG_PREFIX
from donder_release.versioning.files import VersionFileTarget
from donder_release.versioning.models import VersionBump

RESERVED_COMMIT_TYPES = frozenset({CommitType.FEAT, CommitType.FIX, CommitType.PERF, CommitType.REVERT})
"""Commit types whose bump is fixed. Only their section title can be changed."""


class ReleaseTypeModel(BaseModel):
    """Pydantic model for a commit type entry of the configuration file."""

    commit_type: CommitType
    bump: VersionBump | None = None
    section: str

    @field_validator("commit_type", mode="before")
    @classmethod
    def normalize_commit_type(cls, value: object) -> object:
        """Accept commit types in any case."""
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("section")
    @classmethod
    def section_is_not_empty(cls, value: str) -> str:
        """Reject empty section titles."""
        if not value.strip():
            raise ValueError("type section cannot be empty")
        return value.strip()

    @model_validator(mode="after")
    def check_bump(self) -> "ReleaseTypeModel":
        """Reserved types cannot declare a bump; other types need a minor or patch bump."""
        if self.commit_type is CommitType.UNKNOWN:
            raise ValueError("unknown is not a configurable commit type")
        if self.commit_type in RESERVED_COMMIT_TYPES:
            if self.bump is not None:
                raise ValueError(f"{self.commit_type.value} is a reserved type and cannot have a bump")
        elif self.bump not in (VersionBump.MINOR, VersionBump.PATCH):
            raise ValueError(f"{self.commit_type.value} must declare a minor or patch bump")
        return self


class BumpFileModel(BaseModel):
    """Pydantic model for a version file entry of the configuration file."""

    target: VersionFileTarget
    path: str | None = None
    build_metadata: bool = False

    @field_validator("target", mode="before")
    @classmethod
    def normalize_target(cls, value: object) -> object:
        """Accept targets in any case."""
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("path")
    @classmethod
    def normalize_path(cls, value: str | None) -> str | None:
        """Strip the path. The root marker `<root>` and an empty path mean the repository root."""
        if value is None:
            return None
        value = value.strip().replace("<root>", "").lstrip("/")
        return value or None


class ConfigFileModel(BaseModel):
    """Pydantic model for the whole configuration file."""

    # Files written for other versions of the tool may carry extra keys.
    model_config = ConfigDict(extra="ignore")

    tag_prefix: str = DEFAULT_TAG_PREFIX
    changelog_file: str | None = None
    types: list[ReleaseTypeModel] = Field(default_factory=list)
    include_unknown: bool = False
    zero_major_breaking_bump: VersionBump = VersionBump.MAJOR
    bump_files: list[BumpFileModel] = Field(default_factory=list)
    release_message: str | None = DEFAULT_RELEASE_MESSAGE
    clean_pre_releases: bool = False

    @field_validator("zero_major_breaking_bump")
    @classmethod
    def zero_major_bump_is_major_or_minor(cls, value: VersionBump) -> VersionBump:
        """Breaking changes before 1.0.0 bump either major or minor."""
        if value not in (VersionBump.MAJOR, VersionBump.MINOR):
            raise ValueError("zero_major_breaking_bump must be major or minor")
        return value

    @field_validator("changelog_file")
    @classmethod
    def empty_changelog_file_is_none(cls, value: str | None) -> str | None:
        """An empty changelog_file disables the changelog file."""
        return value or None

    @field_validator("release_message")
    @classmethod
    def empty_release_message_is_none(cls, value: str | None) -> str | None:
        """An empty release_message disables the release commit."""
        return value if value and value.strip() else None
