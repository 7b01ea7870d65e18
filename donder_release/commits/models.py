"""Data models for parsed conventional commits."""

from dataclasses import dataclass, field
from enum import Enum

from donder_release.git.models import RawCommit

BREAKING_CHANGE_KEYS = ("BREAKING CHANGE", "BREAKING-CHANGE")
"""Footer keys that mark a breaking change."""


class CommitType(str, Enum):
    """Enum for conventional commit types."""

    FEAT = "feat"
    FIX = "fix"
    PERF = "perf"
    REFACTOR = "refactor"
    REVERT = "revert"
    DOCS = "docs"
    STYLE = "style"
    TEST = "test"
    BUILD = "build"
    CI = "ci"
    CHORE = "chore"
    UNKNOWN = "unknown"

    @classmethod
    def from_token(cls, token: str) -> "CommitType":
        """Match a header type token case-insensitively, falling back to UNKNOWN."""
        try:
            commit_type = cls(token.lower())
        except ValueError:
            return cls.UNKNOWN
        return commit_type


@dataclass(frozen=True)
class Footer:
    """A trailing `key: value` or `key #value` line of a commit message."""

    key: str
    value: str
    separator: str = ": "


@dataclass(frozen=True)
class ParsedCommit:
    """A commit message broken down according to the conventional commit grammar."""

    type: CommitType
    description: str
    raw: RawCommit
    scope: str | None = None
    body: str | None = None
    footers: tuple[Footer, ...] = field(default_factory=tuple)
    breaking: bool = False
    # The header as written: type, scope text, `!` marker and the separator before the description.
    type_token: str | None = None
    scope_token: str | None = None
    header_breaking: bool = False
    separator: str = ": "

    @property
    def is_conventional(self) -> bool:
        """Whether the message followed the grammar with a recognized type."""
        return self.type is not CommitType.UNKNOWN

    @property
    def breaking_notes(self) -> list[str]:
        """Values of the BREAKING CHANGE footers, if any."""
        return [footer.value for footer in self.footers if footer.key in BREAKING_CHANGE_KEYS]

    def header(self) -> str:
        """Render the header line back from its parsed parts."""
        if not self.is_conventional:
            return self.description.splitlines()[0] if self.description else ""
        if self.scope_token is not None:
            scope = f"({self.scope_token})"
        else:
            scope = f"({self.scope})" if self.scope else ""
        marker = "!" if self.header_breaking else ""
        return f"{self.type_token or self.type.value}{scope}{marker}{self.separator}{self.description}"
