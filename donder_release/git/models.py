"""Data models for commits and tags read from a repository."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RawCommit:
    """A commit as recorded in the repository history."""

    hash: str
    message: str
    authored_at: datetime

    @property
    def short_hash(self) -> str:
        """Abbreviated hash used in changelog links."""
        return self.hash[:7]


@dataclass(frozen=True)
class Tag:
    """A tag name and the commit it points at."""

    name: str
    commit_sha: str
