"""Reads commit history from a local git repository through the git executable."""

import subprocess
from datetime import datetime
from pathlib import Path

import structlog

from donder_release.exceptions import RepositoryAccessError

from .models import RawCommit, Tag

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

# ASCII unit and record separators keep multi-line commit bodies intact.
FIELD_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e"
LOG_FORMAT = f"%H{FIELD_SEPARATOR}%aI{FIELD_SEPARATOR}%B{RECORD_SEPARATOR}"

FETCH_HISTORY_HINT = "Fetch tags and full history (git fetch --tags --unshallow, or fetch-depth: 0 in CI)"


class GitCommitReader:
    """Read-only access to the commits and tags of a git work tree.

    Commits are always returned oldest-to-newest.
    """

    def __init__(self, path: Path | str = ".") -> None:
        """Initialize the reader for the repository at the given path."""
        self.path = Path(path)

    def _run_git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        """Run a git command inside the repository and return the completed process."""
        cmd = ["git", *args]
        logger.debug("Running git command", cmd=cmd, cwd=str(self.path))
        try:
            result = subprocess.run(cmd, cwd=self.path, capture_output=True, text=True, encoding="utf-8")
        except FileNotFoundError as exc:
            raise RepositoryAccessError(f"Unable to run git in {self.path.absolute()}: {exc}") from exc
        except NotADirectoryError as exc:
            raise RepositoryAccessError(f"Repository path is not a directory: {self.path.absolute()}") from exc
        if check and result.returncode != 0:
            raise RepositoryAccessError(
                f"git {' '.join(args)} failed with exit code {result.returncode}: {result.stderr.strip()}",
                stderr=result.stderr,
            )
        return result

    def ensure_repository(self) -> None:
        """Raise RepositoryAccessError unless the path is inside a git work tree."""
        if not self.path.exists():
            raise RepositoryAccessError(f"Repository path not found: {self.path.absolute()}")
        result = self._run_git("rev-parse", "--is-inside-work-tree", check=False)
        if result.returncode != 0 or result.stdout.strip() != "true":
            raise RepositoryAccessError(f"Not a git repository: {self.path.absolute()}", stderr=result.stderr)

    def resolve_ref(self, ref: str) -> str:
        """Resolve a tag, branch or commit hash to a full commit hash."""
        result = self._run_git("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}", check=False)
        if result.returncode != 0 or not result.stdout.strip():
            message = f"Unable to resolve reference '{ref}'"
            if self.is_shallow():
                message += f". The repository is a shallow clone. {FETCH_HISTORY_HINT}"
            raise RepositoryAccessError(message, stderr=result.stderr)
        return result.stdout.strip()

    def is_shallow(self) -> bool:
        """Whether the repository is a shallow clone."""
        result = self._run_git("rev-parse", "--is-shallow-repository", check=False)
        return result.stdout.strip() == "true"

    def latest_reachable_tag(self, ref: str = "HEAD") -> str | None:
        """Return the most recent tag reachable from ref, or None when there is none."""
        result = self._run_git("describe", "--tags", "--abbrev=0", ref, check=False)
        if result.returncode != 0:
            logger.debug("No tag reachable from reference", ref=ref, stderr=result.stderr.strip())
            return None
        return result.stdout.strip() or None

    def list_tags(self) -> list[Tag]:
        """List the tags of the repository with the commit each one points at."""
        self.ensure_repository()
        result = self._run_git("for-each-ref", "--format=%(refname:short) %(objectname) %(*objectname)", "refs/tags")
        tags: list[Tag] = []
        for line in result.stdout.splitlines():
            parts = line.split()
            if len(parts) < 2:
                continue
            # Annotated tags carry the peeled commit in the third column.
            commit_sha = parts[2] if len(parts) > 2 else parts[1]
            tags.append(Tag(name=parts[0], commit_sha=commit_sha))
        logger.debug("Listed local tags", count=len(tags))
        return tags

    def remote_url(self, remote: str = "origin") -> str | None:
        """Return the configured URL of a remote, or None when it is not set."""
        result = self._run_git("config", "--get", f"remote.{remote}.url", check=False)
        url = result.stdout.strip()
        return url or None

    def read_commits(self, from_ref: str | None = None, to_ref: str | None = None, *, from_root: bool = False) -> list[RawCommit]:
        """Read the commits in the range (from_ref, to_ref].

        Args:
            from_ref: Exclusive lower bound. Defaults to the latest tag reachable
                from to_ref, or the repository root when no tag exists.
            to_ref: Inclusive upper bound. Defaults to HEAD.
            from_root: Read every commit reachable from to_ref, ignoring tags.

        Returns:
            Commits ordered oldest-to-newest.

        Raises:
            RepositoryAccessError: If the path is not a repository or a reference
                cannot be resolved.
        """
        self.ensure_repository()
        to_ref = to_ref or "HEAD"
        to_sha = self.resolve_ref(to_ref)
        if from_ref is None and not from_root:
            from_ref = self.latest_reachable_tag(to_sha)

        if from_ref is None:
            revision_range = to_sha
        else:
            from_sha = self.resolve_ref(from_ref)
            revision_range = f"{from_sha}..{to_sha}"

        result = self._run_git("log", "--reverse", f"--format={LOG_FORMAT}", revision_range)
        commits = [self._parse_record(record) for record in result.stdout.split(RECORD_SEPARATOR) if record.strip()]
        logger.info("Read commits from repository", from_ref=from_ref, to_ref=to_ref, count=len(commits))
        return commits

    @staticmethod
    def _parse_record(record: str) -> RawCommit:
        """Parse a single record of the custom git log format."""
        commit_hash, authored_at, message = record.lstrip("\n").split(FIELD_SEPARATOR, 2)
        return RawCommit(
            hash=commit_hash.strip(),
            message=message.rstrip(),
            authored_at=datetime.fromisoformat(authored_at.strip()),
        )
