"""Writes to a local git work tree: the release commit and tag removal."""

from pathlib import Path
from typing import Iterable

import structlog

from donder_release.exceptions import RepositoryAccessError

from .reader import GitCommitReader

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class GitWorkTree(GitCommitReader):
    """A git work tree that can also record the files a release touched."""

    def commit_paths(self, paths: Iterable[Path], message: str) -> str:
        """Commit the given paths, and only them, and return the new commit hash.

        Changes staged for other paths are left staged and out of the commit.

        Raises:
            RepositoryAccessError: If git refuses to add or commit the paths.
        """
        root = self.path.resolve()
        try:
            relative_paths = [str(Path(path).resolve().relative_to(root)) for path in paths]
        except ValueError as exc:
            raise RepositoryAccessError(f"Cannot commit files outside the repository {root}: {exc}") from exc
        self._run_git("add", "--", *relative_paths)
        self._run_git("commit", "--quiet", "--only", "-m", message, "--", *relative_paths)
        commit_hash = self.resolve_ref("HEAD")
        logger.info("Created release commit", commit=commit_hash, paths=relative_paths, message=message)
        return commit_hash

    def delete_tag(self, tag_name: str) -> None:
        """Delete a local tag."""
        self._run_git("tag", "--delete", tag_name)
        logger.info("Deleted local tag", tag_name=tag_name)
