"""Helpers for integration tests."""

import os
import subprocess
from pathlib import Path


class GitRepository:
    """A throwaway git repository with deterministic commit dates."""

    def __init__(self, path: Path) -> None:
        """Initialize an empty repository at path."""
        self.path = path
        self.commit_count = 0
        self.git("init", "--quiet")
        self.git("config", "user.name", "Release Bot")
        self.git("config", "user.email", "release-bot@example.com")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")

    def git(self, *args: str) -> str:
        """Run a git command in the repository and return its output."""
        env = {**os.environ, "GIT_CONFIG_NOSYSTEM": "1"}
        date = f"2026-10-{max(1, min(self.commit_count, 28)):02d}T12:00:00+00:00"
        env["GIT_AUTHOR_DATE"] = date
        env["GIT_COMMITTER_DATE"] = date
        result = subprocess.run(["git", *args], cwd=self.path, env=env, capture_output=True, text=True, check=True)
        return result.stdout.strip()

    def commit(self, message: str) -> str:
        """Create an empty commit and return its hash."""
        self.commit_count += 1
        self.git("commit", "--allow-empty", "--quiet", "-m", message)
        return self.git("rev-parse", "HEAD")

    def tag(self, name: str, annotated: bool = False) -> None:
        """Tag HEAD."""
        if annotated:
            self.git("tag", "-a", name, "-m", f"Release {name}")
        else:
            self.git("tag", name)
