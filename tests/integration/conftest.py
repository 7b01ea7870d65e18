"""Pytest configuration for integration tests.

These tests drive the real git executable against temporary repositories.
"""

from pathlib import Path

import pytest
from pytest import MonkeyPatch

from .utils import GitRepository


@pytest.fixture
def git_repository(tmp_path: Path, monkeypatch: MonkeyPatch) -> GitRepository:
    """An empty repository with an origin remote on GitHub."""
    monkeypatch.setenv("HOME", str(tmp_path))
    repository_path = tmp_path / "repository"
    repository_path.mkdir()
    repository = GitRepository(repository_path)
    repository.git("remote", "add", "origin", "git@github.com:octo/widgets.git")
    return repository
