"""Changelog rendering and changelog file maintenance."""

from .file import ChangelogFileWriter
from .renderer import group_commits, render_changelog

__all__ = ["ChangelogFileWriter", "group_commits", "render_changelog"]
