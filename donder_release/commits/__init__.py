"""Conventional commit parsing."""

from .models import CommitType, Footer, ParsedCommit
from .parser import parse_commit, parse_commits

__all__ = ["CommitType", "Footer", "ParsedCommit", "parse_commit", "parse_commits"]
