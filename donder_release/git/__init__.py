"""Reading commit history from a local git repository, and recording releases in it."""

from .models import RawCommit, Tag
from .reader import GitCommitReader
from .work_tree import GitWorkTree

__all__ = ["GitCommitReader", "GitWorkTree", "RawCommit", "Tag"]
