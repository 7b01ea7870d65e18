"""Utility modules for shared functionality."""

from .constants import (
    CHANGELOG_FILE_HEADER,
    DEFAULT_CONFIG_FILE,
    DEFAULT_GITHUB_API_URL,
    DEFAULT_TAG_PREFIX,
)
from .retry import retry_on_transient_error

__all__ = [
    "CHANGELOG_FILE_HEADER",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_GITHUB_API_URL",
    "DEFAULT_TAG_PREFIX",
    "retry_on_transient_error",
]
