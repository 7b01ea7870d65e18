"""Shared constants used across the application."""

# Configuration Constants
# -----------------------

DEFAULT_CONFIG_FILE = "donder-release.yaml"
"""Default path of the optional configuration file."""

DEFAULT_TAG_PREFIX = "v"
"""Default prefix of release tags."""

DEFAULT_RELEASE_MESSAGE = "chore(release): %s"
"""Message of the commit recording bumped files. %s is replaced with the release tag."""

PLACEHOLDER_REPOSITORY = "owner/repository"
"""Repository used for links when previewing a repository without a known GitHub remote."""

DEFAULT_GITHUB_API_URL = "https://api.github.com"
"""Default GitHub API URL."""

DEFAULT_REQUEST_TIMEOUT = 30.0
"""Default timeout in seconds of a single GitHub API request."""

CI_ENVIRONMENT_VARIABLES = (
    "CI",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "BUILDKITE",
    "CIRCLECI",
    "TRAVIS",
    "JENKINS_URL",
    "TF_BUILD",
)
"""Environment variables whose presence alone marks a CI run."""

# Changelog Constants
# -------------------

CHANGELOG_TEMPLATE_NAME = "changelog.md.j2"
"""Name of the Jinja2 template used for release notes."""

CHANGELOG_FILE_HEADER = "# CHANGELOG\n\n_This file is auto-generated by donder-release and should not be edited manually._"
"""Header expected at the top of a changelog file."""

# Retry Constants
# ---------------

TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
"""HTTP status codes worth retrying."""
