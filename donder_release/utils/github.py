"""Contains utility functions for GitHub interactions."""

import re

REMOTE_URL_PATTERN = re.compile(r"^(?:git@|ssh://git@|https?://(?:[^@/]+@)?)(?P<host>[\w.\-]+)(?::\d+)?[/:](?P<owner>[\w.\-]+)/(?P<repo>[\w.\-]+?)(?:\.git)?/?$")
"""Pattern to match SSH and HTTPS git remote URLs."""


async def split_repository_in_configuration(repo: str | None) -> tuple[str, str]:
    """Splits the repository in the configuration into owner and repository."""
    if repo is None:
        raise ValueError("A repository in the format 'owner/repo' is required.")
    repo = repo.strip("/")
    parts = repo.split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError("Repository must be in the format 'owner/repo' with no leading/trailing slashes or extra parts.")
    owner, repository = parts
    return owner, repository


def parse_remote_url(url: str) -> tuple[str, str, str] | None:
    """Extract host, owner and repository name from a git remote URL."""
    match = REMOTE_URL_PATTERN.match(url.strip())
    if match is None:
        return None
    return match.group("host"), match.group("owner"), match.group("repo")


def web_url_from_api_url(github_api_url: str) -> str:
    """Derive the web base URL from the API URL.

    e.g. "https://api.github.com" -> "https://github.com"
    or "https://github.example.com/api/v3" -> "https://github.example.com"
    """
    github_api_url = github_api_url.rstrip("/")
    if "api.github.com" in github_api_url:
        return "https://github.com"
    # For GitHub Enterprise, remove /api/v3 suffix
    return github_api_url.replace("/api/v3", "").replace("/api", "")
