"""Sets up the authenticated githubkit client."""

from typing import TypeAlias

from githubkit import GitHub
from githubkit.auth import TokenAuthStrategy

from donder_release.configuration.exceptions import ConfigurationError
from donder_release.utils.constants import DEFAULT_GITHUB_API_URL, DEFAULT_REQUEST_TIMEOUT

GitHubClient: TypeAlias = GitHub[TokenAuthStrategy]

USER_AGENT = "donder-release"


def get_github_client(
    github_token: str | None,
    github_api_url: str = DEFAULT_GITHUB_API_URL,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> GitHubClient:
    """Returns a GitHub client authenticated with a token.

    Supports custom base URL for GitHub Enterprise Server (GHES). Each request
    is bounded by request_timeout seconds.
    """
    if not github_token:
        raise ConfigurationError("A GitHub token is required. Use --token or set GH_TOKEN or GITHUB_TOKEN.")
    # Disable HTTP caching to always get fresh data
    return GitHub(
        auth=TokenAuthStrategy(github_token),
        base_url=github_api_url,
        user_agent=USER_AGENT,
        timeout=request_timeout,
        http_cache=False,
    )
