"""Release host adapter for the githubkit library."""

from functools import wraps
from typing import Any, Awaitable, Callable, Self, TypeVar

import structlog
from githubkit import Response
from githubkit.exception import (
    PrimaryRateLimitExceeded,
    RequestError,
    RequestFailed,
    RequestTimeout,
    SecondaryRateLimitExceeded,
)
from githubkit.versions.latest.models import Release
from githubkit.versions.latest.models import Tag as GitHubTag

from donder_release.exceptions import (
    AuthorizationError,
    ReleaseConflictError,
    ReleaseHostError,
    TransientNetworkError,
    ValidationError,
)
from donder_release.git.models import Tag
from donder_release.utils.constants import DEFAULT_GITHUB_API_URL, DEFAULT_REQUEST_TIMEOUT, TRANSIENT_STATUS_CODES
from donder_release.utils.github import split_repository_in_configuration

from .abc import ReleaseHostBase
from .client import GitHubClient, get_github_client
from .models import RemoteRelease

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def _error_details(exc: RequestFailed) -> tuple[str, list[Any]]:
    """Extract the message and error list from a failed GitHub response."""
    try:
        error_data = exc.response.json()
    except ValueError:
        error_data = {}
    if not isinstance(error_data, dict):
        error_data = {}
    return error_data.get("message", str(exc)), error_data.get("errors", []) or []


def _is_already_exists(errors: list[Any]) -> bool:
    """Whether a 422 error list reports an existing resource."""
    return any(isinstance(error, dict) and error.get("code") == "already_exists" for error in errors)


def translate_github_errors(func: F) -> F:
    """Decorator translating githubkit exceptions into release host errors."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except (PrimaryRateLimitExceeded, SecondaryRateLimitExceeded) as exc:
            logger.warning("GitHub rate limit exceeded", function=func.__name__, error_type=type(exc).__name__)
            raise TransientNetworkError(f"GitHub rate limit exceeded in {func.__name__}", status_code=exc.response.status_code) from exc
        except RequestFailed as exc:
            status_code = exc.response.status_code
            message, errors = _error_details(exc)
            logger.error("GitHub request failed", function=func.__name__, status_code=status_code, message=message, errors=errors)
            if status_code in TRANSIENT_STATUS_CODES or (status_code == 403 and "rate limit" in message.lower()):
                raise TransientNetworkError(f"GitHub {status_code} error in {func.__name__}: {message}", status_code=status_code) from exc
            if status_code in (401, 403):
                raise AuthorizationError(f"GitHub {status_code} error in {func.__name__}: {message}", status_code=status_code) from exc
            if status_code == 422:
                if _is_already_exists(errors):
                    raise ReleaseConflictError(f"GitHub 422 error in {func.__name__}: {message} | errors: {errors}", status_code=422) from exc
                raise ValidationError(f"GitHub 422 error in {func.__name__}: {message} | errors: {errors}", status_code=422) from exc
            if status_code >= 500:
                raise TransientNetworkError(f"GitHub {status_code} error in {func.__name__}: {message}", status_code=status_code) from exc
            raise ReleaseHostError(f"GitHub {status_code} error in {func.__name__}: {message}", status_code=status_code) from exc
        except (RequestTimeout, RequestError) as exc:
            logger.warning("GitHub request did not complete", function=func.__name__, error=str(exc), error_type=type(exc).__name__)
            raise TransientNetworkError(f"GitHub request failed in {func.__name__}: {exc}") from exc

    return wrapper  # type: ignore


def _to_remote_release(release: Release) -> RemoteRelease:
    """Map a githubkit release model to a RemoteRelease."""
    return RemoteRelease(
        tag_name=release.tag_name,
        name=release.name or release.tag_name,
        body=release.body or "",
        is_draft=bool(release.draft),
        is_prerelease=bool(release.prerelease),
        id=release.id,
        html_url=release.html_url,
    )


class GitHubKitAdapter(ReleaseHostBase):
    """Release host adapter for the githubkit library."""

    def __init__(self, client: GitHubClient, owner: str, repo_name: str) -> None:
        """Initialize the adapter with an already-initialized client."""
        self.client = client
        self.owner = owner
        self.repo_name = repo_name

    def _omit_null_parameters(self, **kwargs: Any) -> dict[str, Any]:
        """Omit parameters that are None."""
        return {k: v for k, v in kwargs.items() if v is not None}

    @classmethod
    async def create(
        cls,
        repo: str,
        github_token: str | None,
        github_api_url: str = DEFAULT_GITHUB_API_URL,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> Self:
        """Create a new adapter.

        Args:
            repo: Repository in 'owner/repo' format
            github_token: Token used to authenticate
            github_api_url: GitHub API URL (defaults to https://api.github.com)
            request_timeout: Timeout in seconds of a single request

        Returns:
            Configured GitHubKitAdapter instance
        """
        owner, repo_name = await split_repository_in_configuration(repo=repo)
        logger.info(
            "Creating client for GitHub instance and repository",
            github_api_url=github_api_url,
            owner=owner,
            repo_name=repo_name,
        )
        client = get_github_client(github_token=github_token, github_api_url=github_api_url, request_timeout=request_timeout)
        return cls(client, owner, repo_name)

    @translate_github_errors
    async def get_release_by_tag(self, tag_name: str) -> RemoteRelease | None:
        """Get the release for a tag, or None when there is none.

        GitHub only answers published releases by tag, so after a 404 the
        draft releases are searched for the tag name.
        """
        try:
            response: Response[Release] = await self.client.rest.repos.async_get_release_by_tag(
                owner=self.owner,
                repo=self.repo_name,
                tag=tag_name,
            )
        except RequestFailed as exc:
            if exc.response.status_code != 404:
                raise
        else:
            return _to_remote_release(response.parsed_data)

        for release in await self.list_releases():
            if release.is_draft and release.tag_name == tag_name:
                logger.debug("Found draft release for tag", tag_name=tag_name, release_id=release.id)
                return release
        logger.debug("No release found for tag", tag_name=tag_name)
        return None

    @translate_github_errors
    async def list_releases(self, per_page: int = 100) -> list[RemoteRelease]:
        """List all releases for the repository, handling pagination."""
        all_releases: list[RemoteRelease] = []
        page: int = 1
        while True:
            response: Response[list[Release]] = await self.client.rest.repos.async_list_releases(
                owner=self.owner,
                repo=self.repo_name,
                per_page=per_page,
                page=page,
            )
            releases = response.parsed_data
            if not releases:
                break
            all_releases.extend(_to_remote_release(release) for release in releases)
            if len(releases) < per_page:
                break
            page += 1
        logger.debug("Listed releases", count=len(all_releases))
        return all_releases

    @translate_github_errors
    async def delete_release(self, release_id: int) -> None:
        """Delete a release. A 404 means it is already gone."""
        try:
            await self.client.rest.repos.async_delete_release(owner=self.owner, repo=self.repo_name, release_id=release_id)
        except RequestFailed as exc:
            if exc.response.status_code != 404:
                raise
            logger.debug("Release already deleted", release_id=release_id)
            return
        logger.info("Deleted release", release_id=release_id)

    @translate_github_errors
    async def delete_tag(self, tag_name: str) -> None:
        """Delete a tag reference. GitHub answers 422 or 404 when it is already gone."""
        try:
            await self.client.rest.git.async_delete_ref(owner=self.owner, repo=self.repo_name, ref=f"tags/{tag_name}")
        except RequestFailed as exc:
            if exc.response.status_code not in (404, 422):
                raise
            logger.debug("Tag already deleted", tag_name=tag_name)
            return
        logger.info("Deleted tag", tag_name=tag_name)

    @translate_github_errors
    async def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        draft: bool = False,
        prerelease: bool = False,
        target_commitish: str | None = None,
    ) -> RemoteRelease:
        """Create a release, and its tag on target_commitish when missing."""
        params = self._omit_null_parameters(
            tag_name=tag_name,
            name=name,
            body=body,
            draft=draft,
            prerelease=prerelease,
            target_commitish=target_commitish,
        )
        response: Response[Release] = await self.client.rest.repos.async_create_release(
            owner=self.owner,
            repo=self.repo_name,
            **params,
        )
        release = _to_remote_release(response.parsed_data)
        logger.info("Created release", tag_name=release.tag_name, html_url=release.html_url)
        return release

    @translate_github_errors
    async def update_release(
        self,
        release_id: int,
        tag_name: str,
        name: str,
        body: str,
        draft: bool = False,
        prerelease: bool = False,
    ) -> RemoteRelease:
        """Update an existing release."""
        response: Response[Release] = await self.client.rest.repos.async_update_release(
            owner=self.owner,
            repo=self.repo_name,
            release_id=release_id,
            tag_name=tag_name,
            name=name,
            body=body,
            draft=draft,
            prerelease=prerelease,
        )
        release = _to_remote_release(response.parsed_data)
        logger.info("Updated release", tag_name=release.tag_name, html_url=release.html_url)
        return release

    @translate_github_errors
    async def list_tags(self, per_page: int = 100) -> list[Tag]:
        """List all tags for the repository, handling pagination."""
        all_tags: list[Tag] = []
        page: int = 1
        while True:
            response: Response[list[GitHubTag]] = await self.client.rest.repos.async_list_tags(
                owner=self.owner,
                repo=self.repo_name,
                per_page=per_page,
                page=page,
            )
            tags = response.parsed_data
            if not tags:
                break
            all_tags.extend(Tag(name=tag.name, commit_sha=tag.commit.sha) for tag in tags)
            if len(tags) < per_page:
                break
            page += 1
        logger.debug("Listed remote tags", count=len(all_tags))
        return all_tags
