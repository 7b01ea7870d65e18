"""Publishes a release plan to the release host."""

import structlog

from donder_release.exceptions import DuplicateReleaseError, ReleaseConflictError
from donder_release.git.models import Tag
from donder_release.github.abc import ReleaseHostBase
from donder_release.github.models import RemoteRelease
from donder_release.utils.retry import retry_on_transient_error
from donder_release.versioning.resolver import is_superseded_prerelease
from donder_release.versioning.semver import SemVer

from .models import PublishOutcome, PublishResult, ReleasePlan

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class ReleasePublisher:
    """Creates or updates the remote release of a plan.

    Every host call is retried on transient failures. Any other error is
    raised to the caller untouched.
    """

    def __init__(self, host: ReleaseHostBase, overwrite: bool = False) -> None:
        """Initialize the publisher with a release host."""
        self.host = host
        self.overwrite = overwrite

    @retry_on_transient_error()
    async def _get_release(self, tag_name: str) -> RemoteRelease | None:
        return await self.host.get_release_by_tag(tag_name)

    @retry_on_transient_error()
    async def _create_release(self, plan: ReleasePlan, draft: bool, prerelease: bool) -> RemoteRelease:
        return await self.host.create_release(
            tag_name=plan.tag_name,
            name=plan.tag_name,
            body=plan.changelog_body,
            draft=draft,
            prerelease=prerelease,
            target_commitish=plan.to_sha,
        )

    @retry_on_transient_error()
    async def _update_release(self, release_id: int, plan: ReleasePlan, draft: bool, prerelease: bool) -> RemoteRelease:
        return await self.host.update_release(
            release_id=release_id,
            tag_name=plan.tag_name,
            name=plan.tag_name,
            body=plan.changelog_body,
            draft=draft,
            prerelease=prerelease,
        )

    @retry_on_transient_error()
    async def list_tags(self) -> list[Tag]:
        """List the tags known to the release host."""
        return await self.host.list_tags()

    @retry_on_transient_error()
    async def _list_releases(self) -> list[RemoteRelease]:
        return await self.host.list_releases()

    @retry_on_transient_error()
    async def _delete_release(self, release_id: int) -> None:
        await self.host.delete_release(release_id)

    @retry_on_transient_error()
    async def _delete_tag(self, tag_name: str) -> None:
        await self.host.delete_tag(tag_name)

    async def clean_pre_releases(self, version: SemVer, tag_prefix: str) -> list[str]:
        """Delete the prereleases superseded by a release, and their tags.

        Only prereleases ranking below version are touched, so a later
        prerelease line is kept.

        Returns:
            Names of the prerelease tags removed from the host, sorted.
        """
        removed: set[str] = set()
        for release in await self._list_releases():
            if release.id is None or not is_superseded_prerelease(release.tag_name, tag_prefix, version):
                continue
            await self._delete_release(release.id)
            removed.add(release.tag_name)
        for tag in await self.list_tags():
            if is_superseded_prerelease(tag.name, tag_prefix, version):
                await self._delete_tag(tag.name)
                removed.add(tag.name)
        logger.info("Cleaned prereleases", version=str(version), tags=sorted(removed))
        return sorted(removed)

    async def _handle_existing(self, existing: RemoteRelease, plan: ReleasePlan, draft: bool, prerelease: bool) -> PublishResult:
        """Decide what to do when the tag of the plan already has a release."""
        if existing.body == plan.changelog_body:
            logger.info("Release already published with identical notes", tag_name=plan.tag_name)
            return PublishResult(outcome=PublishOutcome.UNCHANGED, release=existing)
        if not self.overwrite or existing.id is None:
            logger.error("Release already exists", tag_name=plan.tag_name)
            raise DuplicateReleaseError(plan.tag_name)
        logger.info("Overwriting existing release", tag_name=plan.tag_name, release_id=existing.id)
        release = await self._update_release(existing.id, plan, draft, prerelease)
        return PublishResult(outcome=PublishOutcome.UPDATED, release=release)

    async def publish(self, plan: ReleasePlan, *, draft: bool = False, prerelease: bool = False) -> PublishResult:
        """Publish the release of a plan.

        The existing release is read before creating one. A create that
        conflicts with a release published in the meantime is handled as a
        duplicate, so concurrent runs never publish twice.

        Args:
            plan: The release plan to publish.
            draft: Publish the release as a draft.
            prerelease: Mark the release as a prerelease. Versions carrying
                prerelease identifiers are always marked.

        Returns:
            The outcome and the release as it exists on the host.

        Raises:
            DuplicateReleaseError: If a release with different notes exists and overwrite is off.
            AuthorizationError: If the host rejects the credential.
            ValidationError: If the host rejects the request.
            TransientNetworkError: If the host is still unavailable after the last retry.
        """
        prerelease = prerelease or plan.next_version.is_prerelease
        existing = await self._get_release(plan.tag_name)
        if existing is not None:
            return await self._handle_existing(existing, plan, draft, prerelease)

        try:
            release = await self._create_release(plan, draft, prerelease)
        except ReleaseConflictError:
            logger.warning("Release was created concurrently, re-reading it", tag_name=plan.tag_name)
            existing = await self._get_release(plan.tag_name)
            if existing is None:
                raise
            return await self._handle_existing(existing, plan, draft, prerelease)

        logger.info("Published release", tag_name=release.tag_name, html_url=release.html_url, draft=draft, prerelease=prerelease)
        return PublishResult(outcome=PublishOutcome.CREATED, release=release)
