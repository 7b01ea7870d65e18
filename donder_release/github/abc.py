"""Base ABC for release hosts."""

from abc import ABC, abstractmethod

from donder_release.git.models import Tag

from .models import RemoteRelease


class ReleaseHostBase(ABC):
    """Narrow capability interface to the service hosting releases.

    Implementations translate transport failures into the errors of
    donder_release.exceptions and never retry.
    """

    @abstractmethod
    async def get_release_by_tag(self, tag_name: str) -> RemoteRelease | None:
        """Get the release for a tag, drafts included, or None when there is none."""
        pass

    @abstractmethod
    async def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        draft: bool = False,
        prerelease: bool = False,
        target_commitish: str | None = None,
    ) -> RemoteRelease:
        """Create a release, and its tag when missing.

        Raises ReleaseConflictError when the tag already has a release.
        """
        pass

    @abstractmethod
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
        pass

    @abstractmethod
    async def list_tags(self) -> list[Tag]:
        """List the repository tags with the commit each one points at."""
        pass

    @abstractmethod
    async def list_releases(self) -> list[RemoteRelease]:
        """List every release of the repository, drafts included."""
        pass

    @abstractmethod
    async def delete_release(self, release_id: int) -> None:
        """Delete a release. Deleting a release that is already gone is not an error."""
        pass

    @abstractmethod
    async def delete_tag(self, tag_name: str) -> None:
        """Delete a tag. Deleting a tag that is already gone is not an error."""
        pass
