"""Data models for resources of the release host."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RemoteRelease:
    """A release as stored by the release host."""

    tag_name: str
    name: str
    body: str
    is_draft: bool = False
    is_prerelease: bool = False
    id: int | None = None
    html_url: str | None = None
