"""Renders parsed commits into the markdown body of a release."""

from datetime import date
from typing import Iterable, Mapping

import jinja2
import structlog
from pydantic import BaseModel

from donder_release.commits.models import CommitType, ParsedCommit
from donder_release.utils.constants import CHANGELOG_TEMPLATE_NAME
from donder_release.utils.templates import (
    TEMPLATES_DIRECTORY,
    construct_jinja2_environment,
    construct_jinja2_template_from_file,
    render_template_with_model,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

BREAKING_CHANGES_TITLE = "Breaking Changes"

SECTION_ORDER: tuple[CommitType, ...] = (
    CommitType.FEAT,
    CommitType.FIX,
    CommitType.PERF,
    CommitType.REFACTOR,
    CommitType.REVERT,
    CommitType.DOCS,
    CommitType.STYLE,
    CommitType.TEST,
    CommitType.BUILD,
    CommitType.CI,
    CommitType.CHORE,
    CommitType.UNKNOWN,
)
"""Order of the type sections, after the breaking changes section."""

DEFAULT_SECTION_TITLES: Mapping[CommitType, str] = {
    CommitType.FEAT: "Features",
    CommitType.FIX: "Bug Fixes",
    CommitType.PERF: "Performance Improvements",
    CommitType.REFACTOR: "Code Refactoring",
    CommitType.REVERT: "Reverts",
    CommitType.DOCS: "Documentation",
    CommitType.STYLE: "Styles",
    CommitType.TEST: "Tests",
    CommitType.BUILD: "Build System",
    CommitType.CI: "Continuous Integration",
    CommitType.CHORE: "Miscellaneous Chores",
    CommitType.UNKNOWN: "Other Changes",
}


class ChangelogEntry(BaseModel):
    """A single bullet of the changelog."""

    scope: str | None = None
    description: str
    short_hash: str
    commit_url: str


class ChangelogSection(BaseModel):
    """A heading and its bullets."""

    title: str
    entries: list[ChangelogEntry]


class ChangelogContext(BaseModel):
    """Everything the changelog template needs."""

    tag_name: str
    compare_url: str | None = None
    release_date: str | None = None
    sections: list[ChangelogSection]


def _entry_for(commit: ParsedCommit, repository_url: str) -> ChangelogEntry:
    lines = commit.description.splitlines()
    return ChangelogEntry(
        scope=commit.scope,
        description=lines[0].strip() if lines else "",
        short_hash=commit.raw.short_hash,
        commit_url=f"{repository_url}/commit/{commit.raw.hash}",
    )


def group_commits(
    commits: Iterable[ParsedCommit],
    repository_url: str,
    section_titles: Mapping[CommitType, str] | None = None,
    include_unknown: bool = False,
) -> list[ChangelogSection]:
    """Group commits into sections in their fixed priority order.

    Breaking commits are listed only in the breaking changes section. Within a
    section commits keep their input order. Empty sections are dropped.
    """
    titles = {**DEFAULT_SECTION_TITLES, **(section_titles or {})}
    breaking: list[ChangelogEntry] = []
    by_type: dict[CommitType, list[ChangelogEntry]] = {commit_type: [] for commit_type in SECTION_ORDER}
    for commit in commits:
        if commit.type is CommitType.UNKNOWN and not include_unknown:
            continue
        entry = _entry_for(commit, repository_url)
        if commit.breaking:
            breaking.append(entry)
        else:
            by_type[commit.type].append(entry)

    sections: list[ChangelogSection] = []
    if breaking:
        sections.append(ChangelogSection(title=BREAKING_CHANGES_TITLE, entries=breaking))
    for commit_type in SECTION_ORDER:
        if by_type[commit_type]:
            sections.append(ChangelogSection(title=titles[commit_type], entries=by_type[commit_type]))
    return sections


def load_changelog_template() -> jinja2.Template:
    """Load the changelog template shipped with the package."""
    environment = construct_jinja2_environment(trim_blocks=True, lstrip_blocks=True, autoescape=False)
    return construct_jinja2_template_from_file(TEMPLATES_DIRECTORY / CHANGELOG_TEMPLATE_NAME, environment)


def render_changelog(
    commits: Iterable[ParsedCommit],
    *,
    tag_name: str,
    repository_url: str,
    previous_tag: str | None = None,
    release_date: date | None = None,
    section_titles: Mapping[CommitType, str] | None = None,
    include_unknown: bool = False,
) -> str:
    """Render the markdown release notes for a version.

    Args:
        commits: Parsed commits included in the release.
        tag_name: Tag of the release being rendered.
        repository_url: Web URL of the repository, used for commit and compare links.
        previous_tag: Tag of the previous release; adds a compare link to the heading.
        release_date: Date printed next to the heading.
        section_titles: Overrides for the section heading of each commit type.
        include_unknown: Whether commits that do not follow the grammar are listed.

    Returns:
        The markdown body. Identical input always yields identical output.
    """
    sections = group_commits(commits, repository_url, section_titles, include_unknown)
    context = ChangelogContext(
        tag_name=tag_name,
        compare_url=f"{repository_url}/compare/{previous_tag}...{tag_name}" if previous_tag else None,
        release_date=release_date.isoformat() if release_date else None,
        sections=sections,
    )
    body = render_template_with_model(context, load_changelog_template())
    logger.debug("Rendered changelog", tag_name=tag_name, sections=[section.title for section in sections])
    return body
