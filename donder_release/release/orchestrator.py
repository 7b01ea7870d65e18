"""Orchestrates a release run as an explicit state machine.

A run moves through START, READ_COMMITS, PARSE_COMMITS, RESOLVE_VERSION,
RENDER_CHANGELOG and PUBLISH, ending in NO_RELEASE_NEEDED, DONE or FAILED.
The state of a RunContext names the stage that runs next. Parsing,
resolving and rendering are pure functions of the context. Only reading the
repository and publishing have side effects; publishing also writes the
release files to the work tree and commits them.
"""

from dataclasses import replace
from pathlib import Path

import structlog

from donder_release.changelog.file import ChangelogFileWriter
from donder_release.changelog.renderer import render_changelog
from donder_release.commits.parser import parse_commits
from donder_release.configuration.exceptions import ConfigurationError
from donder_release.configuration.models import ReleaseConfig
from donder_release.exceptions import DonderReleaseError, RepositoryAccessError
from donder_release.git.models import Tag
from donder_release.git.reader import FETCH_HISTORY_HINT
from donder_release.git.work_tree import GitWorkTree
from donder_release.versioning.files import VersionFileUpdate, prepare_version_files, write_version_files
from donder_release.versioning.models import NoReleaseNeeded, VersionResolution
from donder_release.versioning.resolver import is_superseded_prerelease, resolve_next_version, select_current_version
from donder_release.versioning.semver import SemVer

from .models import PublishOutcome, ReleasePlan, RunContext, RunState
from .publisher import ReleasePublisher
from .results import RunResult

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def merge_tags(*tag_sets: list[Tag]) -> list[Tag]:
    """Merge tag lists by name. Later lists win for tags present in several."""
    merged: dict[str, Tag] = {}
    for tags in tag_sets:
        for tag in tags:
            merged[tag.name] = tag
    return list(merged.values())


def parse_stage(context: RunContext) -> RunContext:
    """Parse the raw commits of the context."""
    parsed = parse_commits(context.raw_commits)
    return replace(context, state=RunState.RESOLVE_VERSION, parsed_commits=tuple(parsed))


def resolve_stage(context: RunContext, config: ReleaseConfig) -> RunContext:
    """Resolve the next version, or end the run when no release is needed."""
    resolution = resolve_next_version(
        context.current_version,
        context.parsed_commits,
        release_types=config.release_types,
        pre_id=config.pre_id,
        zero_major_breaking_bump=config.zero_major_breaking_bump,
    )
    if isinstance(resolution, NoReleaseNeeded):
        return replace(context, state=RunState.NO_RELEASE_NEEDED, resolution=resolution)
    return replace(context, state=RunState.RENDER_CHANGELOG, resolution=resolution)


def render_stage(context: RunContext, config: ReleaseConfig) -> RunContext:
    """Render the changelog and freeze the release plan."""
    resolution = context.resolution
    if not isinstance(resolution, VersionResolution) or context.to_sha is None:
        raise DonderReleaseError(f"Cannot render a changelog from state {context.state.value}")

    tag_name = resolution.next_version.to_tag(config.tag_prefix)
    previous_tag = context.previous_tag.name if context.previous_tag else None
    release_date = context.raw_commits[-1].authored_at.date() if context.raw_commits else None
    body = render_changelog(
        context.parsed_commits,
        tag_name=tag_name,
        repository_url=config.repository_url,
        previous_tag=previous_tag,
        release_date=release_date,
        section_titles=config.section_titles,
        include_unknown=config.include_unknown,
    )
    plan = ReleasePlan(
        from_ref=context.from_ref,
        to_ref=config.to_ref or "HEAD",
        next_version=resolution.next_version,
        bump=resolution.bump,
        commits=context.parsed_commits,
        changelog_body=body,
        tag_name=tag_name,
        previous_tag=previous_tag,
        to_sha=context.to_sha,
    )
    next_state = RunState.DONE if config.dry_run else RunState.PUBLISH
    return replace(context, state=next_state, plan=plan)


class ReleaseOrchestrator:
    """Runs a release from the repository history to the published release."""

    def __init__(self, work_tree: GitWorkTree, publisher: ReleasePublisher | None, config: ReleaseConfig) -> None:
        """Initialize the orchestrator.

        The publisher may be None for dry runs, which never publish.
        """
        self.work_tree = work_tree
        self.publisher = publisher
        self.config = config

    async def _start(self, context: RunContext) -> RunContext:
        """Check the repository and pin toRef to a commit."""
        self.work_tree.ensure_repository()
        to_sha = self.work_tree.resolve_ref(self.config.to_ref or "HEAD")
        return replace(context, state=RunState.READ_COMMITS, to_sha=to_sha)

    async def _known_tags(self) -> list[Tag]:
        """Local tags merged with the tags of the release host."""
        local_tags = self.work_tree.list_tags()
        if self.publisher is None:
            return local_tags
        return merge_tags(local_tags, await self.publisher.list_tags())

    def _released_at(self, tags: list[Tag], to_sha: str | None) -> tuple[Tag | None, SemVer]:
        """The release tag already pointing at toRef, if any.

        Prerelease tags only count for a run with the same prerelease id, so a
        prerelease commit can still be promoted to a stable release.
        """
        return select_current_version([tag for tag in tags if tag.commit_sha == to_sha], self.config.tag_prefix, self.config.pre_id)

    async def _read_commits(self, context: RunContext) -> RunContext:
        """Select the previous release and read the commits since it."""
        known_tags = await self._known_tags()
        released_tag, released_version = self._released_at(known_tags, context.to_sha)
        if released_tag is not None:
            logger.info("toRef is already released", tag_name=released_tag.name, to_sha=context.to_sha)
            reason = f"{released_tag.name} already points at {released_tag.commit_sha[:7]}"
            resolution = NoReleaseNeeded(current_version=released_version, reason=reason)
            return replace(
                context,
                state=RunState.NO_RELEASE_NEEDED,
                previous_tag=released_tag,
                current_version=released_version,
                resolution=resolution,
            )

        previous_tag, current_version = select_current_version(known_tags, self.config.tag_prefix, self.config.pre_id)
        from_ref = self.config.from_ref or (previous_tag.commit_sha if previous_tag else None)
        logger.info(
            "Selected previous release",
            previous_tag=previous_tag.name if previous_tag else None,
            current_version=str(current_version),
            from_ref=from_ref,
        )
        try:
            raw_commits = self.work_tree.read_commits(from_ref=from_ref, to_ref=context.to_sha, from_root=from_ref is None)
        except RepositoryAccessError as exc:
            if self.config.from_ref or previous_tag is None:
                raise
            raise RepositoryAccessError(
                f"Commit {previous_tag.commit_sha} of release tag {previous_tag.name} is not in the local repository. {FETCH_HISTORY_HINT}",
                stderr=exc.stderr,
            ) from exc
        return replace(
            context,
            state=RunState.PARSE_COMMITS,
            from_ref=from_ref,
            previous_tag=previous_tag,
            current_version=current_version,
            raw_commits=tuple(raw_commits),
        )

    def _resolve_path(self, path: Path) -> Path:
        return path if path.is_absolute() else Path(self.config.repository_path) / path

    def _record_release(self, plan: ReleasePlan, version_updates: list[VersionFileUpdate]) -> None:
        """Write the version and changelog files, then commit them."""
        written = write_version_files(version_updates)
        if self.config.changelog_file is not None:
            changelog_path = self._resolve_path(self.config.changelog_file)
            ChangelogFileWriter().write(changelog_path, plan.changelog_body)
            written.append(changelog_path)
        message = self.config.release_commit_message(plan.tag_name)
        if written and message:
            self.work_tree.commit_paths(written, message)

    async def _clean_pre_releases(self, publisher: ReleasePublisher, plan: ReleasePlan) -> None:
        """Remove the prereleases superseded by a stable release, remotely and locally."""
        await publisher.clean_pre_releases(plan.next_version, self.config.tag_prefix)
        for tag in self.work_tree.list_tags():
            if is_superseded_prerelease(tag.name, self.config.tag_prefix, plan.next_version):
                self.work_tree.delete_tag(tag.name)

    async def _publish(self, context: RunContext) -> RunContext:
        """Publish the plan, then record it in the work tree."""
        if self.publisher is None:
            raise ConfigurationError("Publishing requires a GitHub token. Provide one with --token or use --dry-run.")
        plan = context.plan
        if plan is None:
            raise DonderReleaseError("Cannot publish without a release plan")

        # Manifests are checked before publishing so a bad one never leaves a release without its files.
        version_updates = prepare_version_files(self.config.version_files, plan.next_version, Path(self.config.repository_path))
        result = await self.publisher.publish(plan, draft=self.config.draft, prerelease=self.config.prerelease)
        if result.outcome is not PublishOutcome.UNCHANGED:
            self._record_release(plan, version_updates)
        if self.config.clean_pre_releases and not self.config.draft and not plan.next_version.is_prerelease:
            await self._clean_pre_releases(self.publisher, plan)
        return replace(context, state=RunState.DONE, publish_result=result)

    async def step(self, context: RunContext) -> RunContext:
        """Run the stage named by the state of the context and return the next context.

        Errors of the release taxonomy end the run in FAILED with the error attached.
        """
        if context.is_terminal:
            return context
        logger.debug("Running release stage", state=context.state.value)
        try:
            match context.state:
                case RunState.START:
                    return await self._start(context)
                case RunState.READ_COMMITS:
                    return await self._read_commits(context)
                case RunState.PARSE_COMMITS:
                    return parse_stage(context)
                case RunState.RESOLVE_VERSION:
                    return resolve_stage(context, self.config)
                case RunState.RENDER_CHANGELOG:
                    return render_stage(context, self.config)
                case RunState.PUBLISH:
                    return await self._publish(context)
                case _:
                    raise DonderReleaseError(f"Unexpected run state: {context.state.value}")
        except DonderReleaseError as exc:
            logger.error("Release run failed", state=context.state.value, error=str(exc), error_type=type(exc).__name__)
            return replace(context, state=RunState.FAILED, error=exc)

    async def run(self, context: RunContext | None = None) -> RunResult:
        """Step the state machine until it reaches a terminal state."""
        context = context or RunContext()
        while not context.is_terminal:
            context = await self.step(context)
        logger.info("Release run finished", state=context.state.value)
        return RunResult(context, dry_run=self.config.dry_run)
