"""Unit tests for the release run state machine."""

from dataclasses import replace
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from donder_release.configuration.exceptions import ConfigurationError
from donder_release.configuration.models import ReleaseConfig
from donder_release.exceptions import AuthorizationError, RepositoryAccessError
from donder_release.git.models import Tag
from donder_release.release.models import PublishOutcome, RunContext, RunState
from donder_release.release.orchestrator import ReleaseOrchestrator, merge_tags, parse_stage, render_stage, resolve_stage
from donder_release.release.publisher import ReleasePublisher
from donder_release.release.results import ExitCode
from donder_release.versioning.files import VersionFile, VersionFileTarget
from donder_release.versioning.semver import SemVer

from .fakes import FakeCommitReader, FakeReleaseHost


def make_orchestrator(reader: FakeCommitReader, host: FakeReleaseHost | None, config: ReleaseConfig) -> ReleaseOrchestrator:
    """Build an orchestrator over the fakes."""
    publisher = ReleasePublisher(host) if host is not None else None
    return ReleaseOrchestrator(reader, publisher, config)


@pytest.mark.asyncio
async def test_run_publishes_first_release(release_config: ReleaseConfig) -> None:
    """Test a full run from an untagged history to a published release."""
    reader = FakeCommitReader(["chore: init", "feat(api): add x", "fix: correct y"])
    host = FakeReleaseHost()
    result = await make_orchestrator(reader, host, release_config).run()

    assert result.state is RunState.DONE
    assert result.exit_code is ExitCode.SUCCESS
    assert reader.read_calls == [(None, reader.commits[-1].hash, True)]
    release = host.releases["v0.1.0"]
    assert release.body.startswith("## v0.1.0 (2026-10-03)\n")
    assert "- **api:** add x" in release.body
    assert result.context.publish_result is not None
    assert result.context.publish_result.outcome is PublishOutcome.CREATED
    assert "v0.1.0 created" in result.message


@pytest.mark.asyncio
async def test_run_bumps_from_previous_tag(release_config: ReleaseConfig) -> None:
    """Test that commits are read from the latest version tag."""
    reader = FakeCommitReader(["feat: one", "fix: two", "fix: three"])
    reader.tags = [Tag("v1.2.3", reader.commits[0].hash), Tag("unrelated", reader.commits[1].hash)]
    host = FakeReleaseHost(tags=list(reader.tags))
    result = await make_orchestrator(reader, host, release_config).run()

    assert result.state is RunState.DONE
    assert result.context.plan is not None
    assert result.context.plan.tag_name == "v1.2.4"
    assert len(result.context.plan.commits) == 2
    assert "compare/v1.2.3...v1.2.4" in host.releases["v1.2.4"].body


@pytest.mark.asyncio
async def test_no_release_needed_never_publishes(release_config: ReleaseConfig) -> None:
    """Test that a range without releasable commits ends without touching the publisher."""
    reader = FakeCommitReader(["feat: one", "docs: readme", "chore: deps"])
    reader.tags = [Tag("v1.0.0", reader.commits[0].hash)]
    host = FakeReleaseHost()
    orchestrator = make_orchestrator(reader, host, release_config)
    assert orchestrator.publisher is not None
    orchestrator.publisher.publish = AsyncMock()  # type: ignore[method-assign]

    result = await orchestrator.run()

    assert result.state is RunState.NO_RELEASE_NEEDED
    assert result.exit_code is ExitCode.SUCCESS
    orchestrator.publisher.publish.assert_not_awaited()
    assert "No release needed" in result.message


@pytest.mark.asyncio
async def test_empty_commit_range_needs_no_release(release_config: ReleaseConfig) -> None:
    """Test that an empty commit set reaches NO_RELEASE_NEEDED."""
    reader = FakeCommitReader(["feat: one"])
    reader.tags = [Tag("v1.0.0", reader.commits[0].hash)]
    host = FakeReleaseHost()
    result = await make_orchestrator(reader, host, release_config).run()
    assert result.state is RunState.NO_RELEASE_NEEDED
    assert result.context.raw_commits == ()
    assert host.create_calls == 0


@pytest.mark.asyncio
async def test_dry_run_stops_after_render(release_config: ReleaseConfig) -> None:
    """Test that a dry run renders the plan without publishing."""
    reader = FakeCommitReader(["feat: one"])
    host = FakeReleaseHost()
    config = replace(release_config, dry_run=True)
    result = await make_orchestrator(reader, host, config).run()

    assert result.state is RunState.DONE
    assert result.context.plan is not None
    assert result.context.publish_result is None
    assert host.create_calls == 0
    assert result.message.startswith("Dry run: would release v0.1.0")


@pytest.mark.asyncio
async def test_dry_run_without_host_uses_local_tags(release_config: ReleaseConfig) -> None:
    """Test that a dry run works without a release host."""
    reader = FakeCommitReader(["feat: one", "feat: two"])
    reader.tags = [Tag("v0.1.0", reader.commits[0].hash)]
    config = replace(release_config, dry_run=True, github_token=None)
    result = await make_orchestrator(reader, None, config).run()
    assert result.context.plan is not None
    assert result.context.plan.tag_name == "v0.2.0"


@pytest.mark.asyncio
async def test_rerun_at_same_ref_is_idempotent(release_config: ReleaseConfig) -> None:
    """Test that running twice at the same toRef publishes a single release."""
    reader = FakeCommitReader(["feat: one", "fix: two"])
    host = FakeReleaseHost()

    first = await make_orchestrator(reader, host, release_config).run()
    second = await make_orchestrator(reader, host, release_config).run()

    assert first.state is RunState.DONE
    assert second.state is RunState.NO_RELEASE_NEEDED
    assert host.create_calls == 1
    assert list(host.releases) == ["v0.1.0"]


@pytest.mark.asyncio
async def test_rerun_with_stale_tags_is_a_no_op(release_config: ReleaseConfig) -> None:
    """Test that a run that does not see the new tag still never double-publishes."""
    reader = FakeCommitReader(["feat: one"])
    host = FakeReleaseHost()
    await make_orchestrator(reader, host, release_config).run()
    # Hide the tag so the second run plans the same release again.
    host.tags = []

    result = await make_orchestrator(reader, host, release_config).run()

    assert result.state is RunState.DONE
    assert result.context.publish_result is not None
    assert result.context.publish_result.outcome is PublishOutcome.UNCHANGED
    assert len(host.releases) == 1
    assert "already published" in result.message


@pytest.mark.asyncio
async def test_duplicate_release_fails_with_exit_code(release_config: ReleaseConfig) -> None:
    """Test that an existing release with other notes ends in FAILED."""
    reader = FakeCommitReader(["feat: one"])
    host = FakeReleaseHost()
    await host.create_release("v0.1.0", "v0.1.0", "hand written notes")
    result = await make_orchestrator(reader, host, release_config).run()
    assert result.state is RunState.FAILED
    assert result.exit_code is ExitCode.DUPLICATE_RELEASE
    assert "--overwrite" in result.message


@pytest.mark.asyncio
async def test_host_errors_end_in_failed(release_config: ReleaseConfig) -> None:
    """Test that host errors are mapped to their exit code."""
    reader = FakeCommitReader(["feat: one"])
    host = FakeReleaseHost()
    host.create_release = AsyncMock(side_effect=AuthorizationError("Bad credentials", status_code=401))  # type: ignore[method-assign]
    result = await make_orchestrator(reader, host, release_config).run()
    assert result.state is RunState.FAILED
    assert isinstance(result.context.error, AuthorizationError)
    assert result.exit_code is ExitCode.AUTHORIZATION_ERROR


@pytest.mark.asyncio
async def test_unresolvable_ref_is_repository_error(release_config: ReleaseConfig) -> None:
    """Test that a bad toRef fails with a repository error."""
    reader = FakeCommitReader(["feat: one"])
    config = replace(release_config, to_ref="does-not-exist")
    result = await make_orchestrator(reader, FakeReleaseHost(), config).run()
    assert result.state is RunState.FAILED
    assert isinstance(result.context.error, RepositoryAccessError)
    assert result.exit_code is ExitCode.REPOSITORY_ERROR


@pytest.mark.asyncio
async def test_publish_without_host_is_configuration_error(release_config: ReleaseConfig) -> None:
    """Test that publishing without a release host fails as a configuration error."""
    reader = FakeCommitReader(["feat: one"])
    result = await make_orchestrator(reader, None, release_config).run()
    assert result.state is RunState.FAILED
    assert isinstance(result.context.error, ConfigurationError)
    assert result.exit_code is ExitCode.CONFIGURATION_ERROR


@pytest.mark.asyncio
async def test_changelog_file_is_written_after_publish(release_config: ReleaseConfig, tmp_path: Path) -> None:
    """Test that the notes are prepended to the configured changelog file."""
    reader = FakeCommitReader(["feat: one"])
    config = replace(release_config, repository_path=tmp_path, changelog_file=Path("CHANGELOG.md"))
    result = await make_orchestrator(reader, FakeReleaseHost(), config).run()
    assert result.state is RunState.DONE
    assert "## v0.1.0" in (tmp_path / "CHANGELOG.md").read_text(encoding="utf-8")


@pytest.mark.asyncio
async def test_step_walks_the_states(release_config: ReleaseConfig) -> None:
    """Test the sequence of states of a publishing run."""
    reader = FakeCommitReader(["fix: one"])
    orchestrator = make_orchestrator(reader, FakeReleaseHost(), release_config)
    context = RunContext()
    states = [context.state]
    while not context.is_terminal:
        context = await orchestrator.step(context)
        states.append(context.state)
    assert states == [
        RunState.START,
        RunState.READ_COMMITS,
        RunState.PARSE_COMMITS,
        RunState.RESOLVE_VERSION,
        RunState.RENDER_CHANGELOG,
        RunState.PUBLISH,
        RunState.DONE,
    ]


def test_pure_stages_are_deterministic(release_config: ReleaseConfig) -> None:
    """Test that parse, resolve and render give identical results for identical contexts."""
    reader = FakeCommitReader(["feat: one", "fix!: two"])
    context = RunContext(
        state=RunState.PARSE_COMMITS,
        to_sha=reader.commits[-1].hash,
        current_version=SemVer(1, 0, 0),
        previous_tag=Tag("v1.0.0", "0" * 40),
        raw_commits=tuple(reader.commits),
    )

    def run_pure_stages() -> RunContext:
        return render_stage(resolve_stage(parse_stage(context), release_config), release_config)

    first, second = run_pure_stages(), run_pure_stages()
    assert first == second
    assert first.state is RunState.PUBLISH
    assert first.plan is not None
    assert first.plan.tag_name == "v2.0.0"


def test_merge_tags_prefers_later_lists() -> None:
    """Test that remote tags override local tags of the same name."""
    local = [Tag("v1.0.0", "a" * 40), Tag("v1.1.0", "b" * 40)]
    remote = [Tag("v1.1.0", "c" * 40)]
    assert merge_tags(local, remote) == [Tag("v1.0.0", "a" * 40), Tag("v1.1.0", "c" * 40)]


@pytest.mark.asyncio
async def test_rerun_with_explicit_from_ref_is_idempotent(release_config: ReleaseConfig) -> None:
    """Test that an explicit fromRef does not publish toRef a second time."""
    reader = FakeCommitReader(["chore: init", "feat: one"])
    host = FakeReleaseHost()
    config = replace(release_config, from_ref=reader.commits[0].hash)

    first = await make_orchestrator(reader, host, config).run()
    second = await make_orchestrator(reader, host, config).run()

    assert first.state is RunState.DONE
    assert second.state is RunState.NO_RELEASE_NEEDED
    assert list(host.releases) == ["v0.1.0"]
    assert host.create_calls == 1
    assert "v0.1.0 already points at" in second.message


@pytest.mark.asyncio
async def test_prerelease_commit_can_be_promoted(release_config: ReleaseConfig) -> None:
    """Test that a prerelease tag on toRef does not block a stable release of it."""
    reader = FakeCommitReader(["feat: one"])
    reader.tags = [Tag("v0.1.0-beta.0", reader.commits[0].hash)]
    host = FakeReleaseHost(tags=list(reader.tags))
    result = await make_orchestrator(reader, host, release_config).run()
    assert result.state is RunState.DONE
    assert "v0.1.0" in host.releases


@pytest.mark.asyncio
async def test_draft_rerun_is_idempotent(release_config: ReleaseConfig) -> None:
    """Test that a draft, which leaves no tag behind, is not created twice."""
    reader = FakeCommitReader(["feat: one"])
    host = FakeReleaseHost()
    config = replace(release_config, draft=True)

    await make_orchestrator(reader, host, config).run()
    second = await make_orchestrator(reader, host, config).run()

    assert host.tags == []
    assert second.state is RunState.DONE
    assert second.context.publish_result is not None
    assert second.context.publish_result.outcome is PublishOutcome.UNCHANGED
    assert host.create_calls == 1


@pytest.mark.asyncio
async def test_missing_tag_commit_suggests_fetching_history(release_config: ReleaseConfig) -> None:
    """Test that a release tag whose commit is not in a shallow clone fails with a fetch hint."""
    reader = FakeCommitReader(["feat: one"])
    host = FakeReleaseHost(tags=[Tag("v1.0.0", "f" * 40)])
    result = await make_orchestrator(reader, host, release_config).run()
    assert result.state is RunState.FAILED
    assert result.exit_code is ExitCode.REPOSITORY_ERROR
    assert "release tag v1.0.0" in result.message
    assert "fetch-depth: 0" in result.message
    assert host.create_calls == 0


@pytest.mark.asyncio
async def test_version_files_are_bumped_and_committed(release_config: ReleaseConfig, tmp_path: Path) -> None:
    """Test that manifests and the changelog are written and committed after publishing."""
    (tmp_path / "package.json").write_text('{"name": "widgets", "version": "0.0.0"}', encoding="utf-8")
    reader = FakeCommitReader(["feat: one"])
    host = FakeReleaseHost()
    config = replace(
        release_config,
        repository_path=tmp_path,
        changelog_file=Path("CHANGELOG.md"),
        version_files=[VersionFile(VersionFileTarget.NPM, Path("."))],
    )

    result = await make_orchestrator(reader, host, config).run()

    assert result.state is RunState.DONE
    assert '"version": "0.1.0"' in (tmp_path / "package.json").read_text(encoding="utf-8")
    assert reader.release_commits == [([tmp_path / "package.json", tmp_path / "CHANGELOG.md"], "chore(release): v0.1.0")]
    # The release commit itself never triggers another release.
    rerun = await make_orchestrator(reader, host, config).run()
    assert rerun.state is RunState.NO_RELEASE_NEEDED
    assert len(reader.release_commits) == 1


@pytest.mark.asyncio
async def test_release_commit_can_be_disabled(release_config: ReleaseConfig, tmp_path: Path) -> None:
    """Test that an empty release message writes the files without committing them."""
    reader = FakeCommitReader(["feat: one"])
    config = replace(release_config, repository_path=tmp_path, changelog_file=Path("CHANGELOG.md"), release_message=None)
    result = await make_orchestrator(reader, FakeReleaseHost(), config).run()
    assert result.state is RunState.DONE
    assert (tmp_path / "CHANGELOG.md").exists()
    assert reader.release_commits == []


@pytest.mark.asyncio
async def test_missing_version_file_fails_before_publishing(release_config: ReleaseConfig, tmp_path: Path) -> None:
    """Test that a missing manifest is reported without publishing a release."""
    reader = FakeCommitReader(["feat: one"])
    host = FakeReleaseHost()
    config = replace(release_config, repository_path=tmp_path, version_files=[VersionFile(VersionFileTarget.PUB, Path("app"))])
    result = await make_orchestrator(reader, host, config).run()
    assert result.state is RunState.FAILED
    assert result.exit_code is ExitCode.REPOSITORY_ERROR
    assert host.create_calls == 0
    assert reader.release_commits == []


def prerelease_history() -> tuple[FakeCommitReader, FakeReleaseHost]:
    """A history with a stable release, a superseded beta and a later release candidate."""
    reader = FakeCommitReader(["feat: a", "feat: b", "fix: c"])
    reader.tags = [
        Tag("v0.1.0", reader.commits[0].hash),
        Tag("v0.2.0-beta.0", reader.commits[1].hash),
        Tag("v0.3.0-rc.0", reader.commits[1].hash),
    ]
    return reader, FakeReleaseHost(tags=list(reader.tags))


@pytest.mark.asyncio
async def test_stable_release_cleans_superseded_prereleases(release_config: ReleaseConfig) -> None:
    """Test that a stable release removes the prereleases below it."""
    reader, host = prerelease_history()
    await host.create_release("v0.2.0-beta.0", "v0.2.0-beta.0", "beta notes", prerelease=True)
    config = replace(release_config, clean_pre_releases=True)

    result = await make_orchestrator(reader, host, config).run()

    assert result.state is RunState.DONE
    assert result.context.plan is not None
    assert result.context.plan.tag_name == "v0.2.0"
    assert sorted(host.releases) == ["v0.2.0"]
    assert host.deleted_tags == ["v0.2.0-beta.0"]
    assert [tag.name for tag in reader.tags] == ["v0.1.0", "v0.3.0-rc.0"]


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [{"draft": True}, {"pre_id": "beta"}, {"clean_pre_releases": False}])
async def test_prereleases_are_kept(release_config: ReleaseConfig, overrides: dict[str, object]) -> None:
    """Test that drafts, prerelease runs and the default configuration keep prereleases."""
    reader, host = prerelease_history()
    config = replace(release_config, clean_pre_releases=True)
    config = replace(config, **overrides)  # type: ignore[arg-type]

    await make_orchestrator(reader, host, config).run()

    assert host.deleted_tags == []
    assert host.deleted_releases == []
    assert "v0.2.0-beta.0" in [tag.name for tag in reader.tags]
