"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from typer import Option
from typing_extensions import Annotated

from donder_release.configuration.config_file import write_default_config_file
from donder_release.configuration.driver import get_release_config
from donder_release.configuration.exceptions import ConfigurationError
from donder_release.exceptions import RepositoryAccessError
from donder_release.release.driver import run_release_workflow
from donder_release.release.models import ReleasePlan, RunState
from donder_release.release.results import ExitCode
from donder_release.utils.constants import DEFAULT_CONFIG_FILE
from donder_release.utils.logging import configure_logging, is_ci_environment

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False, add_completion=False)


def format_plan(plan: ReleasePlan) -> str:
    """Format a release plan for the dry-run output."""
    lines = [
        f"Next version: {plan.next_version} ({plan.bump.value} bump)",
        f"Tag: {plan.tag_name}",
        f"Range: {plan.from_ref or 'repository root'}..{plan.to_ref}",
        f"Commits: {len(plan.commits)}",
        "",
        plan.changelog_body,
    ]
    return "\n".join(lines)


@typer_app.command()
def release_cli(
    from_ref: Annotated[str | None, Option("--from", help="Exclusive start of the commit range. Defaults to the latest release tag.")] = None,
    to_ref: Annotated[str | None, Option("--to", help="Inclusive end of the commit range. Defaults to HEAD.")] = None,
    dry_run: Annotated[bool, Option("--dry-run", help="Print the release plan without publishing.")] = False,
    draft: Annotated[bool, Option("--draft", help="Publish the release as a draft.")] = False,
    prerelease: Annotated[bool, Option("--prerelease", help="Mark the release as a prerelease.")] = False,
    tag_prefix: Annotated[str | None, Option("--tag-prefix", help="Prefix of release tags. Defaults to 'v'.")] = None,
    token: Annotated[
        str | None,
        Option("--token", help="GitHub token. Falls back to the GH_TOKEN and GITHUB_TOKEN environment variables.", show_default=False),
    ] = None,
    repo: Annotated[str | None, Option("--repo", help="Repository in owner/name format. Inferred from the origin remote.")] = None,
    pre_id: Annotated[str | None, Option("--pre-id", help="Prerelease identifier, e.g. alpha, beta or rc.")] = None,
    overwrite: Annotated[bool, Option("--overwrite", help="Update the release when one already exists for the tag.")] = False,
    clean_pre_releases: Annotated[
        bool, Option("--clean-pre-releases", help="Delete prerelease tags and releases superseded by a stable release.")
    ] = False,
    config: Annotated[
        Path | None, Option("--config", help=f"Path to the configuration file. Defaults to {DEFAULT_CONFIG_FILE} when present.")
    ] = None,
    path: Annotated[Path, Option("--path", help="Path to the git repository.")] = Path("."),
    api_url: Annotated[str | None, Option("--api-url", envvar="GITHUB_API_URL", help="GitHub API URL.")] = None,
    verbose: Annotated[bool, Option("--verbose", help="Show progress logs.")] = False,
    debug: Annotated[bool, Option("--debug", envvar="DEBUG", help="Enable debug mode.")] = False,
    init: Annotated[bool, Option("--init", help=f"Write a starter {DEFAULT_CONFIG_FILE} and exit.")] = False,
) -> None:
    """Create a GitHub release from the conventional commits since the last release."""
    ci = is_ci_environment()
    configure_logging(verbose=verbose, ci=ci, debug=debug)

    if init:
        config_path = config or path / DEFAULT_CONFIG_FILE
        try:
            write_default_config_file(config_path)
        except ConfigurationError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(ExitCode.CONFIGURATION_ERROR) from exc
        typer.echo(f"Wrote configuration file {config_path}")
        return

    try:
        release_config = get_release_config(
            repository_path=path,
            repo=repo,
            token=token,
            github_api_url=api_url,
            config=config,
            from_ref=from_ref,
            to_ref=to_ref,
            tag_prefix=tag_prefix,
            pre_id=pre_id,
            dry_run=dry_run,
            draft=draft,
            prerelease=prerelease,
            overwrite=overwrite,
            clean_pre_releases=clean_pre_releases,
            debug=debug,
        )
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(ExitCode.CONFIGURATION_ERROR) from exc
    except RepositoryAccessError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(ExitCode.REPOSITORY_ERROR) from exc

    result = asyncio.run(run_release_workflow(release_config))

    if result.state is RunState.FAILED:
        typer.echo(result.message, err=True)
        raise typer.Exit(result.exit_code)

    if release_config.dry_run and result.context.plan is not None:
        typer.echo(format_plan(result.context.plan))
    typer.echo(result.message)
