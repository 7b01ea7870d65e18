"""Synchronous driver for configuration reconciliation for the CLI entry point."""

import asyncio
from pathlib import Path

from donder_release.configuration import reconcile
from donder_release.configuration.models import ReleaseConfig


def get_release_config(
    repository_path: Path = Path("."),
    repo: str | None = None,
    token: str | None = None,
    github_api_url: str | None = None,
    config: Path | None = None,
    from_ref: str | None = None,
    to_ref: str | None = None,
    tag_prefix: str | None = None,
    pre_id: str | None = None,
    dry_run: bool = False,
    draft: bool = False,
    prerelease: bool = False,
    overwrite: bool = False,
    clean_pre_releases: bool = False,
    debug: bool = False,
) -> ReleaseConfig:
    """Synchronously get the reconciled release configuration."""
    return asyncio.run(
        reconcile.reconcile_release_configuration(
            cli_repository_path=repository_path,
            cli_repo=repo,
            cli_token=token,
            cli_github_api_url=github_api_url,
            cli_config=config,
            cli_from_ref=from_ref,
            cli_to_ref=to_ref,
            cli_tag_prefix=tag_prefix,
            cli_pre_id=pre_id,
            cli_dry_run=dry_run,
            cli_draft=draft,
            cli_prerelease=prerelease,
            cli_overwrite=overwrite,
            cli_clean_pre_releases=clean_pre_releases,
            cli_debug=debug,
        )
    )
