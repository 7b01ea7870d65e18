"""Reconcile command line, environment and configuration file settings.

Precedence is command line first, then environment, then the configuration
file, then built-in defaults.
"""

from pathlib import Path

import structlog

from donder_release.commits.models import CommitType
from donder_release.configuration.config_file import load_config_file
from donder_release.configuration.env import Settings
from donder_release.configuration.exceptions import ConfigurationError, ConfigurationFileError, RequiredConfigurationElementError
from donder_release.configuration.models import ReleaseConfig
from donder_release.git.reader import GitCommitReader
from donder_release.schemas.config_file import ConfigFileModel
from donder_release.utils.constants import DEFAULT_CONFIG_FILE
from donder_release.utils.github import parse_remote_url, split_repository_in_configuration
from donder_release.versioning.files import VersionFile
from donder_release.versioning.models import VersionBump
from donder_release.versioning.resolver import DEFAULT_RELEASE_TYPES

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def resolve_github_token(cli_token: str | None, settings: Settings) -> str | None:
    """Return the token from the command line, then GH_TOKEN, then GITHUB_TOKEN."""
    return cli_token or settings.github_token


async def resolve_repository(cli_repo: str | None, reader: GitCommitReader) -> str:
    """Resolve the owner/name of the repository.

    Args:
        cli_repo: Repository given on the command line, if any.
        reader: Reader of the local repository, used to infer the repository
            from the URL of the origin remote.

    Raises:
        RequiredConfigurationElementError: If no repository is given and none can be inferred.
        ConfigurationError: If the given repository is not in owner/name format.
    """
    if cli_repo:
        try:
            owner, repo_name = await split_repository_in_configuration(cli_repo)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        return f"{owner}/{repo_name}"

    remote_url = reader.remote_url()
    parsed = parse_remote_url(remote_url) if remote_url else None
    if parsed is None:
        logger.error("Unable to infer repository from origin remote", remote_url=remote_url)
        raise RequiredConfigurationElementError("repository", "--repo")
    _, owner, repo_name = parsed
    logger.debug("Inferred repository from origin remote", remote_url=remote_url, repo=f"{owner}/{repo_name}")
    return f"{owner}/{repo_name}"


async def load_configuration_file(cli_config: Path | None, repository_path: Path) -> ConfigFileModel:
    """Load the configuration file, falling back to defaults when the default file is absent.

    A relative path is resolved against the repository. A file given
    explicitly must exist.
    """
    config_path = cli_config or Path(DEFAULT_CONFIG_FILE)
    if not config_path.is_absolute():
        config_path = repository_path / config_path
    if not config_path.exists():
        if cli_config is not None:
            raise ConfigurationFileError(f"Configuration file not found: {config_path.absolute()}")
        logger.debug("No configuration file found, using defaults", path=str(config_path))
        return ConfigFileModel()
    return load_config_file(config_path)


def release_types_from_file(config_file: ConfigFileModel) -> tuple[dict[CommitType, VersionBump], dict[CommitType, str]]:
    """Build the bump and section title tables from the types of the configuration file."""
    release_types = dict(DEFAULT_RELEASE_TYPES)
    section_titles: dict[CommitType, str] = {}
    for release_type in config_file.types:
        section_titles[release_type.commit_type] = release_type.section
        if release_type.bump is not None:
            release_types[release_type.commit_type] = release_type.bump
    return release_types, section_titles


def version_files_from_file(config_file: ConfigFileModel) -> list[VersionFile]:
    """Build the version files of the configuration file. A missing path means the repository root."""
    return [
        VersionFile(target=bump_file.target, path=Path(bump_file.path or "."), build_metadata=bump_file.build_metadata)
        for bump_file in config_file.bump_files
    ]


async def reconcile_release_configuration(
    cli_repository_path: Path = Path("."),
    cli_repo: str | None = None,
    cli_token: str | None = None,
    cli_github_api_url: str | None = None,
    cli_config: Path | None = None,
    cli_from_ref: str | None = None,
    cli_to_ref: str | None = None,
    cli_tag_prefix: str | None = None,
    cli_pre_id: str | None = None,
    cli_dry_run: bool = False,
    cli_draft: bool = False,
    cli_prerelease: bool = False,
    cli_overwrite: bool = False,
    cli_clean_pre_releases: bool = False,
    cli_debug: bool = False,
    settings: Settings | None = None,
) -> ReleaseConfig:
    """Reconcile the configuration of a release run.

    Returns:
        ReleaseConfig: The reconciled configuration.

    Raises:
        ConfigurationError: If the configuration is invalid or incomplete.
        RepositoryAccessError: If the repository cannot be read while inferring settings.
    """
    settings = settings or Settings()
    reader = GitCommitReader(cli_repository_path)
    reader.ensure_repository()

    config_file = await load_configuration_file(cli_config, cli_repository_path)
    token = await resolve_github_token(cli_token, settings)
    if not token and not cli_dry_run:
        raise RequiredConfigurationElementError("GitHub token", "--token", "GH_TOKEN")

    if cli_pre_id is not None and not cli_pre_id.strip():
        raise ConfigurationError("The prerelease identifier cannot be empty")

    repo: str | None
    try:
        repo = await resolve_repository(cli_repo, reader)
    except RequiredConfigurationElementError:
        if not cli_dry_run:
            raise
        logger.warning("No GitHub repository found, previewing with placeholder links and local tags only")
        repo = None
    release_types, section_titles = release_types_from_file(config_file)
    config = ReleaseConfig(
        repo=repo,
        repository_path=cli_repository_path,
        github_api_url=cli_github_api_url or settings.GITHUB_API_URL,
        github_token=token,
        request_timeout=settings.REQUEST_TIMEOUT,
        from_ref=cli_from_ref,
        to_ref=cli_to_ref,
        dry_run=cli_dry_run,
        draft=cli_draft,
        prerelease=cli_prerelease,
        overwrite=cli_overwrite,
        tag_prefix=cli_tag_prefix if cli_tag_prefix is not None else config_file.tag_prefix,
        pre_id=cli_pre_id.strip() if cli_pre_id else None,
        release_types=release_types,
        section_titles=section_titles,
        include_unknown=config_file.include_unknown,
        zero_major_breaking_bump=config_file.zero_major_breaking_bump,
        changelog_file=Path(config_file.changelog_file) if config_file.changelog_file else None,
        version_files=version_files_from_file(config_file),
        release_message=config_file.release_message,
        clean_pre_releases=cli_clean_pre_releases or config_file.clean_pre_releases,
        debug=cli_debug or settings.DEBUG,
    )
    logger.info(
        "Reconciled release configuration",
        repo=config.repo,
        github_api_url=config.github_api_url,
        tag_prefix=config.tag_prefix,
        pre_id=config.pre_id,
        dry_run=config.dry_run,
        token_configured=config.github_token is not None,
    )
    return config
