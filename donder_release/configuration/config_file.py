"""Reads and initializes the donder-release.yaml configuration file."""

from pathlib import Path

import structlog
from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml.error import YAMLError

from donder_release.configuration.exceptions import ConfigurationFileError
from donder_release.schemas.config_file import ConfigFileModel
from donder_release.utils.yaml import load_yaml_file

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

DEFAULT_CONFIG_TEMPLATE = """\
# Configuration file for donder-release

# Message of the commit recording the changelog and version files - %s is replaced with the release tag.
# Leave empty to write the files without committing them.
release_message: "chore(release): %s"
# Prefix of the release tag
tag_prefix: v
# If defined, release notes are also prepended to this file
# changelog_file: CHANGELOG.md
# Delete prerelease tags and releases once a stable release supersedes them
clean_pre_releases: false
# List commits that do not follow the conventional commit format
include_unknown: false
# Bump applied to breaking changes while the major version is 0 (major or minor)
zero_major_breaking_bump: major
# Commit types that trigger a release and their section in the release notes.
# feat, fix, perf and revert are reserved types and can only have their section changed.
# types:
#   - { commit_type: feat, section: Features }
#   - { commit_type: fix, section: Bug Fixes }
#   - { commit_type: refactor, bump: patch, section: Code Refactoring }
# Manifests whose version is set to the released version (targets: cargo, npm, pub).
# path is the manifest or its directory, relative to the repository root.
# bump_files:
#   - { target: cargo, path: Cargo.toml }
#   - { target: npm, path: package.json }
#   - { target: pub, path: pubspec.yaml, build_metadata: true }
"""


def load_config_file(path: Path) -> ConfigFileModel:
    """Load and validate a configuration file.

    Raises:
        ConfigurationFileError: If the file cannot be read, is not valid YAML or
            does not match the schema.
    """
    try:
        content = load_yaml_file(path)
    except OSError as exc:
        raise ConfigurationFileError(f"Unable to read configuration file {path}: {exc}") from exc
    except (YAMLError, ValueError) as exc:
        raise ConfigurationFileError(f"Invalid YAML in configuration file {path}: {exc}") from exc

    try:
        config = ConfigFileModel.model_validate(content)
    except PydanticValidationError as exc:
        raise ConfigurationFileError(f"Invalid configuration file {path}: {exc}") from exc

    ignored = sorted(set(content) - set(ConfigFileModel.model_fields))
    if ignored:
        logger.warning("Ignoring unsupported configuration file keys", path=str(path), keys=ignored)
    logger.debug("Loaded configuration file", path=str(path))
    return config


def write_default_config_file(path: Path) -> None:
    """Write the starter configuration file. An existing file is never overwritten."""
    if path.exists():
        raise ConfigurationFileError(f"Configuration file already exists: {path}")
    path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    logger.info("Wrote configuration file", path=str(path))
