"""Writes the release version into package manifests.

Supported manifests are Cargo.toml (cargo), package.json (npm) and
pubspec.yaml (pub). TOML and YAML manifests are edited with a targeted
regex replacement so formatting and comments are preserved; package.json is
rewritten as JSON with two-space indentation.

New contents are computed before anything is written, so a missing file or
version key is reported before the release is published.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

import structlog

from donder_release.exceptions import VersionFileError

from .semver import SEMVER_PATTERN, SemVer

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class VersionFileTarget(str, Enum):
    """Kinds of manifest carrying a package version."""

    CARGO = "cargo"
    NPM = "npm"
    PUB = "pub"

    @property
    def manifest_name(self) -> str:
        """File name of the manifest in a package directory."""
        return MANIFEST_NAMES[self]


MANIFEST_NAMES = {
    VersionFileTarget.CARGO: "Cargo.toml",
    VersionFileTarget.NPM: "package.json",
    VersionFileTarget.PUB: "pubspec.yaml",
}

CARGO_PACKAGE_SECTION_PATTERN = re.compile(r"^\[(?:workspace\.)?package\][^\n]*\n.*?(?=^\[|\Z)", re.MULTILINE | re.DOTALL)
"""The [package] (or [workspace.package]) table up to the next table."""

CARGO_VERSION_PATTERN = re.compile(r"""^(?P<prefix>version\s*=\s*["'])(?P<version>[^"'\n]+)(?P<suffix>["'])""", re.MULTILINE)

PUB_VERSION_PATTERN = re.compile(r"""^(?P<prefix>version:[ \t]*["']?)(?P<version>[^"'\s#]+)""", re.MULTILINE)


@dataclass(frozen=True)
class VersionFile:
    """A manifest whose version follows the releases.

    With build_metadata, the version gets a `+N` suffix where N is one more
    than the build number found in the manifest.
    """

    target: VersionFileTarget
    path: Path
    build_metadata: bool = False


@dataclass(frozen=True)
class VersionFileUpdate:
    """New contents for a manifest, ready to be written."""

    path: Path
    version: str
    content: str


def manifest_version(version: SemVer, current: str | None, build_metadata: bool) -> str:
    """Compute the version written to a manifest.

    Args:
        version: Version being released, without build metadata.
        current: Version currently in the manifest, if any.
        build_metadata: Whether a build number is appended and incremented.
    """
    base = str(version)
    if not build_metadata:
        return base
    build = 0
    match = SEMVER_PATTERN.match(current.strip()) if current else None
    if match is not None and match.group(5) and match.group(5).isdigit():
        build = int(match.group(5))
    return f"{base}+{build + 1}"


def _replace_version(pattern: re.Pattern[str], text: str, version: SemVer, build_metadata: bool) -> tuple[str, str] | None:
    """Replace the first version matched by pattern in text."""
    match = pattern.search(text)
    if match is None:
        return None
    new_version = manifest_version(version, match.group("version"), build_metadata)
    start, end = match.span("version")
    return text[:start] + new_version + text[end:], new_version


def _update_cargo(content: str, version: SemVer, build_metadata: bool) -> tuple[str, str] | None:
    section = CARGO_PACKAGE_SECTION_PATTERN.search(content)
    if section is None:
        return None
    replaced = _replace_version(CARGO_VERSION_PATTERN, section.group(0), version, build_metadata)
    if replaced is None:
        return None
    new_section, new_version = replaced
    return content[: section.start()] + new_section + content[section.end() :], new_version


def _update_npm(content: str, version: SemVer, build_metadata: bool) -> tuple[str, str] | None:
    try:
        package = json.loads(content)
    except json.JSONDecodeError as exc:
        raise VersionFileError(f"Invalid JSON: {exc}") from exc
    if not isinstance(package, dict) or not isinstance(package.get("version"), str):
        return None
    new_version = manifest_version(version, package["version"], build_metadata)
    package["version"] = new_version
    return json.dumps(package, indent=2, ensure_ascii=False) + "\n", new_version


def _update_pub(content: str, version: SemVer, build_metadata: bool) -> tuple[str, str] | None:
    return _replace_version(PUB_VERSION_PATTERN, content, version, build_metadata)


UPDATERS = {
    VersionFileTarget.CARGO: _update_cargo,
    VersionFileTarget.NPM: _update_npm,
    VersionFileTarget.PUB: _update_pub,
}


def resolve_manifest_path(version_file: VersionFile, repository_path: Path) -> Path:
    """Locate the manifest of a version file.

    A relative path is resolved against the repository, and a directory
    means the standard manifest of the target inside it.
    """
    path = version_file.path if version_file.path.is_absolute() else repository_path / version_file.path
    if path.is_dir():
        path = path / version_file.target.manifest_name
    return path


def prepare_version_file(version_file: VersionFile, version: SemVer, repository_path: Path) -> VersionFileUpdate:
    """Compute the new contents of a manifest without writing it.

    Raises:
        VersionFileError: If the manifest cannot be read or has no version to replace.
    """
    path = resolve_manifest_path(version_file, repository_path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise VersionFileError(f"Unable to read {version_file.target.value} version file {path}: {exc}") from exc

    try:
        updated = UPDATERS[version_file.target](content, version, version_file.build_metadata)
    except VersionFileError as exc:
        raise VersionFileError(f"Unable to update {version_file.target.value} version file {path}: {exc}") from exc
    if updated is None:
        raise VersionFileError(f"No version found in {version_file.target.value} version file {path}")
    new_content, new_version = updated
    return VersionFileUpdate(path=path, version=new_version, content=new_content)


def prepare_version_files(version_files: Iterable[VersionFile], version: SemVer, repository_path: Path) -> list[VersionFileUpdate]:
    """Compute the updates of every version file, failing on the first unusable one."""
    return [prepare_version_file(version_file, version, repository_path) for version_file in version_files]


def write_version_files(updates: Iterable[VersionFileUpdate]) -> list[Path]:
    """Write prepared updates and return the paths written."""
    written: list[Path] = []
    for update in updates:
        try:
            update.path.write_text(update.content, encoding="utf-8")
        except OSError as exc:
            raise VersionFileError(f"Unable to write version file {update.path}: {exc}") from exc
        logger.info("Bumped version file", path=str(update.path), version=update.version)
        written.append(update.path)
    return written
