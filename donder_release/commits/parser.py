"""Parses commit messages according to the conventional commit grammar.

The grammar handled here is::

    type(scope)!: description

    optional body paragraphs

    optional-footer: value
    Refs #123

Parsing is total: a message that does not follow the grammar, or whose type
is not a recognized commit type, becomes a commit of type UNKNOWN that keeps
the full message as its description.
"""

import re
from typing import Iterable

import structlog

from donder_release.git.models import RawCommit

from .models import BREAKING_CHANGE_KEYS, CommitType, Footer, ParsedCommit

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

HEADER_PATTERN = re.compile(r"^(?P<type>[A-Za-z]+)(?:\((?P<scope>[^\r\n]*?)\))?(?P<breaking>!)?(?P<separator>: [ \t]*)(?P<description>\S.*)$")
"""Pattern to match a conventional commit header line."""

FOOTER_PATTERN = re.compile(r"^(?P<key>BREAKING[ -]CHANGE|[A-Za-z][\w-]*)(?P<separator>: | #)(?P<value>.*)$")
"""Pattern to match a footer line (`key: value` or `key #value`)."""

BREAKING_MARKER_PATTERN = re.compile(r"^BREAKING[ -]CHANGE: ", re.MULTILINE)
"""Pattern to find a breaking change marker anywhere in the body."""


def _split_paragraphs(lines: list[str]) -> list[list[str]]:
    """Group lines into paragraphs separated by blank lines."""
    paragraphs: list[list[str]] = []
    current: list[str] = []
    for line in lines:
        if line.strip():
            current.append(line.rstrip())
        elif current:
            paragraphs.append(current)
            current = []
    if current:
        paragraphs.append(current)
    return paragraphs


def _parse_footers(paragraph: list[str]) -> list[Footer]:
    """Parse a footer paragraph, folding continuation lines into the previous footer."""
    footers: list[Footer] = []
    for line in paragraph:
        match = FOOTER_PATTERN.match(line)
        if match:
            footers.append(Footer(key=match.group("key"), value=match.group("value").strip(), separator=match.group("separator")))
        elif footers:
            previous = footers[-1]
            footers[-1] = Footer(key=previous.key, value=f"{previous.value}\n{line.strip()}", separator=previous.separator)
    return footers


def _unknown_commit(raw: RawCommit) -> ParsedCommit:
    """Build the fallback record for a message that does not follow the grammar."""
    return ParsedCommit(type=CommitType.UNKNOWN, description=raw.message, raw=raw)


def parse_commit(raw: RawCommit) -> ParsedCommit:
    """Parse a single commit message into a ParsedCommit. Never raises."""
    lines = raw.message.splitlines()
    if not lines:
        return _unknown_commit(raw)

    match = HEADER_PATTERN.match(lines[0].rstrip())
    if match is None:
        logger.debug("Commit header does not follow the conventional grammar", commit=raw.short_hash)
        return _unknown_commit(raw)

    commit_type = CommitType.from_token(match.group("type"))
    description = match.group("description").strip()
    if commit_type is CommitType.UNKNOWN or not description:
        logger.debug("Commit type not recognized", commit=raw.short_hash, type=match.group("type"))
        return _unknown_commit(raw)

    scope_token = match.group("scope")
    scope = None
    if scope_token is not None:
        scope = scope_token.strip().strip("()").strip() or None

    paragraphs = _split_paragraphs(lines[1:])
    footers: list[Footer] = []
    if paragraphs and FOOTER_PATTERN.match(paragraphs[-1][0]):
        footers = _parse_footers(paragraphs.pop())
    body = "\n\n".join("\n".join(paragraph) for paragraph in paragraphs) or None

    header_breaking = match.group("breaking") is not None
    breaking = (
        header_breaking
        or any(footer.key in BREAKING_CHANGE_KEYS for footer in footers)
        or (body is not None and BREAKING_MARKER_PATTERN.search(body) is not None)
    )

    return ParsedCommit(
        type=commit_type,
        description=description,
        raw=raw,
        scope=scope,
        body=body,
        footers=tuple(footers),
        breaking=breaking,
        type_token=match.group("type"),
        scope_token=scope_token,
        header_breaking=header_breaking,
        separator=match.group("separator"),
    )


def parse_commits(raw_commits: Iterable[RawCommit]) -> list[ParsedCommit]:
    """Parse commits, preserving their order."""
    parsed = [parse_commit(raw) for raw in raw_commits]
    logger.info(
        "Parsed commits",
        total=len(parsed),
        conventional=sum(1 for commit in parsed if commit.is_conventional),
    )
    return parsed
