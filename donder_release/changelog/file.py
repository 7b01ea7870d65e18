"""Maintains a changelog file with the newest release notes on top."""

from pathlib import Path

import structlog

from donder_release.utils.constants import CHANGELOG_FILE_HEADER

logger = structlog.get_logger(__name__)


class ChangelogFileWriter:
    """Handles inserting release notes into a changelog file."""

    def __init__(self, header: str = CHANGELOG_FILE_HEADER) -> None:
        """Initialize with expected header."""
        self.header = header.strip()

    def insert_release_notes(self, existing_content: str, notes: str) -> str:
        """Insert new release notes after the document header."""
        notes = notes.strip()
        header_start = existing_content.find(self.header)
        if header_start == -1:
            logger.warning("Changelog file missing expected header, adding it")
            remainder = existing_content.strip()
            updated = f"{self.header}\n\n{notes}\n"
            return f"{updated}\n{remainder}\n" if remainder else updated

        header_end = header_start + len(self.header)
        remainder = existing_content[header_end:].strip()
        updated = existing_content[:header_end] + "\n\n" + notes + "\n"
        if remainder:
            updated += "\n" + remainder + "\n"
        return updated

    def write(self, path: Path, notes: str) -> None:
        """Prepend the notes to the file at path, creating it when missing."""
        existing_content = path.read_text(encoding="utf-8") if path.exists() else ""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.insert_release_notes(existing_content, notes), encoding="utf-8")
        logger.info("Wrote release notes to changelog file", path=str(path))
