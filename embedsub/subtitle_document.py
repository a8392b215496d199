"""In-memory view of a subtitle file as an ordered list of opaque entries."""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, List

logger = logging.getLogger(__name__)

ENTRY_SEPARATOR = "\n\n"

_BLANK_LINES = re.compile(r"\n(?:[ \t]*\n)+")
_SEQUENCE_NUMBER = re.compile(r"^\d+$")
_TIMESTAMP_RANGE = re.compile(
    r"^\d{1,2}:\d{2}:\d{2}[,.]\d{3}\s*-->\s*\d{1,2}:\d{2}:\d{2}[,.]\d{3}(\s.*)?$"
)


def is_structural_line(line: str) -> bool:
    """True for sequence-number and timestamp-range lines."""
    stripped = line.strip()
    return bool(_SEQUENCE_NUMBER.match(stripped) or _TIMESTAMP_RANGE.match(stripped))


@dataclass
class SubtitleDocument:
    """
    A subtitle file split into entries at blank lines.

    Entries are kept verbatim (sequence number, timestamp and text lines);
    joining them with a blank line reproduces the file.
    """
    entries: List[str] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> "SubtitleDocument":
        normalized = text.lstrip('\ufeff').replace('\r\n', '\n').replace('\r', '\n').strip()
        if not normalized:
            return cls()
        entries = [entry.strip('\n') for entry in _BLANK_LINES.split(normalized)]
        return cls(entries=[entry for entry in entries if entry.strip()])

    @classmethod
    def read(cls, file_path: str) -> "SubtitleDocument":
        """
        Reads a subtitle file from disk.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
            content = f.read()
        document = cls.from_text(content)
        logger.info(f"Read {len(content)} characters ({len(document.entries)} entries) from {file_path}")
        return document

    def to_text(self) -> str:
        return ENTRY_SEPARATOR.join(self.entries)

    def iter_text_lines(self) -> Iterator[str]:
        """Yields the prose lines of every entry, skipping numbers and timestamps."""
        for entry in self.entries:
            for line in entry.split('\n'):
                if line.strip() and not is_structural_line(line):
                    yield line

    def __len__(self) -> int:
        return len(self.entries)
