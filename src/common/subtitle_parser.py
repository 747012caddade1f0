"""Subtitle format adapters: parse raw subtitle text and generate it back."""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import List, Optional

logger = logging.getLogger(__name__)


class UnsupportedFormatError(ValueError):
    """Raised when no parser or generator handles the requested format."""

    def __init__(self, subject: str, action: str = "parse"):
        self.subject = subject
        self.action = action
        super().__init__(f"Unsupported subtitle format for {action}: {subject}")


@dataclass(frozen=True)
class SubtitleSegment:
    """Represents a single subtitle entry with timing and text."""

    index: int
    start_time: str
    end_time: str
    text: str

    def with_text(self, text: str) -> "SubtitleSegment":
        """Return a copy of this segment carrying different text."""
        return replace(self, text=text)

    def __str__(self) -> str:
        """Format segment as SRT entry."""
        return f"{self.index}\n{self.start_time} --> {self.end_time}\n{self.text}\n"


@dataclass
class SubtitleDocument:
    """An ordered list of subtitle entries and the format they came from."""

    entries: List[SubtitleSegment] = field(default_factory=list)
    source_format: str = "srt"

    @property
    def texts(self) -> List[str]:
        """Entry texts in positional order."""
        return [entry.text for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


class SubtitleParser(ABC):
    """Base class for subtitle parsers."""

    @abstractmethod
    def can_parse(self, filename: str) -> bool:
        """Return True if this parser handles the given filename."""

    @abstractmethod
    def parse(self, content: str) -> SubtitleDocument:
        """Parse raw subtitle text into a document."""


class SubtitleGenerator(ABC):
    """Base class for subtitle generators."""

    #: File extension including the leading dot, e.g. ".srt"
    extension: str = ""

    @property
    def format_name(self) -> str:
        return self.extension.lstrip(".").lower()

    @abstractmethod
    def generate(self, document: SubtitleDocument) -> str:
        """Render a document to raw subtitle text."""


# Accepts 1-2 digit clock components and 1-3 digit milliseconds so that
# sloppy timestamps can be repaired instead of dropped.
_TIMESTAMP = r"\d{1,2}:\d{1,2}:\d{1,2}[,.]\d{1,3}"
_TIMESTAMP_LINE_PATTERN = re.compile(rf"({_TIMESTAMP})\s*-->\s*({_TIMESTAMP})")
_CANONICAL_TIMESTAMP = re.compile(r"^\d{2}:\d{2}:\d{2},\d{3}$")
_BLOCK_SEPARATOR = re.compile(r"\n\s*\n")


def normalize_timestamp(value: str) -> str:
    """
    Normalize a timestamp to ``HH:MM:SS,mmm``.

    The period decimal separator is replaced by a comma and short components
    are zero-padded on the left.

    Args:
        value: Timestamp as found in the file

    Returns:
        Canonical timestamp, or the comma-normalized input if it cannot be split

    Examples:
        >>> normalize_timestamp("00:00:01.500")
        '00:00:01,500'
        >>> normalize_timestamp("0:1:2,3")
        '00:01:02,003'
    """
    timestamp = value.strip().replace(".", ",")
    if _CANONICAL_TIMESTAMP.match(timestamp):
        return timestamp

    parts = re.split(r"[:,]", timestamp)
    if len(parts) >= 4:
        hours, minutes, seconds, millis = parts[:4]
        return (
            f"{hours.zfill(2)}:{minutes.zfill(2)}:{seconds.zfill(2)},{millis.zfill(3)}"
        )
    return timestamp


class SRTParser(SubtitleParser):
    """Parser for SRT subtitle files."""

    format_name = "srt"

    def can_parse(self, filename: str) -> bool:
        return filename.lower().endswith(".srt")

    def parse(self, content: str) -> SubtitleDocument:
        """
        Parse SRT content into a subtitle document.

        Malformed blocks (missing sequence number, unparseable timestamp line,
        fewer than two lines, or no text) are skipped rather than rejected.

        Args:
            content: Raw SRT file content

        Returns:
            SubtitleDocument with entries in file order
        """
        # Remove BOM (Byte Order Mark) if present (common in UTF-8 files)
        if content.startswith("\ufeff"):
            content = content[1:]
        content = content.replace("\r\n", "\n").replace("\r", "\n")

        entries: List[SubtitleSegment] = []
        for block in _BLOCK_SEPARATOR.split(content):
            if not block.strip():
                continue
            segment = self._parse_block(block)
            if segment is not None:
                entries.append(segment)

        logger.info(f"Parsed {len(entries)} subtitle segments")
        return SubtitleDocument(entries=entries, source_format=self.format_name)

    def _parse_block(self, block: str) -> Optional[SubtitleSegment]:
        lines = block.strip().split("\n")
        if len(lines) < 2:
            logger.debug(f"Skipping block with fewer than two lines: {block!r}")
            return None

        try:
            index = int(lines[0].strip())
        except ValueError:
            logger.debug(f"Skipping block with invalid sequence number: {lines[0]!r}")
            return None

        timestamp_match = _TIMESTAMP_LINE_PATTERN.search(lines[1].strip())
        if not timestamp_match:
            logger.debug(f"Skipping block {index} with invalid timestamps: {lines[1]!r}")
            return None

        text = "\n".join(lines[2:]).strip()
        if not text:
            logger.debug(f"Skipping block {index} without text")
            return None

        return SubtitleSegment(
            index=index,
            start_time=normalize_timestamp(timestamp_match.group(1)),
            end_time=normalize_timestamp(timestamp_match.group(2)),
            text=text,
        )


class SRTGenerator(SubtitleGenerator):
    """Generator for SRT subtitle files."""

    extension = ".srt"

    def generate(self, document: SubtitleDocument) -> str:
        """
        Format a document as SRT, ordered by entry index.

        Ensures one blank line between entries and a single trailing newline.

        Args:
            document: Subtitle document to render

        Returns:
            Formatted SRT content string
        """
        if not document.entries:
            return ""

        sorted_entries = sorted(document.entries, key=lambda entry: entry.index)
        formatted = "\n\n".join(str(entry).rstrip() for entry in sorted_entries)
        return formatted + "\n"
