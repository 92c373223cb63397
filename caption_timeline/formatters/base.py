"""Abstract base formatter and output container.

WHY: Every interchange format reads and writes the same Cue timeline but
with different text. This base class enforces a consistent interface so
the CLI and the auto-detecting front door can work with any format
generically.

HOW: BaseFormatter is an ABC with a ``name`` property and two methods —
``serialize()`` and ``parse()``. FormatterOutput is a plain dataclass
bundling a file suffix with its content and MIME type. split_blocks() is
the blank-line block splitter shared by the block-based formats.

RULES:
- Subclasses MUST implement ``name``, ``serialize()`` and ``parse()``
- ``serialize()`` never validates; callers validate first when they need
  a clean file
- ``parse()`` is best-effort: a malformed block is skipped and recorded in
  ParseResult.warnings, it does not abort the import
- ``suffix`` starts with a dot, e.g. ``".srt"``; the caller prepends the stem

To add a new format:
1. Create a new file in formatters/
2. Subclass BaseFormatter
3. Implement name, serialize() and parse()
4. Register in FORMATTERS dict in formatters/__init__.py
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from caption_timeline.core.ir import Cue, ParseResult

logger = logging.getLogger(__name__)

BLOCK_SPLIT_RE = re.compile(r"\n\s*\n")
TAG_RE = re.compile(r"<[^>]+>")
TIME_RANGE_MARKER = "-->"


def normalize_newlines(content: str) -> str:
    """Convert CRLF and CR line endings to LF and drop a leading BOM."""
    return content.replace("\r\n", "\n").replace("\r", "\n").lstrip("\ufeff")


def split_blocks(content: str) -> list[str]:
    """Split text on blank lines into trimmed, non-empty blocks."""
    content = normalize_newlines(content).strip()
    if not content:
        return []
    return [block.strip() for block in BLOCK_SPLIT_RE.split(content) if block.strip()]


def strip_tags(text: str) -> str:
    """Remove inline markup tags such as <i>, <c.yellow> or <00:00:01.000>."""
    return TAG_RE.sub("", text)


def record_skip(result: ParseResult, format_name: str, message: str) -> None:
    """Record a skipped block on the result and log it."""
    result.warnings.append(message)
    logger.warning("%s: %s", format_name, message)


@dataclass
class FormatterOutput:
    """One serialized caption file.

    Attributes:
        suffix: File suffix appended to the source stem, e.g. ``".srt"``.
        content: The file content.
        media_type: MIME type for the content, e.g. ``"application/x-subrip"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all interchange formatters."""

    key: str = ""
    suffix: str = ""
    media_type: str = "text/plain"

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'SubRip (SRT)'."""

    @abstractmethod
    def serialize(self, cues: list[Cue]) -> FormatterOutput:
        """Encode a cue timeline as one file.

        Args:
            cues: Timeline in playback order.

        Returns:
            FormatterOutput with suffix, content and MIME type.
        """

    @abstractmethod
    def parse(self, content: str) -> ParseResult:
        """Decode file content into cues.

        Args:
            content: Complete file content.

        Returns:
            ParseResult with the parsed cues and one warning per skipped block.

        Raises:
            FormatError: Only when the content as a whole is unreadable.
        """
