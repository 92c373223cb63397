"""SubRip (SRT) formatter — index, comma-millisecond time range, text.

WHY: SRT is the lowest common denominator of caption interchange; every
editor and player reads it. It is the default export target.

HOW: Serialization writes ``index\\nstart --> end\\ntext`` blocks separated
by a blank line, renumbering 1..N. Parsing splits on blank lines, takes
the second line of each block as the time range and joins the remaining
lines into one text line.

RULES:
- A block needs at least 3 non-empty lines: index, time range, text.
- The time range must match ``HH:MM:SS,mmm --> HH:MM:SS,mmm``.
- Blocks that fail either rule are skipped with a warning.
- Multi-line text is joined with single spaces.
- Parsed cues get sequential ``caption_<n>`` ids; SRT indices are ignored.
- Registered as "srt" in the FORMATTERS dict.
"""

from __future__ import annotations

import re

from caption_timeline.adapters.caption_adapter import cue_id
from caption_timeline.core.ir import Cue, ParseResult
from caption_timeline.core.timecode import SRT_SEPARATOR, parse_timestamp, to_timestamp
from caption_timeline.errors import FormatError
from caption_timeline.formatters.base import (
    BaseFormatter,
    FormatterOutput,
    record_skip,
    split_blocks,
)

SRT_TIME_RANGE_RE = re.compile(
    r"(\d{2}:\d{2}:\d{2},\d{3})\s*-->\s*(\d{2}:\d{2}:\d{2},\d{3})"
)


def parse_time_range(
    line: str,
    pattern: re.Pattern,
    separator: str,
    block_index: int | None = None,
) -> tuple[float, float]:
    """Read ``start --> end`` from a line with a format-specific pattern.

    block_index, when given, is attached to any FormatError raised.

    Raises:
        FormatError: If the line does not contain a valid time range.
    """
    match = pattern.search(line)
    if not match:
        raise FormatError("Invalid timestamp line {!r}".format(line), block_index=block_index)
    try:
        return (
            parse_timestamp(match.group(1), separator),
            parse_timestamp(match.group(2), separator),
        )
    except FormatError as exc:
        raise FormatError(str(exc), block_index=block_index) from exc


class SRTFormatter(BaseFormatter):
    """Formatter for SubRip ``.srt`` files."""

    key = "srt"
    suffix = ".srt"
    media_type = "application/x-subrip"

    @property
    def name(self) -> str:
        return "SubRip (SRT)"

    def serialize(self, cues: list[Cue]) -> FormatterOutput:
        blocks = []
        for index, cue in enumerate(cues, 1):
            blocks.append("{}\n{} --> {}\n{}\n".format(
                index,
                to_timestamp(cue.start, SRT_SEPARATOR),
                to_timestamp(cue.end, SRT_SEPARATOR),
                cue.text,
            ))
        return FormatterOutput(
            suffix=self.suffix,
            content="\n".join(blocks),
            media_type=self.media_type,
        )

    def parse(self, content: str) -> ParseResult:
        result = ParseResult(cues=[], format=self.key)

        for block_index, block in enumerate(split_blocks(content), 1):
            lines = [line.strip() for line in block.split("\n") if line.strip()]
            if len(lines) < 3:
                record_skip(result, self.name, "Block {}: expected index, timestamp and text lines".format(block_index))
                continue

            try:
                start, end = parse_time_range(lines[1], SRT_TIME_RANGE_RE, SRT_SEPARATOR, block_index)
            except FormatError as exc:
                record_skip(result, self.name, "Block {}: {}".format(exc.block_index, exc))
                continue

            text = " ".join(lines[2:]).strip()
            result.cues.append(Cue(id=cue_id(len(result.cues) + 1), start=start, end=end, text=text))

        return result
