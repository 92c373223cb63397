"""WebVTT formatter — header, optional cue identifiers, dot-millisecond times.

WHY: Browsers and HTML5 players only read WebVTT, and many recognizers
export it with styling tags inline. It is the block format with the most
variation in the wild, so the parser is the more forgiving of the two.

HOW: Serialization writes the ``WEBVTT`` header, a blank line, then
numbered ``id\\nstart --> end\\ntext`` blocks. Parsing drops the header
block, skips comment/style blocks, treats a first line without ``-->`` as a
cue identifier, and strips inline ``<...>`` tags from the text.

RULES:
- The header is the first block when it starts with ``WEBVTT``; its
  metadata lines (Kind, Language) are dropped with it.
- NOTE, STYLE and REGION blocks are skipped silently.
- Cue settings after the end timestamp (``align:start`` …) are ignored.
- Blocks without a valid ``HH:MM:SS.mmm --> HH:MM:SS.mmm`` line or without
  text are skipped with a warning.
- Parsed cues get sequential ``caption_<n>`` ids; cue identifiers are not kept.
- Registered as "vtt" in the FORMATTERS dict.
"""

from __future__ import annotations

import logging
import re

from caption_timeline.adapters.caption_adapter import cue_id
from caption_timeline.core.ir import Cue, ParseResult
from caption_timeline.core.timecode import VTT_SEPARATOR, to_timestamp
from caption_timeline.errors import FormatError
from caption_timeline.formatters.base import (
    BLOCK_SPLIT_RE,
    TIME_RANGE_MARKER,
    BaseFormatter,
    FormatterOutput,
    normalize_newlines,
    record_skip,
    split_blocks,
    strip_tags,
)
from caption_timeline.formatters.srt import parse_time_range

logger = logging.getLogger(__name__)

VTT_HEADER = "WEBVTT"
VTT_TIME_RANGE_RE = re.compile(
    r"(\d{2}:\d{2}:\d{2}\.\d{3})\s*-->\s*(\d{2}:\d{2}:\d{2}\.\d{3})"
)
_METADATA_BLOCKS = ("NOTE", "STYLE", "REGION")


def strip_header(content: str) -> str:
    """Drop a leading ``WEBVTT`` header block if present.

    The header block runs to the first blank line and may carry metadata
    lines (``Kind: captions``, ``Language: en``). If it already holds a
    time range the cue follows without a blank line, so only the
    ``WEBVTT`` line is dropped.
    """
    content = normalize_newlines(content).lstrip()
    if not content.startswith(VTT_HEADER):
        return content
    parts = BLOCK_SPLIT_RE.split(content, maxsplit=1)
    if TIME_RANGE_MARKER not in parts[0]:
        return parts[1] if len(parts) > 1 else ""
    _, _, rest = content.partition("\n")
    return rest


class VTTFormatter(BaseFormatter):
    """Formatter for WebVTT ``.vtt`` files."""

    key = "vtt"
    suffix = ".vtt"
    media_type = "text/vtt"

    @property
    def name(self) -> str:
        return "WebVTT"

    def serialize(self, cues: list[Cue]) -> FormatterOutput:
        parts = [VTT_HEADER + "\n"]
        for index, cue in enumerate(cues, 1):
            parts.append("{}\n{} --> {}\n{}\n".format(
                index,
                to_timestamp(cue.start, VTT_SEPARATOR),
                to_timestamp(cue.end, VTT_SEPARATOR),
                cue.text,
            ))
        return FormatterOutput(
            suffix=self.suffix,
            content="\n".join(parts),
            media_type=self.media_type,
        )

    def parse(self, content: str) -> ParseResult:
        result = ParseResult(cues=[], format=self.key)

        for block_index, block in enumerate(split_blocks(strip_header(content)), 1):
            lines = [line.strip() for line in block.split("\n") if line.strip()]

            if lines[0].split(" ", 1)[0] in _METADATA_BLOCKS:
                logger.debug("WebVTT: skipping %s block %d", lines[0].split(" ", 1)[0], block_index)
                continue

            if TIME_RANGE_MARKER not in lines[0]:
                # Cue identifier line
                lines = lines[1:]
            if len(lines) < 2:
                record_skip(result, self.name, "Block {}: expected timestamp and text lines".format(block_index))
                continue

            try:
                start, end = parse_time_range(lines[0], VTT_TIME_RANGE_RE, VTT_SEPARATOR, block_index)
            except FormatError as exc:
                record_skip(result, self.name, "Block {}: {}".format(exc.block_index, exc))
                continue

            text = strip_tags(" ".join(lines[1:])).strip()
            if not text:
                record_skip(result, self.name, "Block {}: no text after removing markup".format(block_index))
                continue

            result.cues.append(Cue(id=cue_id(len(result.cues) + 1), start=start, end=end, text=text))

        return result
