"""Interchange formatter registry and format auto-detection.

WHY: The CLI and library callers need a single lookup to find the right
formatter by name, and imports of unknown provenance need their format
guessed from content. A central dict makes it trivial to add new formats:
create the formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
detect_format() classifies content; parse_captions() and
serialize_captions() front the registry.

RULES:
- Keys are short lowercase identifiers (used in CLI flags, file suffixes)
- Values are BaseFormatter subclasses (not instances)
- Detection order: WebVTT header, then strict JSON, then an SRT time
  range in the first five lines; anything else is UnknownFormatError
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from caption_timeline.core.ir import Cue, ParseResult
from caption_timeline.errors import UnknownFormatError
from caption_timeline.formatters.base import TIME_RANGE_MARKER, FormatterOutput, normalize_newlines
from caption_timeline.formatters.json_captions import JSONCaptionFormatter
from caption_timeline.formatters.srt import SRTFormatter
from caption_timeline.formatters.vtt import VTT_HEADER, VTTFormatter

if TYPE_CHECKING:
    from caption_timeline.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "srt": SRTFormatter,
    "vtt": VTTFormatter,
    "json": JSONCaptionFormatter,
}

_DETECT_LINES = 5


def get_formatter(key: str) -> BaseFormatter:
    """Instantiate the formatter registered under key.

    Raises:
        ValueError: If key is not registered.
    """
    try:
        return FORMATTERS[key.lower()]()
    except KeyError:
        raise ValueError(
            "Unknown format '{}'. Available formats: {}".format(
                key, ", ".join(sorted(FORMATTERS))
            )
        ) from None


def detect_format(content: str) -> str:
    """Classify caption content as "vtt", "json" or "srt".

    Raises:
        UnknownFormatError: If no rule matches.
    """
    trimmed = normalize_newlines(content).strip()

    if trimmed.startswith(VTT_HEADER):
        return "vtt"

    if trimmed.startswith(("{", "[")):
        try:
            json.loads(trimmed)
            return "json"
        except json.JSONDecodeError:
            pass

    if any(TIME_RANGE_MARKER in line for line in trimmed.split("\n")[:_DETECT_LINES]):
        return "srt"

    raise UnknownFormatError("Unknown caption format")


def parse_captions(content: str, format_key: str | None = None) -> ParseResult:
    """Parse caption content, detecting the format when none is given."""
    key = format_key or detect_format(content)
    return get_formatter(key).parse(content)


def serialize_captions(cues: list[Cue], format_key: str) -> FormatterOutput:
    """Serialize cues with the formatter registered under format_key."""
    return get_formatter(format_key).serialize(cues)


__all__ = [
    "FORMATTERS",
    "FormatterOutput",
    "detect_format",
    "get_formatter",
    "parse_captions",
    "serialize_captions",
]
