"""Timestamp encoding for subtitle interchange formats and frame clocks.

WHY: SRT writes ``HH:MM:SS,mmm`` and WebVTT writes ``HH:MM:SS.mmm``. Both
formats truncate fractional milliseconds rather than round them, and a
round trip through either must land on the same millisecond every time.
The render pipeline meanwhile counts frames, not seconds.

HOW: to_timestamp() works on an integer millisecond count derived by
flooring, with a tiny epsilon so that values like 1.001 (stored as
1.000999…) do not lose a millisecond. parse_timestamp() is its inverse
and raises FormatError for anything it cannot read.

RULES:
- Truncation, not rounding: 1.9999 s -> "00:00:01,999".
- Negative seconds clamp to zero.
- Hours are zero-padded to two digits; hours beyond 99 are not supported.
- Minutes and seconds fields must be < 60 when parsing.
"""

from __future__ import annotations

import math
import re

from caption_timeline.errors import FormatError

SRT_SEPARATOR = ","
VTT_SEPARATOR = "."

# Absorbs binary float noise (1.001 * 1000 == 1000.9999999999999).
_MS_EPSILON = 1e-6

TIMESTAMP_RE = re.compile(r"^(\d{2}):(\d{2}):(\d{2})([,.])(\d{3})$")


def to_timestamp(seconds: float, separator: str = SRT_SEPARATOR) -> str:
    """Format seconds as ``HH:MM:SS<sep>mmm`` with millisecond truncation.

    Args:
        seconds: Offset in seconds.
        separator: "," for SRT or "." for WebVTT.

    Returns:
        Zero-padded timestamp string.

    Raises:
        ValueError: If separator is neither "," nor ".".
    """
    if separator not in (SRT_SEPARATOR, VTT_SEPARATOR):
        raise ValueError("Unsupported timestamp separator {!r}".format(separator))
    if seconds < 0:
        seconds = 0.0

    total_ms = int(math.floor(seconds * 1000 + _MS_EPSILON))
    ms = total_ms % 1000
    total_s = total_ms // 1000
    s = total_s % 60
    total_m = total_s // 60
    m = total_m % 60
    h = total_m // 60
    return "{:02d}:{:02d}:{:02d}{}{:03d}".format(h, m, s, separator, ms)


def parse_timestamp(value: str, separator: str | None = None) -> float:
    """Parse ``HH:MM:SS<sep>mmm`` into seconds.

    Args:
        value: Timestamp text; surrounding whitespace is ignored.
        separator: Required millisecond separator, or None to accept either.

    Returns:
        Offset in seconds.

    Raises:
        FormatError: If the text is not a well-formed timestamp.
    """
    match = TIMESTAMP_RE.match(value.strip())
    if not match:
        raise FormatError("Malformed timestamp {!r}".format(value))

    hours, minutes, secs, sep, millis = match.groups()
    if separator is not None and sep != separator:
        raise FormatError(
            "Timestamp {!r} uses {!r}, expected {!r}".format(value, sep, separator)
        )
    if int(minutes) >= 60 or int(secs) >= 60:
        raise FormatError("Timestamp {!r} is out of range".format(value))

    return int(hours) * 3600 + int(minutes) * 60 + int(secs) + int(millis) / 1000


def frame_to_seconds(frame: int | float, fps: float) -> float:
    """Convert a frame number to playback seconds."""
    if fps <= 0:
        raise ValueError("fps must be positive, got {}".format(fps))
    return frame / fps


def seconds_to_frame(seconds: float, fps: float) -> float:
    """Convert playback seconds to a (fractional) frame position."""
    if fps <= 0:
        raise ValueError("fps must be positive, got {}".format(fps))
    return seconds * fps
