"""Recognizer payload normalization into the RecognizerOutput IR.

WHY: Speech-recognition providers disagree on everything but the idea of
a timed word. Whisper's verbose JSON nests words inside segments,
AssemblyAI returns a flat ``words`` array in milliseconds, other tools
emit a bare list of ``{"word", "start", "end"}`` objects. The segmentation
engine should see one shape regardless of which provider ran.

HOW: assemble_recognizer_output() accepts the parsed JSON and collects
three things: a flat word list (top-level ``words`` or words nested in
``segments``), the segment list, and the transcript text. Field names are
read through aliases, and millisecond payloads are scaled to seconds.

RULES:
- Object payload: ``words`` (list), ``segments`` (list, may nest ``words``),
  ``text`` (string). Any of them may be missing.
- List payload: a bare list of word objects, or a list of segments when
  any item nests a ``words`` array.
- Aliases: text|word|t, start|s, end|e; start_ms/end_ms are always ms.
- milliseconds=True divides start/end by 1000.
- Words with blank text, missing timing or end <= start are skipped with a
  warning; they would break the Word invariant.
- Segments are kept with their timing verbatim (validation reports bad
  ranges); only blank-text segments are dropped later by the segmenter.
- Extra provider fields (speaker, confidence, language) are ignored.
"""

from __future__ import annotations

import logging
from typing import Any

from caption_timeline.core.ir import RecognizerOutput
from cue_segmenter import try_parse_json
from cue_segmenter.models import Segment, Word

logger = logging.getLogger(__name__)

_TEXT_KEYS = ("text", "word", "t")
_START_KEYS = ("start", "s")
_END_KEYS = ("end", "e")


def load_recognizer_payload(raw: str) -> Any:
    """Parse recognizer JSON text, repairing truncated files when possible.

    Raises:
        ValueError: If the text is not JSON even after bracket completion.
    """
    return try_parse_json(raw)


def assemble_recognizer_output(data: Any, milliseconds: bool = False) -> RecognizerOutput:
    """Normalize a parsed recognizer payload into a RecognizerOutput.

    Args:
        data: Parsed JSON (dict or list) from a recognizer.
        milliseconds: True if start/end values are milliseconds.

    Returns:
        RecognizerOutput with words, segments and transcript text.
    """
    output = RecognizerOutput()
    scale = 1000.0 if milliseconds else 1.0

    if isinstance(data, dict):
        raw_words = data.get("words")
        raw_segments = data.get("segments")
        text = data.get("text")
        if isinstance(text, str):
            output.text = text.strip()

        if isinstance(raw_words, list):
            output.words.extend(_read_words(raw_words, scale))

        if isinstance(raw_segments, list):
            nested_words, segments = _read_segments(raw_segments, scale)
            output.segments.extend(segments)
            if not output.words:
                output.words.extend(nested_words)

    elif isinstance(data, list):
        nested = [item for item in data if isinstance(item, dict) and isinstance(item.get("words"), list)]
        if nested:
            nested_words, segments = _read_segments(data, scale)
            output.words.extend(nested_words)
            output.segments.extend(segments)
        else:
            output.words.extend(_read_words(data, scale))

    else:
        logger.warning("Unsupported recognizer payload type: %s", type(data).__name__)

    if not output.text and output.segments:
        output.text = " ".join(s.text.strip() for s in output.segments if s.text.strip())

    logger.debug(
        "Assembled %d words, %d segments from recognizer payload",
        len(output.words), len(output.segments),
    )
    return output


def _first(item: dict, keys: tuple) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None:
            return value
    return None


def _read_time(item: dict, keys: tuple, ms_key: str, scale: float) -> float | None:
    value = _first(item, keys)
    if value is not None:
        return float(value) / scale
    value = item.get(ms_key)
    if value is not None:
        return float(value) / 1000.0
    return None


def _read_words(items: list, scale: float) -> list[Word]:
    words: list[Word] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Skipping word %d: not an object", index + 1)
            continue

        text = _first(item, _TEXT_KEYS)
        text = text.strip() if isinstance(text, str) else ""
        if not text:
            logger.warning("Skipping word %d: empty text", index + 1)
            continue

        try:
            start = _read_time(item, _START_KEYS, "start_ms", scale)
            end = _read_time(item, _END_KEYS, "end_ms", scale)
        except (TypeError, ValueError):
            logger.warning("Skipping word %d (%r): non-numeric timing", index + 1, text)
            continue

        if start is None or end is None:
            logger.warning("Skipping word %d (%r): missing timing", index + 1, text)
            continue
        if end <= start:
            logger.warning(
                "Skipping word %d (%r): end %.3f is not after start %.3f",
                index + 1, text, end, start,
            )
            continue

        words.append(Word(text=text, start=start, end=end))
    return words


def _read_segments(items: list, scale: float) -> tuple[list[Word], list[Segment]]:
    words: list[Word] = []
    segments: list[Segment] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Skipping segment %d: not an object", index + 1)
            continue

        nested = item.get("words")
        if isinstance(nested, list):
            words.extend(_read_words(nested, scale))

        text = _first(item, _TEXT_KEYS)
        if not isinstance(text, str):
            if isinstance(nested, list):
                text = " ".join(
                    str(_first(w, _TEXT_KEYS) or "").strip()
                    for w in nested if isinstance(w, dict)
                ).strip()
            else:
                text = ""

        try:
            start = _read_time(item, _START_KEYS, "start_ms", scale)
            end = _read_time(item, _END_KEYS, "end_ms", scale)
        except (TypeError, ValueError):
            logger.warning("Skipping segment %d: non-numeric timing", index + 1)
            continue
        if start is None or end is None:
            logger.warning("Skipping segment %d: missing timing", index + 1)
            continue

        segments.append(Segment(start=start, end=end, text=text))
    return words, segments
