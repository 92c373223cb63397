"""Core segmentation logic: grouping recognizer output into caption blocks.

WHY: Recognizers emit either a flat stream of timestamped words or
phrase-level segments. Neither is display-ready: word streams have no
caption boundaries at all, and every provider path used to carry its own
copy of the grouping loop with slightly different thresholds. This module
is the one grouping algorithm all of them share.

HOW: The pipeline has three entry points:
  1. segment_words() — greedy left-to-right grouping of words, closing the
     current group when any of four break conditions fires (duration,
     word count, sentence end, pause).
  2. segment_segments() — 1:1 mapping of recognizer segments to blocks.
  3. fallback_block() — a single block covering a default window, used
     when only a bare transcript string is available.
Every entry point returns plain block dicts {"start", "end", "text"}.

RULES:
- ALL functions accept an explicit `config` dict parameter — no global state.
- Break conditions are evaluated only between words; a token is never split,
  so one word longer than max_duration still forms its own block.
- Word text is never modified, only joined with single spaces.
- Blocks carry no id; ids belong to whoever builds cues from the blocks.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from .models import Segment, Word

logger = logging.getLogger(__name__)

# =============================================================================
# Text Utilities
# =============================================================================

SENT_END_RE = re.compile(r"[.!?]$")


def ends_sentence(text: str) -> bool:
    """True if a word ends with sentence punctuation (. ! ?)."""
    return bool(SENT_END_RE.search(text))


def join_words(texts: List[str]) -> str:
    """Join word texts with single spaces and trim the result."""
    return " ".join(texts).strip()


# =============================================================================
# Input Parsing
# =============================================================================

def try_parse_json(raw: str) -> Any:
    """Try to parse JSON, attempting to fix truncated input.

    WHY: Recognizer payloads are sometimes saved from streaming responses or
    copied out of logs and lose their closing brackets. Refusing them
    outright throws away a usable transcript.

    HOW:
      1. Normalize line endings, strip whitespace.
      2. Try direct json.loads().
      3. If that fails, strip a trailing comma and try appending closing
         bracket combinations.

    Args:
        raw: Raw JSON string, possibly incomplete.

    Returns:
        Parsed JSON data.

    Raises:
        ValueError: If JSON cannot be parsed even with attempted fixes.
    """
    raw = raw.replace("\r\n", "\n").replace("\r", "\n").strip()

    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass

    raw_clean = re.sub(r',\s*$', '', raw)

    suffixes = [
        "",
        "]",
        "}]",
        "}]}",
        "]}",
        "]}}",
        "]}]",
    ]

    for candidate in (raw_clean, raw):
        for suffix in suffixes:
            try:
                return json.loads(candidate + suffix)
            except json.JSONDecodeError:
                continue

    raise ValueError("Could not parse JSON input (even with attempted fixes)")


# =============================================================================
# Word Grouping
# =============================================================================

def segment_words(words: List[Word], config: Dict) -> List[Dict[str, Any]]:
    """Group a time-ordered word list into caption blocks.

    WHY: Caption readability is bounded by on-screen time and word count,
    while natural speech offers pauses and sentence ends as good places to
    cut. Each of the four break conditions is an independent pressure valve;
    the sentence-end valve is gated by a minimum word count so short
    exclamations ("Hi there.") do not become one-word flashes.

    HOW: Seed a working group with the first word. For each later word
    compute the would-be duration, the current word count, the pause since
    the group's end, and whether the group's last word ends a sentence.
    Close the group and seed a new one when any condition holds, otherwise
    append the word and extend the group end. Flush the last group.

    RULES:
    - duration:  word.end - group.start > config["max_duration"]
    - words:     len(group) >= config["max_words"]
    - sentence:  group's last word matches [.!?]$ and len(group) >= config["sentence_min_words"]
    - pause:     word.start - group.end > config["pause_threshold"]
    - Block start/end come verbatim from the first word's start and the
      latest word end in the group.

    Args:
        words: Flat, time-ordered list of Word objects.
        config: Configuration dict with the four thresholds.

    Returns:
        List of block dicts with start, end, text.
    """
    if not words:
        return []

    blocks = []  # type: List[Dict[str, Any]]
    current = _new_group(words[0])

    for word in words[1:]:
        segment_duration = word.end - current["start"]
        word_count = len(current["words"])
        pause_gap = word.start - current["end"]
        sentence_done = ends_sentence(current["words"][-1])

        should_break = (
            segment_duration > config["max_duration"]
            or word_count >= config["max_words"]
            or (sentence_done and word_count >= config["sentence_min_words"])
            or pause_gap > config["pause_threshold"]
        )

        if should_break:
            blocks.append(_flush_group(current))
            current = _new_group(word)
        else:
            current["words"].append(word.text)
            # A word that ends early must not pull the end back over an earlier word
            current["end"] = max(current["end"], word.end)

    if current["words"]:
        blocks.append(_flush_group(current))

    return blocks


def _new_group(word: Word) -> Dict[str, Any]:
    return {"start": word.start, "end": word.end, "words": [word.text]}


def _flush_group(group: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "start": group["start"],
        "end": group["end"],
        "text": join_words(group["words"]),
    }


# =============================================================================
# Segment Mapping and Fallback
# =============================================================================

def segment_segments(segments: List[Segment], config: Dict) -> List[Dict[str, Any]]:
    """Map recognizer segments 1:1 onto caption blocks.

    Recognizer phrases are already display-sized, so no regrouping is
    applied. Segments whose text is blank are dropped. Timing is copied
    verbatim; invalid ranges are left for timeline validation to report.
    """
    blocks = []  # type: List[Dict[str, Any]]
    for index, segment in enumerate(segments):
        text = (segment.text or "").strip()
        if not text:
            logger.warning("Dropping segment %d: empty text", index + 1)
            continue
        blocks.append({"start": segment.start, "end": segment.end, "text": text})
    return blocks


def fallback_block(text: Optional[str], config: Dict) -> List[Dict[str, Any]]:
    """Build the single degenerate block for a bare transcript.

    When a recognizer returns neither words nor segments, a timeline with
    one cue spanning [0, fallback_duration] is still better than an empty
    one; callers can edit or discard it.
    """
    text = (text or "").strip()
    if not text:
        return []
    return [{"start": 0.0, "end": float(config["fallback_duration"]), "text": text}]
