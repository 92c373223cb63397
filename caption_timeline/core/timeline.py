"""Timeline operations: validation, merge, split, shift and lookup.

WHY: Cue timelines come from noisy recognizers and from people editing
caption files by hand. Before a timeline is exported or rendered, callers
need to know whether it holds together, and they need a few well-defined
repairs (merge cues split by tiny gaps, break up overlong cues, re-sync a
whole file by an offset).

HOW: Plain functions over lists of Cue. Every operation builds and returns
a new list; the input list and its cues are left untouched so one
timeline can be shared by several callers.

RULES:
- validate() reports, it never repairs. Only merge_adjacent() and
  split_long() change cue boundaries, and only when called explicitly.
- Overlap checks look at sequence-adjacent pairs only.
- merge_adjacent() is a single left-to-right reduction.
- split_long() uses balanced chunking and proportional time slices.
- shift() clamps start and end to zero independently.
- cue_at() returns the first cue in sequence order containing the time.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace

from caption_timeline.core.ir import Cue, ValidationResult

logger = logging.getLogger(__name__)


def validate(cues: list[Cue]) -> ValidationResult:
    """Check a timeline against the cue invariants.

    WHY: Exporters and the render loop assume well-formed cues. Reporting
    every violation at once lets an editor fix them in a single pass.

    HOW: One walk over the list. Each cue is checked on its own (id, start,
    end, text); each cue is also compared with its successor for overlap.

    RULES:
    - start >= 0, end > start, non-blank text, non-empty id
    - cue[i].end <= cue[i+1].start for sequence-adjacent cues
    - An empty timeline is valid
    - Messages number cues from 1

    Returns:
        ValidationResult with valid flag and one message per violation.
    """
    errors: list[str] = []

    for index, cue in enumerate(cues):
        label = "Caption {}".format(index + 1)

        if not cue.id:
            errors.append("{}: Missing id".format(label))
        if cue.start < 0:
            errors.append("{}: Start time cannot be negative".format(label))
        if cue.end <= cue.start:
            errors.append("{}: End time must be after start time".format(label))
        if not cue.text or not cue.text.strip():
            errors.append("{}: Empty text".format(label))

        if index + 1 < len(cues):
            next_cue = cues[index + 1]
            if cue.end > next_cue.start:
                errors.append(
                    "{} overlaps with caption {}".format(label, index + 2)
                )

    return ValidationResult(valid=not errors, errors=errors)


def merge_adjacent(cues: list[Cue], max_gap: float = 0.5) -> list[Cue]:
    """Merge each cue into its predecessor when the gap is at most max_gap.

    The running cue keeps its id and start; it takes the merged cue's end
    and appends its text after a single space. A gap above max_gap starts a
    new run. Re-running with the same max_gap returns an equal timeline.
    """
    if not cues:
        return []

    merged: list[Cue] = []
    current = replace(cues[0])

    for next_cue in cues[1:]:
        gap = next_cue.start - current.end
        if gap <= max_gap:
            current = replace(
                current,
                end=next_cue.end,
                text="{} {}".format(current.text, next_cue.text),
            )
        else:
            merged.append(current)
            current = replace(next_cue)

    merged.append(current)
    logger.debug("Merged %d cues into %d (max_gap=%.3f)", len(cues), len(merged), max_gap)
    return merged


def split_long(
    cues: list[Cue],
    max_duration: float = 5.0,
    max_words: int = 12,
) -> list[Cue]:
    """Split cues that exceed max_duration or max_words.

    WHY: Long cues cover the picture for too long and are hard to read.
    Greedy chunking (fill 12, then leave 1) produces a dangling last cue;
    balanced chunking keeps the pieces the same size.

    HOW: For a cue with n words over either bound:
      chunk_size  = ceil(n / ceil(n / max_words))
      chunk_count = ceil(n / chunk_size)
      slice       = duration / chunk_count
    Chunk k spans [start + k*slice, start + (k+1)*slice]; the last chunk
    ends exactly at the original end. Chunk ids are ``<id>_<k+1>``.

    RULES:
    - Cues within both bounds pass through unchanged (same id)
    - Chunks are contiguous, non-overlapping and cover the original span
    - A cue over the duration bound but within max_words becomes a single
      chunk ``<id>_1`` with the original span
    - Cues without words pass through unchanged
    """
    if max_words < 1:
        raise ValueError("max_words must be at least 1, got {}".format(max_words))

    result: list[Cue] = []

    for cue in cues:
        words = cue.text.split()
        duration = cue.duration

        if (duration <= max_duration and len(words) <= max_words) or not words:
            result.append(replace(cue))
            continue

        n = len(words)
        chunk_size = math.ceil(n / math.ceil(n / max_words))
        chunk_count = math.ceil(n / chunk_size)
        slice_width = duration / chunk_count

        for k in range(chunk_count):
            chunk_words = words[k * chunk_size:(k + 1) * chunk_size]
            start = cue.start + k * slice_width
            if k == chunk_count - 1:
                end = cue.end
            else:
                end = min(cue.start + (k + 1) * slice_width, cue.end)
            result.append(Cue(
                id="{}_{}".format(cue.id, k + 1),
                start=start,
                end=end,
                text=" ".join(chunk_words),
            ))

        logger.debug("Split cue %s into %d chunks", cue.id, chunk_count)

    return result


def shift(cues: list[Cue], offset: float) -> list[Cue]:
    """Move every cue by offset seconds, clamping each field at zero.

    Clamping is per field: a large negative offset can push start to 0
    while end stays positive but lands at or before start. Such cues are
    logged and left for validate() to report.
    """
    shifted: list[Cue] = []
    for cue in cues:
        moved = replace(
            cue,
            start=max(0.0, cue.start + offset),
            end=max(0.0, cue.end + offset),
        )
        if moved.end <= moved.start:
            logger.warning(
                "Shift by %.3f collapsed cue %s to [%.3f, %.3f]",
                offset, cue.id, moved.start, moved.end,
            )
        shifted.append(moved)
    return shifted


def cue_at(cues: list[Cue], seconds: float) -> Cue | None:
    """Return the first cue whose [start, end] contains seconds, or None."""
    for cue in cues:
        if cue.contains(seconds):
            return cue
    return None


def total_duration(cues: list[Cue]) -> float:
    """Return the latest cue end, or 0.0 for an empty timeline."""
    if not cues:
        return 0.0
    return max(cue.end for cue in cues)
