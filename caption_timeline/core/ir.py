"""Intermediate representation dataclasses for caption timelines.

WHY: Recognizer output, interchange files and the render loop all talk
about the same thing, a list of timed caption cues, but each arrives in
its own shape. The IR gives every module one well-typed form to consume
and produce, decoupling parsing, editing and rendering.

HOW: Four dataclasses:
  Cue              — one caption entry with id, time range and text
  RecognizerOutput — the normalized view of one recognizer response
  ParseResult      — cues parsed from an interchange file plus diagnostics
  ValidationResult — the invariant report returned by timeline validation

RULES:
- All times are float seconds.
- Cue ids are assigned when a cue is created and survive edits of that cue.
- Timeline operations return new lists; they never mutate a Cue in place.
- Word and Segment come from the cue_segmenter library and are reused as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cue_segmenter.models import Segment, Word


@dataclass
class Cue:
    """A single caption entry.

    WHY: The cue is the unit every consumer understands: editors change
    its text, exporters write it, the render loop paints it.

    RULES:
    - start >= 0 and end > start for a valid cue
    - text is non-empty after trimming for a valid cue
    - Cues in a timeline are ordered by start; adjacent cues must not overlap
    """

    id: str
    start: float
    end: float
    text: str

    @property
    def duration(self) -> float:
        return self.end - self.start

    def contains(self, seconds: float) -> bool:
        """True if seconds falls inside [start, end], both ends inclusive."""
        return self.start <= seconds <= self.end

    def to_dict(self) -> dict:
        return {"id": self.id, "start": self.start, "end": self.end, "text": self.text}


@dataclass
class RecognizerOutput:
    """The timing a recognizer returned for one transcription request.

    WHY: Providers return words, segments, a bare transcript, or some mix.
    Holding all three lets the segmentation engine pick the finest timing
    available without knowing the provider.

    RULES:
    - words are time-ordered and each has end > start
    - segments keep their recognizer order and timing verbatim
    - text is the full transcript, possibly empty
    """

    words: list[Word] = field(default_factory=list)
    segments: list[Segment] = field(default_factory=list)
    text: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.words and not self.segments and not self.text.strip()


@dataclass
class ParseResult:
    """Cues read from an interchange file, with the blocks that were skipped.

    Attributes:
        cues: Parsed cues in file order.
        warnings: One message per skipped block or record.
        format: Registry key of the format that was parsed ("srt", "vtt", "json").
    """

    cues: list[Cue]
    warnings: list[str] = field(default_factory=list)
    format: str = ""


@dataclass
class ValidationResult:
    """Outcome of checking a timeline against the cue invariants.

    Attributes:
        valid: True when errors is empty.
        errors: One human-readable message per violation.
    """

    valid: bool
    errors: list[str] = field(default_factory=list)
