"""Data models for the cue segmenter.

WHY: The segmenter needs a structured representation of speech-recognition
output. Recognizers return either timestamped words or pre-grouped
segments; both are modelled here so the grouping functions never touch
raw provider dicts.

HOW: Two small dataclasses. Word is the fine-grained input of the grouping
algorithm (and of word-level highlighting). Segment is a recognizer-side
phrase that maps 1:1 onto a caption block.

RULES:
- Timestamps are in seconds (float), not milliseconds.
- Word.end > Word.start; the assembler drops words that break this.
- Word.text is never modified by the segmenter, only joined.
- Neither type carries an id; ids are assigned when cues are built.
"""

from dataclasses import dataclass


@dataclass
class Word:
    """A single timestamped word from a speech-to-text transcript.

    Attributes:
        text: The word text, punctuation included ("there.").
        start: Start time in seconds.
        end: End time in seconds.
    """
    text: str
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass
class Segment:
    """A recognizer-provided phrase with its own time range.

    Attributes:
        start: Start time in seconds.
        end: End time in seconds.
        text: Phrase text as returned by the recognizer.
    """
    start: float
    end: float
    text: str
