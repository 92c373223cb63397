"""Playback synchronization: playback time to active cue and active word.

WHY: The render loop asks the same question 24–60 times per simulated
second: "what caption is on screen now, and which word is being spoken?"
The answer must be deterministic (the same frame always paints the same
overlay), cheap, and must never raise. A caption glitch must not abort a
render job.

HOW: Three layers, each usable on its own:
  active_word_index() — time within one cue to a word index, using either
      the uniform subdivision of the cue by its word count or real word
      timings when the recognizer supplied them
  synchronize()       — time to SyncState over a whole timeline (linear
      first-match lookup, same semantics as timeline.cue_at)
  PlaybackSynchronizer — a per-render object holding the cues, the caption
      style and the frame clock; binary-searches sorted timelines and
      builds a FrameOverlay (opacity, entry scale, per-word states) for
      each frame

RULES:
- Cue bounds are inclusive at both ends; at a shared boundary the earlier
  cue wins, exactly like a linear scan.
- Uniform split: word_duration = (end - start) / N,
  index = floor((t - start) / word_duration) clamped to [0, N-1].
- Real timings: index = last word whose start <= t, clamped the same way.
- Words before the active index are "spoken", the active one "active",
  later ones "upcoming".
- Only the karaoke style paints per-word states; every style gets the
  active word index in SyncState.
- No method raises after construction; bad times yield "no active cue".
"""

from __future__ import annotations

import bisect
import enum
import logging
import math
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from caption_timeline.core.ir import Cue
from caption_timeline.core.timecode import frame_to_seconds, seconds_to_frame
from cue_segmenter.models import Word

logger = logging.getLogger(__name__)

# Absorbs float noise at word boundaries ((3.0 - 2.0) / 1.0 stays index 1).
_INDEX_EPSILON = 1e-9

ENTRY_SCALE_FROM = 0.8
ENTRY_SCALE_FRAMES = 10
ACTIVE_WORD_SCALE = 1.15
ACTIVE_WORD_RAMP = 0.2


class CaptionStyle(str, enum.Enum):
    """Caption display styles understood by the overlay painter."""

    BOTTOM_CENTERED = "bottom-centered"
    TOP_BAR = "top-bar"
    KARAOKE = "karaoke"

    @property
    def highlights_words(self) -> bool:
        return self is CaptionStyle.KARAOKE


class WordState(str, enum.Enum):
    SPOKEN = "spoken"
    ACTIVE = "active"
    UPCOMING = "upcoming"


@dataclass
class SyncState:
    """Answer to "what is on screen at this time".

    Attributes:
        active_cue: The cue containing the time, or None.
        active_word_index: Index of the spoken word within active_cue, or
            None when there is no active cue or it has no words.
    """

    active_cue: Cue | None = None
    active_word_index: int | None = None

    def to_dict(self) -> dict:
        return {
            "activeCue": self.active_cue.to_dict() if self.active_cue else None,
            "activeWordIndex": self.active_word_index,
        }


@dataclass
class WordHighlight:
    """Paint instructions for one word of a karaoke cue."""

    index: int
    text: str
    state: WordState
    scale: float = 1.0


@dataclass
class FrameOverlay:
    """Everything the painter needs to draw one frame's caption.

    Attributes:
        frame: Frame number that was queried.
        time: Playback time of the frame in seconds.
        cue: The active cue.
        style: Caption style in effect.
        opacity: Fade opacity in [0, 1].
        scale: Whole-caption scale (karaoke entry pop, 1.0 otherwise).
        active_word_index: As in SyncState.
        words: Per-word paint states; empty for plain styles.
    """

    frame: float
    time: float
    cue: Cue
    style: CaptionStyle
    opacity: float
    scale: float = 1.0
    active_word_index: int | None = None
    words: list[WordHighlight] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "frame": self.frame,
            "time": self.time,
            "cue": self.cue.to_dict(),
            "style": self.style.value,
            "opacity": self.opacity,
            "scale": self.scale,
            "activeWordIndex": self.active_word_index,
            "words": [
                {"index": w.index, "text": w.text, "state": w.state.value, "scale": w.scale}
                for w in self.words
            ],
        }


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _interpolate(value: float, x0: float, x1: float, y0: float, y1: float) -> float:
    """Linear interpolation of value over [x0, x1] onto [y0, y1], clamped."""
    if x1 <= x0:
        return y1 if value >= x1 else y0
    ratio = _clamp((value - x0) / (x1 - x0), 0.0, 1.0)
    return y0 + (y1 - y0) * ratio


def cue_words(cue: Cue, word_timings: Sequence[Word] | None = None) -> list[Word]:
    """Return the words of a cue with their display timing.

    Real word timings are returned as given. Otherwise the cue text is
    split on whitespace and the cue duration divided evenly among the words.
    """
    if word_timings:
        return list(word_timings)

    texts = cue.text.split()
    if not texts:
        return []
    width = cue.duration / len(texts)
    return [
        Word(text=text, start=cue.start + i * width, end=cue.start + (i + 1) * width)
        for i, text in enumerate(texts)
    ]


def active_word_index(
    cue: Cue,
    current_time: float,
    word_timings: Sequence[Word] | None = None,
) -> int | None:
    """Return the index of the word being spoken at current_time.

    Returns None if the cue has no words. The result is clamped to the
    word range, so times at or past the cue end map to the last word.
    """
    if word_timings:
        starts = [w.start for w in word_timings]
        index = bisect.bisect_right(starts, current_time + _INDEX_EPSILON) - 1
        return int(_clamp(index, 0, len(word_timings) - 1))

    count = len(cue.text.split())
    if count == 0:
        return None

    word_duration = cue.duration / count
    if word_duration <= 0:
        return 0
    index = math.floor((current_time - cue.start) / word_duration + _INDEX_EPSILON)
    return int(_clamp(index, 0, count - 1))


def synchronize(
    cues: Sequence[Cue],
    current_time: float,
    word_timings: Mapping[str, Sequence[Word]] | None = None,
) -> SyncState:
    """Map a playback time to the active cue and word over a timeline.

    Args:
        cues: Timeline in sequence order.
        current_time: Playback time in seconds.
        word_timings: Optional real word timings keyed by cue id.

    Returns:
        SyncState; empty when no cue contains current_time.
    """
    if current_time is None or math.isnan(current_time):
        return SyncState()

    for cue in cues:
        if cue.contains(current_time):
            timings = word_timings.get(cue.id) if word_timings else None
            return SyncState(
                active_cue=cue,
                active_word_index=active_word_index(cue, current_time, timings),
            )
    return SyncState()


class PlaybackSynchronizer:
    """Per-render synchronizer over one timeline.

    WHY: A render job queries every frame of the video. Rebuilding lookup
    structures per frame is wasted work, and the style, frame rate and fade
    length are fixed for the whole job.

    HOW: The constructor snapshots the cues and checks whether they are
    sorted, non-overlapping and of positive duration. If so, lookups binary-search the
    start times and step back one cue to honour the earlier-cue-wins rule at
    shared boundaries; otherwise they fall back to the linear scan.

    RULES:
    - fps must be positive and fade_frames non-negative (ValueError)
    - Lookups return exactly what synchronize() would return
    - overlay_at_frame() returns None when no cue is active
    """

    def __init__(
        self,
        cues: Sequence[Cue],
        style: CaptionStyle | str = CaptionStyle.BOTTOM_CENTERED,
        fps: float = 30.0,
        fade_frames: int = 5,
        word_timings: Mapping[str, Sequence[Word]] | None = None,
    ) -> None:
        if fps <= 0:
            raise ValueError("fps must be positive, got {}".format(fps))
        if fade_frames < 0:
            raise ValueError("fade_frames must not be negative, got {}".format(fade_frames))

        self.cues: list[Cue] = list(cues)
        self.style = CaptionStyle(style)
        self.fps = float(fps)
        self.fade_frames = fade_frames
        self.word_timings: dict[str, list[Word]] = {
            key: list(value) for key, value in (word_timings or {}).items()
        }

        self._starts = [cue.start for cue in self.cues]
        self._indexed = all(cue.start < cue.end for cue in self.cues) and all(
            a.end <= b.start for a, b in zip(self.cues, self.cues[1:])
        )
        if not self._indexed:
            logger.debug("Timeline is unsorted or overlapping; using linear lookup")

    def _find_cue(self, current_time: float) -> Cue | None:
        if not self._indexed:
            for cue in self.cues:
                if cue.contains(current_time):
                    return cue
            return None

        index = bisect.bisect_right(self._starts, current_time) - 1
        if index < 0:
            return None
        # A cue ending exactly where the found one starts is earlier in order
        if index > 0 and self.cues[index - 1].end >= current_time:
            return self.cues[index - 1]
        cue = self.cues[index]
        return cue if cue.contains(current_time) else None

    def synchronize(self, current_time: float) -> SyncState:
        """Return the active cue and word index at current_time."""
        if current_time is None or math.isnan(current_time):
            return SyncState()

        cue = self._find_cue(current_time)
        if cue is None:
            return SyncState()
        return SyncState(
            active_cue=cue,
            active_word_index=active_word_index(
                cue, current_time, self.word_timings.get(cue.id)
            ),
        )

    def synchronize_frame(self, frame: int | float) -> SyncState:
        """Return the SyncState at a frame number of this job's clock."""
        return self.synchronize(frame_to_seconds(frame, self.fps))

    def opacity_at(self, cue: Cue, frame: float) -> float:
        """Fade-in/out opacity of a cue at a frame, clamped to [0, 1]."""
        if self.fade_frames == 0:
            return 1.0
        start_frame = seconds_to_frame(cue.start, self.fps)
        end_frame = seconds_to_frame(cue.end, self.fps)
        fade_in = _clamp((frame - start_frame) / self.fade_frames, 0.0, 1.0)
        fade_out = _clamp((end_frame - frame) / self.fade_frames, 0.0, 1.0)
        return min(fade_in, fade_out)

    def overlay_at_frame(self, frame: int | float) -> FrameOverlay | None:
        """Describe the caption overlay for one frame, or None."""
        current_time = frame_to_seconds(frame, self.fps)
        state = self.synchronize(current_time)
        cue = state.active_cue
        if cue is None:
            return None

        overlay = FrameOverlay(
            frame=frame,
            time=current_time,
            cue=cue,
            style=self.style,
            opacity=self.opacity_at(cue, frame),
            active_word_index=state.active_word_index,
        )
        if not self.style.highlights_words:
            return overlay

        start_frame = seconds_to_frame(cue.start, self.fps)
        overlay.scale = _interpolate(
            frame, start_frame, start_frame + ENTRY_SCALE_FRAMES, ENTRY_SCALE_FROM, 1.0
        )
        overlay.words = self._word_highlights(cue, current_time, state.active_word_index)
        return overlay

    def _word_highlights(
        self, cue: Cue, current_time: float, active_index: int | None
    ) -> list[WordHighlight]:
        words = cue_words(cue, self.word_timings.get(cue.id))
        if not words or active_index is None:
            return []

        active = words[active_index]
        word_duration = active.duration
        if word_duration > 0:
            elapsed = _clamp(current_time - active.start, 0.0, word_duration)
            active_scale = _interpolate(
                elapsed, 0.0, word_duration * ACTIVE_WORD_RAMP, 1.0, ACTIVE_WORD_SCALE
            )
        else:
            active_scale = ACTIVE_WORD_SCALE

        highlights: list[WordHighlight] = []
        for i, word in enumerate(words):
            if i < active_index:
                highlights.append(WordHighlight(i, word.text, WordState.SPOKEN))
            elif i == active_index:
                highlights.append(WordHighlight(i, word.text, WordState.ACTIVE, active_scale))
            else:
                highlights.append(WordHighlight(i, word.text, WordState.UPCOMING))
        return highlights
