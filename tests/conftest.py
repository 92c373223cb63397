"""Shared test fixtures for the caption timeline test suite.

WHY: Segmentation, formatter, timeline and CLI tests all need the same
small, hand-verified samples: a recognizer word stream with a known break,
a clean three-cue timeline, and a recognizer payload in the common
provider shapes. Centralizing them keeps every module testing the same
ground truth.

HOW: Module-level constants hold the raw data; fixtures hand out fresh
copies so a test that mutates its sample cannot leak into another.

RULES:
- SCENARIO_WORDS break into exactly two cues under every preset whose
  pause threshold is below the 1.2 s pause (standard, karaoke). long_form
  keeps them as one cue.
- sample_cues are valid: positive durations, non-overlapping, sorted.
- Fixtures return new objects on every call.
"""

import copy
from typing import Any, Dict

import pytest

from caption_timeline.core.ir import Cue
from cue_segmenter.models import Segment, Word


# ---------------------------------------------------------------------------
# Recognizer samples
# ---------------------------------------------------------------------------

SCENARIO_WORDS = [
    ("Hi", 0.0, 0.3),
    ("there.", 0.3, 0.8),
    ("How", 2.0, 2.2),
    ("are", 2.2, 2.4),
    ("you", 2.4, 2.7),
]

WHISPER_STYLE_PAYLOAD: Dict[str, Any] = {
    "text": " Hi there. How are you",
    "segments": [
        {
            "id": 0,
            "start": 0.0,
            "end": 0.8,
            "text": " Hi there.",
            "words": [
                {"word": " Hi", "start": 0.0, "end": 0.3},
                {"word": " there.", "start": 0.3, "end": 0.8},
            ],
        },
        {
            "id": 1,
            "start": 2.0,
            "end": 2.7,
            "text": " How are you",
            "words": [
                {"word": " How", "start": 2.0, "end": 2.2},
                {"word": " are", "start": 2.2, "end": 2.4},
                {"word": " you", "start": 2.4, "end": 2.7},
            ],
        },
    ],
}

MILLISECOND_PAYLOAD: Dict[str, Any] = {
    "text": "Hi there. How are you",
    "words": [
        {"text": "Hi", "start": 0, "end": 300, "confidence": 0.98},
        {"text": "there.", "start": 300, "end": 800, "confidence": 0.97},
        {"text": "How", "start": 2000, "end": 2200, "confidence": 0.95},
        {"text": "are", "start": 2200, "end": 2400, "confidence": 0.96},
        {"text": "you", "start": 2400, "end": 2700, "confidence": 0.99},
    ],
}


@pytest.fixture
def scenario_words():
    """Five words that split on the 1.2 s pause after "there."."""
    return [Word(text=t, start=s, end=e) for t, s, e in SCENARIO_WORDS]


@pytest.fixture
def sample_segments():
    return [
        Segment(start=0.0, end=0.8, text="Hi there."),
        Segment(start=2.0, end=2.7, text="How are you"),
    ]


@pytest.fixture
def whisper_payload():
    """Recognizer payload with words nested inside segments."""
    return copy.deepcopy(WHISPER_STYLE_PAYLOAD)


@pytest.fixture
def millisecond_payload():
    """Recognizer payload with a flat millisecond word list."""
    return copy.deepcopy(MILLISECOND_PAYLOAD)


# ---------------------------------------------------------------------------
# Timelines
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_cues():
    """Three valid cues: two separated by a small gap, one after a long gap."""
    return [
        Cue(id="caption_1", start=1.0, end=3.5, text="Hello world"),
        Cue(id="caption_2", start=3.8, end=5.0, text="How are you"),
        Cue(id="caption_3", start=8.0, end=10.25, text="Fine, thanks."),
    ]


@pytest.fixture
def sample_srt():
    return (
        "1\n00:00:01,000 --> 00:00:03,500\nHello world\n\n"
        "2\n00:00:03,800 --> 00:00:05,000\nHow are you\n\n"
        "3\n00:00:08,000 --> 00:00:10,250\nFine, thanks.\n"
    )
