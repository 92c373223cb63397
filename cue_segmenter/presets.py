"""Threshold presets for caption segmentation.

WHY: Different caption styles need different grouping pressure. Classic
bottom subtitles tolerate long two-line cues, karaoke-style word highlight
reads best with short bursts, and long-form lectures want fewer, longer
cues. Centralizing the thresholds as importable constants lets callers
select a preset by name and keeps concurrent calls with different presets
free of shared state.

HOW: Each preset is a plain dict with the four break thresholds
(max_duration, max_words, pause_threshold, sentence_min_words) plus the
window used for the bare-transcript fallback cue. PRESETS maps names to
dicts.

RULES:
- Presets are frozen constants — never mutate them at runtime.
- Callers must copy a preset before modifying it (build_caption_blocks
  does this internally).
- Every preset carries all of CONFIG_KEYS.
"""

from typing import Dict, Tuple

# Classic captions: the thresholds recognizer-word grouping has always used
PRESET_STANDARD: Dict = {
    "max_duration": 5.0,
    "max_words": 12,
    "pause_threshold": 1.0,
    "sentence_min_words": 5,
    "fallback_duration": 10.0,
}

# Word-highlight captions: short bursts so the active word stays readable
PRESET_KARAOKE: Dict = {
    "max_duration": 3.0,
    "max_words": 6,
    "pause_threshold": 0.6,
    "sentence_min_words": 3,
    "fallback_duration": 10.0,
}

# Lectures and interviews: fewer, longer cues
PRESET_LONG_FORM: Dict = {
    "max_duration": 10.0,
    "max_words": 15,
    "pause_threshold": 1.5,
    "sentence_min_words": 8,
    "fallback_duration": 10.0,
}

PRESETS: Dict[str, Dict] = {
    "standard": PRESET_STANDARD,
    "karaoke": PRESET_KARAOKE,
    "long_form": PRESET_LONG_FORM,
}

CONFIG_KEYS: Tuple[str, ...] = (
    "max_duration",
    "max_words",
    "pause_threshold",
    "sentence_min_words",
    "fallback_duration",
)
