"""Cue segmenter library: recognizer output to display-ready caption blocks.

WHY: Every speech-recognition provider hands back timing at a different
granularity: words, phrases, or just a transcript string. This package is
the single place where that output is grouped into caption-sized blocks,
so thresholds are tuned once and every provider path benefits.

HOW: The public entry point is build_caption_blocks(). It resolves the
preset name to a config dict (or takes a custom one), picks the finest
timing available (words, then segments, then the bare text fallback) and
returns plain {"start", "end", "text"} block dicts.

RULES:
- build_caption_blocks() is the public API for producing blocks.
- Preset names: "standard" (default), "karaoke", "long_form".
- Never mutate the preset constants — copies are made internally.
- Empty input yields an empty list, never an exception.
"""

import copy
from typing import Any, Dict, List, Optional

from .core import (
    fallback_block,
    segment_segments,
    segment_words,
    try_parse_json,
)
from .models import Segment, Word
from .presets import CONFIG_KEYS, PRESETS, PRESET_KARAOKE, PRESET_LONG_FORM, PRESET_STANDARD

__all__ = [
    "build_caption_blocks",
    "resolve_config",
    "segment_words",
    "segment_segments",
    "fallback_block",
    "try_parse_json",
    "Word",
    "Segment",
    "PRESETS",
    "PRESET_STANDARD",
    "PRESET_KARAOKE",
    "PRESET_LONG_FORM",
    "CONFIG_KEYS",
]


def resolve_config(preset: str = "standard", config: Optional[dict] = None) -> Dict:
    """Return a private config dict for a preset name or a custom config.

    Raises:
        ValueError: If the preset name is unknown and no config is given, or
            a custom config lacks one of CONFIG_KEYS.
    """
    if config is not None:
        missing = [key for key in CONFIG_KEYS if key not in config]
        if missing:
            raise ValueError("Config is missing keys: {}".format(", ".join(missing)))
        return copy.deepcopy(config)

    if preset not in PRESETS:
        raise ValueError(
            "Unknown preset '{}'. Available: {}".format(
                preset, ", ".join(PRESETS.keys())
            )
        )
    return copy.deepcopy(PRESETS[preset])


def build_caption_blocks(
    words: Optional[List[Word]] = None,
    segments: Optional[List[Segment]] = None,
    text: Optional[str] = None,
    preset: str = "standard",
    config: Optional[dict] = None,
) -> List[Dict[str, Any]]:
    """Group recognizer output into caption blocks.

    WHY: Callers should not have to know which timing granularity a
    recognizer produced; they hand over whatever they got.

    HOW: Resolves the config, then dispatches on the finest timing present:
    word grouping, 1:1 segment mapping, or the bare-text fallback window.

    Args:
        words: Time-ordered Word objects, if the recognizer returned them.
        segments: Segment objects, if the recognizer returned them.
        text: Bare transcript, used only when words and segments are empty.
        preset: Preset name ("standard", "karaoke", "long_form").
        config: Optional custom config dict. If provided, preset is ignored.

    Returns:
        List of block dicts with start, end, text.

    Raises:
        ValueError: If preset name is not recognized and no config is provided.
    """
    cfg = resolve_config(preset, config)

    if words:
        return segment_words(words, cfg)
    if segments:
        return segment_segments(segments, cfg)
    return fallback_block(text, cfg)
