"""Adapter: RecognizerOutput IR to Cue timeline via the cue segmenter.

WHY: The cue_segmenter library only knows about words, segments and
anonymous {"start", "end", "text"} blocks; it has no notion of cue
identity. The application needs Cue objects whose ids are assigned once,
at creation, and stay stable across later edits. This adapter bridges the
two: it feeds the IR into the library and stamps ids onto the result.

HOW: build_cues() hands words, segments and text to
build_caption_blocks() (which chooses the finest timing available), then
wraps each block in a Cue with a sequential ``caption_<n>`` id.

RULES:
- Input RecognizerOutput is never modified.
- Ids are 1-based and sequential within one produced timeline.
- Empty recognizer output yields an empty list, never an exception.
- config, when given, replaces the preset entirely (see cue_segmenter).
"""

from __future__ import annotations

import logging
from typing import Any

from caption_timeline.core.ir import Cue, RecognizerOutput
from cue_segmenter import build_caption_blocks

logger = logging.getLogger(__name__)

CUE_ID_PREFIX = "caption_"


def cue_id(position: int) -> str:
    """Return the engine id for the cue at 1-based position."""
    return "{}{}".format(CUE_ID_PREFIX, position)


def blocks_to_cues(blocks: list[dict[str, Any]]) -> list[Cue]:
    """Assign sequential ids to segmenter blocks."""
    return [
        Cue(id=cue_id(i), start=float(b["start"]), end=float(b["end"]), text=b["text"])
        for i, b in enumerate(blocks, 1)
    ]


def build_cues(
    output: RecognizerOutput,
    preset: str = "standard",
    config: dict | None = None,
) -> list[Cue]:
    """Segment recognizer output into a fresh Cue timeline.

    Args:
        output: Normalized recognizer output.
        preset: Segmenter preset name.
        config: Optional full threshold config overriding the preset.

    Returns:
        Cues in playback order.
    """
    blocks = build_caption_blocks(
        words=output.words,
        segments=output.segments,
        text=output.text,
        preset=preset,
        config=config,
    )

    if output.words:
        source = "words"
    elif output.segments:
        source = "segments"
    else:
        source = "transcript fallback"
    logger.info("Built %d cues from %s", len(blocks), source)

    return blocks_to_cues(blocks)
