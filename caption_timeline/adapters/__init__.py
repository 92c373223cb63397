"""Adapter modules for converting between the IR and external library formats.

WHY: The cue_segmenter library works with anonymous block dicts; the
application works with identified Cue objects. Adapters bridge these
representations so each side can evolve independently.

RULES:
- Adapters must not modify the source IR objects.
- Each adapter lives in its own module under this package.
"""

from caption_timeline.adapters.caption_adapter import blocks_to_cues, build_cues, cue_id

__all__ = ["blocks_to_cues", "build_cues", "cue_id"]
