"""Caption timeline engine — recognizer output to synchronized captions.

WHY: Speech recognizers produce timing, not captions. Editors, players and
render jobs all need the same thing from that timing: a clean list of
timed cues they can edit, exchange as SRT/WebVTT/JSON, and paint frame by
frame with the right word highlighted. This package is that shared engine.

HOW: Four stages, each independently usable and testable:
assemble (recognizer JSON to the RecognizerOutput IR), segment (the
cue_segmenter library plus id assignment), edit (timeline validation,
merge, split, shift) and play (time or frame to active cue and word).
Pluggable formatters read and write the interchange formats.

RULES:
- Every stage consumes and produces the Cue IR
- Adding a new interchange format = one new formatter module, no core changes
- Operations return new timelines; cues are never mutated in place
"""

__version__ = "0.1.0"
