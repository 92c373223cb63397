"""Core IR, time codec, assembly, timeline operations and synchronization.

WHY: The core package is the stable heart of the engine: the Cue IR and
every operation over it. Formatters and the CLI are thin layers on top.

HOW: ir.py defines the data structures, timecode.py the HH:MM:SS,mmm codec
and frame clock, assembler.py normalizes recognizer payloads, timeline.py
validates and edits timelines, sync.py maps playback time to what is on
screen.

RULES:
- IR dataclasses are the contract — change with care
- Core modules are format-agnostic — no SRT/VTT/JSON text handling here
"""
