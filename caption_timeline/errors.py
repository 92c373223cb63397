"""Exception hierarchy for caption timeline processing.

WHY: Recognizer output and hand-edited caption files are noisy. Callers
need to tell a skippable problem (one malformed block) from a fatal one
(content nobody can classify) without string-matching messages.

HOW: A small tree rooted at CaptionTimelineError. FormatError also derives
from ValueError so code that already guards parsing with ``except
ValueError`` keeps working.

RULES:
- FormatError is raised per timestamp/block; parsers catch it, record a
  warning and skip the block.
- UnknownFormatError is fatal to an import call and reaches the caller.
- Validation problems are returned (ValidationResult), never raised.
- EmptyInputError is never raised by the segmentation API itself, which
  returns an empty timeline; front-ends raise it when an empty result is
  an error for them.
"""

from __future__ import annotations


class CaptionTimelineError(Exception):
    """Base error for caption timeline processing."""


class FormatError(CaptionTimelineError, ValueError):
    """Raised when a timestamp or caption block cannot be parsed."""

    def __init__(self, message: str, *, block_index: int | None = None) -> None:
        super().__init__(message)
        self.block_index = block_index


class UnknownFormatError(FormatError):
    """Raised when auto-detection cannot classify caption content."""


class EmptyInputError(CaptionTimelineError):
    """Raised by front-ends when recognizer output produced no cues."""
