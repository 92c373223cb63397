"""Structured JSON caption formatter — a list of cue records.

WHY: Editors and web front-ends exchange timelines as JSON because it
keeps cue ids and full-precision times. It is the only format that
round-trips a timeline exactly.

HOW: Serialization writes ``{"captions": [{id, start, end, text}, ...]}``.
Parsing accepts that object or a bare list of records, checks each record
against the caption record schema (jsonschema) and fills missing fields
with index-derived defaults.

RULES:
- Missing or null fields default to id ``caption_<index+1>``, start 0,
  end 0, text "". These defaults can violate the cue invariants; callers
  must validate after parsing.
- A record of the wrong shape (not an object, non-numeric start, …) is
  skipped with a warning.
- Content that is not JSON, or an object without a ``captions`` list,
  raises FormatError.
- A leading BOM is ignored.
- Output keeps non-ASCII text as-is (ensure_ascii=False).
- Registered as "json" in the FORMATTERS dict.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import jsonschema

from caption_timeline.adapters.caption_adapter import cue_id
from caption_timeline.core.ir import Cue, ParseResult
from caption_timeline.errors import FormatError
from caption_timeline.formatters.base import (
    BaseFormatter,
    FormatterOutput,
    normalize_newlines,
    record_skip,
)

SCHEMA_PATH = Path(__file__).resolve().parent / "captions.schema.json"
CAPTIONS_KEY = "captions"

_CACHED_SCHEMA: Optional[dict] = None


def get_schema() -> dict:
    """Load and cache the caption timeline JSON schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def _record_schema() -> dict:
    schema = get_schema()
    return {
        "$schema": schema["$schema"],
        "definitions": schema["definitions"],
        "$ref": "#/definitions/caption",
    }


def extract_records(data: Any) -> list:
    """Return the record list from a bare list or a ``captions`` wrapper.

    Raises:
        FormatError: If data is neither shape.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get(CAPTIONS_KEY), list):
        return data[CAPTIONS_KEY]
    raise FormatError("Invalid JSON format: expected a list or an object with a 'captions' list")


class JSONCaptionFormatter(BaseFormatter):
    """Formatter for structured JSON caption lists."""

    key = "json"
    suffix = ".json"
    media_type = "application/json"

    @property
    def name(self) -> str:
        return "JSON captions"

    def serialize(self, cues: list[Cue]) -> FormatterOutput:
        payload = {CAPTIONS_KEY: [cue.to_dict() for cue in cues]}
        return FormatterOutput(
            suffix=self.suffix,
            content=json.dumps(payload, indent=2, ensure_ascii=False),
            media_type=self.media_type,
        )

    def parse(self, content: str) -> ParseResult:
        try:
            data = json.loads(normalize_newlines(content))
        except json.JSONDecodeError as exc:
            raise FormatError("Failed to parse JSON captions: {}".format(exc)) from exc

        records = extract_records(data)
        record_schema = _record_schema()
        result = ParseResult(cues=[], format=self.key)

        for index, item in enumerate(records):
            try:
                jsonschema.validate(instance=item, schema=record_schema)
            except jsonschema.ValidationError as exc:
                record_skip(result, self.name, "Record {}: {}".format(index + 1, exc.message))
                continue

            raw_id = item.get("id")
            result.cues.append(Cue(
                id=str(raw_id) if raw_id else cue_id(index + 1),
                start=float(item.get("start") or 0),
                end=float(item.get("end") or 0),
                text=item.get("text") or "",
            ))

        return result
