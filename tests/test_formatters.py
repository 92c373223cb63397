"""Unit tests for the interchange formatters and format detection.

WHY: Caption files are the engine's contract with editors and players. A
formatter that writes one malformed block can make a player drop the whole
file, and a parser that aborts on one bad block throws away a usable
timeline.

HOW: Each formatter is exercised on the shared sample timeline:
  - SRT: exact serialization, the canonical parse example, skipped blocks
  - WebVTT: header, identifiers, NOTE/STYLE blocks, inline tags
  - JSON: defaults for missing fields, per-record schema checks, exact
    round trip, schema-valid output
  - Registry: detection order, auto-detecting parse, unknown keys

RULES:
- JSON output is validated against the package's captions schema.
- Round trips compare times with pytest.approx.
"""

import json

import jsonschema
import pytest

from caption_timeline.core.ir import Cue
from caption_timeline.errors import FormatError, UnknownFormatError
from caption_timeline.formatters import (
    FORMATTERS,
    detect_format,
    get_formatter,
    parse_captions,
    serialize_captions,
)
from caption_timeline.formatters.json_captions import JSONCaptionFormatter, get_schema
from caption_timeline.formatters.srt import SRT_TIME_RANGE_RE, SRTFormatter, parse_time_range
from caption_timeline.formatters.vtt import VTTFormatter


def _times(cues):
    return [t for c in cues for t in (c.start, c.end)]


# ---------------------------------------------------------------------------
# SRT
# ---------------------------------------------------------------------------


class TestSRTFormatter:
    """SubRip serialization and parsing."""

    def test_parse_example(self):
        result = SRTFormatter().parse("1\n00:00:01,000 --> 00:00:03,500\nHello world\n")
        assert len(result.cues) == 1
        cue = result.cues[0]
        assert cue.start == pytest.approx(1.0)
        assert cue.end == pytest.approx(3.5)
        assert cue.text == "Hello world"
        assert cue.id == "caption_1"
        assert result.warnings == []

    def test_serialize_exact(self, sample_cues, sample_srt):
        output = SRTFormatter().serialize(sample_cues)
        assert output.content == sample_srt
        assert output.suffix == ".srt"
        assert output.media_type == "application/x-subrip"

    def test_serialize_renumbers(self):
        cues = [Cue("caption_7", 0.0, 1.0, "a"), Cue("caption_2", 1.0, 2.0, "b")]
        lines = SRTFormatter().serialize(cues).content.split("\n")
        assert lines[0] == "1"
        assert lines[4] == "2"

    def test_serialize_empty(self):
        assert SRTFormatter().serialize([]).content == ""

    def test_multiline_text_joined(self):
        content = "1\n00:00:01,000 --> 00:00:02,000\nfirst line\nsecond line\n"
        result = SRTFormatter().parse(content)
        assert result.cues[0].text == "first line second line"

    def test_crlf_line_endings(self, sample_srt):
        result = SRTFormatter().parse(sample_srt.replace("\n", "\r\n"))
        assert [c.text for c in result.cues] == ["Hello world", "How are you", "Fine, thanks."]

    def test_malformed_blocks_skipped(self, caplog):
        content = (
            "1\n00:00:01.000 --> 00:00:02,000\nbad separator\n\n"
            "2\n00:00:03,000 --> 00:00:04,000\n\n"
            "3\n00:00:05,000 --> 00:00:06,000\ngood\n"
        )
        result = SRTFormatter().parse(content)
        assert [c.text for c in result.cues] == ["good"]
        assert result.cues[0].id == "caption_1"
        assert len(result.warnings) == 2
        assert "Block 1" in result.warnings[0]
        assert "SubRip" in caplog.text

    def test_time_range_error_carries_block_index(self):
        with pytest.raises(FormatError) as excinfo:
            parse_time_range("no times here", SRT_TIME_RANGE_RE, ",", 4)
        assert excinfo.value.block_index == 4

    def test_out_of_range_time_carries_block_index(self):
        with pytest.raises(FormatError) as excinfo:
            parse_time_range("00:61:00,000 --> 00:62:00,000", SRT_TIME_RANGE_RE, ",", 2)
        assert excinfo.value.block_index == 2

    def test_round_trip(self, sample_cues):
        formatter = SRTFormatter()
        parsed = formatter.parse(formatter.serialize(sample_cues).content).cues
        assert [c.text for c in parsed] == [c.text for c in sample_cues]
        for got, want in zip(parsed, sample_cues):
            assert got.start == pytest.approx(want.start)
            assert got.end == pytest.approx(want.end)

    def test_round_trip_truncates_to_millisecond(self):
        formatter = SRTFormatter()
        cues = [Cue("caption_1", 1.23456, 2.0009, "x")]
        parsed = formatter.parse(formatter.serialize(cues).content).cues
        assert parsed[0].start == pytest.approx(1.234)
        assert parsed[0].end == pytest.approx(2.0)


# ---------------------------------------------------------------------------
# WebVTT
# ---------------------------------------------------------------------------


class TestVTTFormatter:
    """WebVTT serialization and parsing."""

    def test_serialize(self, sample_cues):
        output = VTTFormatter().serialize(sample_cues[:1])
        assert output.content == "WEBVTT\n\n1\n00:00:01.000 --> 00:00:03.500\nHello world\n"
        assert output.suffix == ".vtt"
        assert output.media_type == "text/vtt"

    def test_serialize_empty_has_header(self):
        assert VTTFormatter().serialize([]).content.startswith("WEBVTT")

    def test_parse_full_featured(self):
        content = (
            "\ufeffWEBVTT - lecture 3\n\n"
            "NOTE written by hand\nspans two lines\n\n"
            "STYLE\n::cue { color: yellow }\n\n"
            "intro\n00:00:01.000 --> 00:00:02.500 align:start position:10%\n"
            "<v Bob>Hello</v> <i>there</i>\n\n"
            "00:00:03.000 --> 00:00:04.000\nsecond cue\n"
        )
        result = VTTFormatter().parse(content)
        assert [c.text for c in result.cues] == ["Hello there", "second cue"]
        assert [c.id for c in result.cues] == ["caption_1", "caption_2"]
        assert result.cues[0].start == pytest.approx(1.0)
        assert result.cues[0].end == pytest.approx(2.5)
        assert result.warnings == []

    def test_header_metadata_lines_dropped(self):
        content = (
            "WEBVTT\nKind: captions\nLanguage: en\n\n"
            "00:00:01.000 --> 00:00:02.000\nhello\n"
        )
        result = VTTFormatter().parse(content)
        assert [c.text for c in result.cues] == ["hello"]
        assert result.warnings == []

    def test_cue_directly_under_header(self):
        content = "WEBVTT\n00:00:01.000 --> 00:00:02.000\nhello\n"
        result = VTTFormatter().parse(content)
        assert [c.text for c in result.cues] == ["hello"]

    def test_tag_only_text_skipped(self):
        content = "WEBVTT\n\n00:00:03.000 --> 00:00:04.000\n<c.yellow></c>\n"
        result = VTTFormatter().parse(content)
        assert result.cues == []
        assert len(result.warnings) == 1

    def test_srt_separator_rejected(self):
        content = "WEBVTT\n\n1\n00:00:01,000 --> 00:00:02,000\ntext\n"
        result = VTTFormatter().parse(content)
        assert result.cues == []
        assert len(result.warnings) == 1

    def test_round_trip(self, sample_cues):
        formatter = VTTFormatter()
        parsed = formatter.parse(formatter.serialize(sample_cues).content).cues
        assert [c.text for c in parsed] == [c.text for c in sample_cues]
        assert _times(parsed) == pytest.approx(_times(sample_cues))


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


class TestJSONCaptionFormatter:
    """Structured JSON caption lists."""

    def test_serialize_shape(self, sample_cues):
        data = json.loads(JSONCaptionFormatter().serialize(sample_cues).content)
        assert data["captions"][0] == {
            "id": "caption_1", "start": 1.0, "end": 3.5, "text": "Hello world",
        }
        assert len(data["captions"]) == 3

    def test_output_matches_schema(self, sample_cues):
        data = json.loads(JSONCaptionFormatter().serialize(sample_cues).content)
        jsonschema.validate(instance=data, schema=get_schema())

    def test_non_ascii_preserved(self):
        cues = [Cue("caption_1", 0.0, 1.0, "Grüße, 世界")]
        content = JSONCaptionFormatter().serialize(cues).content
        assert "Grüße, 世界" in content

    def test_round_trip_exact(self):
        cues = [
            Cue("intro", 0.123456789, 1.987654321, "first"),
            Cue("caption_2", 2.5, 3.3333333333, "second"),
        ]
        formatter = JSONCaptionFormatter()
        assert formatter.parse(formatter.serialize(cues).content).cues == cues

    def test_defaults_for_missing_fields(self):
        content = json.dumps([
            {"text": "a", "start": 1, "end": 2},
            {"id": "named", "start": None, "end": 3, "text": "b"},
            {},
        ])
        cues = JSONCaptionFormatter().parse(content).cues
        assert [c.id for c in cues] == ["caption_1", "named", "caption_3"]
        assert cues[1].start == 0.0
        assert (cues[2].start, cues[2].end, cues[2].text) == (0.0, 0.0, "")

    def test_integer_id_becomes_string(self):
        cues = JSONCaptionFormatter().parse('[{"id": 7, "start": 0, "end": 1, "text": "x"}]').cues
        assert cues[0].id == "7"

    def test_wrong_shape_records_skipped(self):
        content = json.dumps({"captions": [
            {"start": "1.0", "end": 2, "text": "string start"},
            "not an object",
            {"start": 1, "end": 2, "text": "ok"},
        ]})
        result = JSONCaptionFormatter().parse(content)
        assert [c.text for c in result.cues] == ["ok"]
        assert result.cues[0].id == "caption_3"
        assert len(result.warnings) == 2

    def test_leading_bom_ignored(self):
        content = '\ufeff{"captions": [{"id": "a", "start": 1.0, "end": 2.0, "text": "Hi"}]}'
        result = JSONCaptionFormatter().parse(content)
        assert [(c.id, c.text) for c in result.cues] == [("a", "Hi")]

    def test_not_json(self):
        with pytest.raises(FormatError):
            JSONCaptionFormatter().parse("{broken")

    def test_object_without_captions(self):
        with pytest.raises(FormatError, match="captions"):
            JSONCaptionFormatter().parse('{"cues": []}')


# ---------------------------------------------------------------------------
# Registry and detection
# ---------------------------------------------------------------------------


class TestFormatterRegistry:
    """FORMATTERS dict and get_formatter()."""

    def test_keys(self):
        assert set(FORMATTERS) == {"srt", "vtt", "json"}

    @pytest.mark.parametrize("key", ["srt", "vtt", "json"])
    def test_formatter_interface(self, key):
        formatter = get_formatter(key)
        assert formatter.key == key
        assert formatter.suffix == "." + key
        assert formatter.name

    def test_key_case_insensitive(self):
        assert isinstance(get_formatter("VTT"), VTTFormatter)

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Available formats"):
            get_formatter("ass")


class TestDetectFormat:
    """Content sniffing order: WebVTT, JSON, SRT."""

    def test_vtt(self):
        assert detect_format("WEBVTT\n\n00:00:01.000 --> 00:00:02.000\nhi\n") == "vtt"

    def test_vtt_with_bom_and_blank_lines(self):
        assert detect_format("\ufeff\n\nWEBVTT\n") == "vtt"

    def test_json_object(self):
        assert detect_format('{"captions": []}') == "json"

    def test_json_list(self):
        assert detect_format('  [{"text": "x"}]') == "json"

    def test_srt(self, sample_srt):
        assert detect_format(sample_srt) == "srt"

    def test_broken_json_with_time_range_is_srt(self):
        assert detect_format("[1]\n00:00:01,000 --> 00:00:02,000\nx\n]") == "srt"

    def test_arrow_beyond_fifth_line_unknown(self):
        content = "a\nb\nc\nd\ne\n00:00:01,000 --> 00:00:02,000\n"
        with pytest.raises(UnknownFormatError):
            detect_format(content)

    @pytest.mark.parametrize("content", ["", "plain words", "{not json"])
    def test_unknown(self, content):
        with pytest.raises(UnknownFormatError):
            detect_format(content)


class TestParseAndSerializeCaptions:
    """Front-door helpers over the registry."""

    def test_auto_detected_parse(self, sample_srt):
        result = parse_captions(sample_srt)
        assert result.format == "srt"
        assert len(result.cues) == 3

    def test_auto_detected_json_with_bom(self):
        content = '\ufeff{"captions": [{"id": "a", "start": 1.0, "end": 2.0, "text": "Hi"}]}'
        result = parse_captions(content)
        assert result.format == "json"
        assert result.cues[0].end == pytest.approx(2.0)

    def test_explicit_format(self, sample_cues):
        content = serialize_captions(sample_cues, "json").content
        result = parse_captions(content, "json")
        assert result.cues == sample_cues

    def test_srt_to_vtt(self, sample_srt):
        cues = parse_captions(sample_srt).cues
        content = serialize_captions(cues, "vtt").content
        assert content.startswith("WEBVTT\n\n1\n00:00:01.000 --> 00:00:03.500\nHello world\n")

    def test_serialize_does_not_validate(self):
        cues = [Cue("caption_1", 5.0, 1.0, "")]
        assert "00:00:05,000 --> 00:00:01,000" in serialize_captions(cues, "srt").content
