"""Command-line interface for the caption timeline engine.

WHY: Caption work happens in shell pipelines and render scripts as much as
in editors. The CLI exposes every engine operation (segmenting recognizer
output, converting between interchange formats, validating, repairing and
re-timing timelines, and answering "what is on screen at this time")
behind one command with a subcommand per operation.

HOW: argparse subparsers, one handler per subcommand. Handlers read the
input file, call the library, and hand the resulting timeline to
_emit_timeline(), which serializes it and writes to stdout, to --output,
or to a conflict-free file in --output-dir. Status messages go to stderr.

RULES:
- Subcommands: segment, convert, validate, shift, merge, split, sync
- Input "-" reads stdin
- Output format defaults to the detected input format (srt for segment)
- Output naming in --output-dir: {stem}{suffix}, numeric suffix for
  conflicts (talk-2.srt)
- Status output goes to stderr (not stdout)
- Exit codes: 0 success, 1 processing error or invalid timeline, 2 usage
  error (argparse)
- Python 3.9 compatible — no match/case, no X | Y unions at runtime
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from caption_timeline import config
from caption_timeline.adapters.caption_adapter import build_cues
from caption_timeline.core.assembler import assemble_recognizer_output, load_recognizer_payload
from caption_timeline.core.ir import Cue
from caption_timeline.core.sync import CaptionStyle, PlaybackSynchronizer
from caption_timeline.core.timecode import seconds_to_frame
from caption_timeline.core.timeline import merge_adjacent, shift, split_long, validate
from caption_timeline.errors import CaptionTimelineError, EmptyInputError
from caption_timeline.formatters import FORMATTERS, parse_captions, serialize_captions
from cue_segmenter import PRESETS

logger = logging.getLogger(__name__)

STDIN_MARKER = "-"


def _status(msg: str) -> None:
    """Print a status message to stderr.

    Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _read_input(path: str) -> str:
    if path == STDIN_MARKER:
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _input_stem(path: str) -> str:
    return "captions" if path == STDIN_MARKER else Path(path).stem


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    WHY: Users re-run conversions on the same file. Overwriting previous
    output would lose hand edits.

    HOW: Check if {stem}{suffix} exists. If so, insert an increasing
    counter before the extension until a free name is found.

    RULES:
    - First attempt: {stem}{suffix} (e.g. talk.srt)
    - Conflict: talk-2.srt, talk-3.srt, ...
    - Counter starts at 2

    Returns:
        A Path that does not yet exist.
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx >= 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _load_timeline(args: argparse.Namespace) -> tuple:
    """Parse the input caption file; returns (cues, format key)."""
    result = parse_captions(_read_input(args.input), args.from_format)
    if result.warnings:
        _status("Skipped {} malformed block(s) in {} input".format(
            len(result.warnings), result.format
        ))
    return result.cues, result.format


def _emit_timeline(
    cues: List[Cue],
    format_key: str,
    args: argparse.Namespace,
) -> None:
    """Serialize cues and write them to stdout, --output or --output-dir."""
    output = serialize_captions(cues, format_key)

    if args.output:
        path = Path(args.output)
    elif args.output_dir:
        output_dir = Path(args.output_dir)
        if not output_dir.is_dir():
            raise CaptionTimelineError("Output directory does not exist: {}".format(output_dir))
        path = _resolve_output_path(_input_stem(args.input), output.suffix, output_dir)
    else:
        sys.stdout.write(output.content)
        if not output.content.endswith("\n"):
            sys.stdout.write("\n")
        return

    path.write_text(output.content, encoding="utf-8")
    _status("Saved {} cue(s) to {}".format(len(cues), path))


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------

def _cmd_segment(args: argparse.Namespace) -> int:
    data = load_recognizer_payload(_read_input(args.input))
    recognized = assemble_recognizer_output(data, milliseconds=args.milliseconds)
    cues = build_cues(recognized, config=config.segmentation_config(args.preset))
    if not cues:
        raise EmptyInputError("Recognizer output contains no usable words, segments or text")

    _status("Segmented {} word(s), {} segment(s) into {} cue(s)".format(
        len(recognized.words), len(recognized.segments), len(cues)
    ))
    _emit_timeline(cues, args.to_format or "srt", args)
    return 0


def _cmd_convert(args: argparse.Namespace) -> int:
    cues, source_format = _load_timeline(args)
    _emit_timeline(cues, args.to_format or source_format, args)
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    cues, _ = _load_timeline(args)
    report = validate(cues)
    if report.valid:
        _status("Valid: {} cue(s)".format(len(cues)))
        return 0
    for message in report.errors:
        print(message)
    _status("Invalid: {} problem(s) in {} cue(s)".format(len(report.errors), len(cues)))
    return 1


def _cmd_shift(args: argparse.Namespace) -> int:
    cues, source_format = _load_timeline(args)
    _emit_timeline(shift(cues, args.offset), args.to_format or source_format, args)
    return 0


def _cmd_merge(args: argparse.Namespace) -> int:
    cues, source_format = _load_timeline(args)
    merged = merge_adjacent(cues, max_gap=args.max_gap)
    _status("Merged {} cue(s) into {}".format(len(cues), len(merged)))
    _emit_timeline(merged, args.to_format or source_format, args)
    return 0


def _cmd_split(args: argparse.Namespace) -> int:
    cues, source_format = _load_timeline(args)
    pieces = split_long(cues, max_duration=args.max_duration, max_words=args.max_words)
    _status("Split {} cue(s) into {}".format(len(cues), len(pieces)))
    _emit_timeline(pieces, args.to_format or source_format, args)
    return 0


def _cmd_sync(args: argparse.Namespace) -> int:
    cues, _ = _load_timeline(args)
    synchronizer = PlaybackSynchronizer(
        cues,
        style=args.style,
        fps=args.fps,
        fade_frames=args.fade_frames,
    )

    if args.frame is not None:
        frame = args.frame
        state = synchronizer.synchronize_frame(frame)
    else:
        frame = seconds_to_frame(args.time, args.fps)
        state = synchronizer.synchronize(args.time)

    payload = state.to_dict()
    if args.overlay:
        overlay = synchronizer.overlay_at_frame(frame)
        payload["overlay"] = overlay.to_dict() if overlay else None

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def _add_output_args(parser: argparse.ArgumentParser, default_help: str) -> None:
    parser.add_argument(
        "--to",
        dest="to_format",
        choices=sorted(FORMATTERS),
        default=None,
        help="Output format ({}).".format(default_help),
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--output", "-o", default=None, help="Write output to this file.")
    target.add_argument(
        "--output-dir",
        default=None,
        help="Write output into this directory as {stem}{suffix}, never overwriting.",
    )


def _add_timeline_input(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Caption file (srt, vtt or json); '-' reads stdin.")
    parser.add_argument(
        "--from",
        dest="from_format",
        choices=sorted(FORMATTERS),
        default=None,
        help="Input format (default: auto-detect).",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Separated from main() so tests can inspect the parser without running
    a command.
    """
    parser = argparse.ArgumentParser(
        prog="caption-timeline",
        description="Segment recognizer output into captions and edit, convert "
                    "and synchronize caption timelines.",
    )
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        help="Logging level for diagnostics on stderr (default: %(default)s).",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    p = subparsers.add_parser("segment", help="Build captions from recognizer JSON.")
    p.add_argument("input", help="Recognizer JSON file; '-' reads stdin.")
    p.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default=None,
        help="Segmentation preset (default: {}).".format(config.DEFAULT_PRESET),
    )
    p.add_argument(
        "--milliseconds",
        action="store_true",
        help="Recognizer start/end values are milliseconds.",
    )
    _add_output_args(p, "default: srt")
    p.set_defaults(handler=_cmd_segment)

    p = subparsers.add_parser("convert", help="Convert a caption file to another format.")
    _add_timeline_input(p)
    _add_output_args(p, "default: input format")
    p.set_defaults(handler=_cmd_convert)

    p = subparsers.add_parser("validate", help="Report timeline problems; exit 1 if any.")
    _add_timeline_input(p)
    p.set_defaults(handler=_cmd_validate)

    p = subparsers.add_parser("shift", help="Move every cue by an offset in seconds.")
    _add_timeline_input(p)
    p.add_argument("offset", type=float, help="Offset in seconds (negative moves earlier).")
    _add_output_args(p, "default: input format")
    p.set_defaults(handler=_cmd_shift)

    p = subparsers.add_parser("merge", help="Merge cues separated by small gaps.")
    _add_timeline_input(p)
    p.add_argument(
        "--max-gap",
        type=float,
        default=config.DEFAULT_MERGE_GAP,
        help="Largest gap in seconds that is merged (default: %(default)s).",
    )
    _add_output_args(p, "default: input format")
    p.set_defaults(handler=_cmd_merge)

    p = subparsers.add_parser("split", help="Split overlong cues.")
    _add_timeline_input(p)
    p.add_argument(
        "--max-duration",
        type=float,
        default=config.DEFAULT_SPLIT_MAX_DURATION,
        help="Longest cue in seconds (default: %(default)s).",
    )
    p.add_argument(
        "--max-words",
        type=int,
        default=config.DEFAULT_SPLIT_MAX_WORDS,
        help="Most words per cue (default: %(default)s).",
    )
    _add_output_args(p, "default: input format")
    p.set_defaults(handler=_cmd_split)

    p = subparsers.add_parser("sync", help="Print the active cue and word at a time or frame.")
    _add_timeline_input(p)
    when = p.add_mutually_exclusive_group(required=True)
    when.add_argument("--time", type=float, help="Playback time in seconds.")
    when.add_argument("--frame", type=int, help="Frame number on the --fps clock.")
    p.add_argument(
        "--fps",
        type=float,
        default=config.DEFAULT_FPS,
        help="Frame rate (default: %(default)s).",
    )
    p.add_argument(
        "--fade-frames",
        type=int,
        default=config.DEFAULT_FADE_FRAMES,
        help="Fade-in/out length in frames (default: %(default)s).",
    )
    p.add_argument(
        "--style",
        choices=[s.value for s in CaptionStyle],
        default=config.DEFAULT_STYLE,
        help="Caption style (default: %(default)s).",
    )
    p.add_argument(
        "--overlay",
        action="store_true",
        help="Include the frame overlay (opacity, scale, word states).",
    )
    p.set_defaults(handler=_cmd_sync)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    - Returns the process exit code; argparse exits with 2 on usage errors
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format=config.LOG_FORMAT,
    )

    try:
        return args.handler(args)
    except (CaptionTimelineError, ValueError, OSError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print("Error: {}".format(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
