"""Configuration defaults, environment overrides and .env loading.

WHY: Caption style is tuned per deployment: one channel wants short
karaoke bursts, another long lecture captions, and the render farm runs at
a different frame rate than the editor preview. Keeping every tunable in
one module (and overridable from the environment) means nobody has to
edit the algorithm to retune it.

HOW: python-dotenv loads the .env file on import. Module-level constants
read their defaults from the environment. segmentation_config() layers
the CAPTION_* threshold overrides over a fresh copy of a segmenter preset.

RULES:
- Threshold env vars override a preset only when they are set
- Malformed numeric env vars raise ValueError naming the variable
- Returned config dicts are always fresh copies (safe to mutate)
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

from cue_segmenter import resolve_config

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError("{} must be a number, got {!r}".format(name, raw)) from None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError("{} must be an integer, got {!r}".format(name, raw)) from None


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------

DEFAULT_PRESET = os.getenv("CAPTION_PRESET", "standard").strip() or "standard"

# Env var → (config key, parser). Applied on top of the selected preset.
_THRESHOLD_OVERRIDES = {
    "CAPTION_MAX_DURATION": ("max_duration", _env_float),
    "CAPTION_MAX_WORDS": ("max_words", _env_int),
    "CAPTION_PAUSE_THRESHOLD": ("pause_threshold", _env_float),
    "CAPTION_SENTENCE_MIN_WORDS": ("sentence_min_words", _env_int),
    "CAPTION_FALLBACK_DURATION": ("fallback_duration", _env_float),
}


def segmentation_config(preset: str | None = None) -> dict:
    """Return the segmentation config for a preset with env overrides applied.

    WHY: Presets ship sensible thresholds, but a deployment may need to nudge
    one value (say, a longer pause threshold for slow speakers) without
    defining a whole new preset.

    HOW: Resolves the preset through cue_segmenter (which deep-copies it),
    then replaces each key whose CAPTION_* variable is set.

    RULES:
    - preset=None means DEFAULT_PRESET
    - Unknown preset names raise ValueError (from cue_segmenter)
    - Env vars are read at call time, so tests can monkeypatch them
    """
    cfg = resolve_config(preset or DEFAULT_PRESET)
    for env_name, (key, parse) in _THRESHOLD_OVERRIDES.items():
        cfg[key] = parse(env_name, cfg[key])
    return cfg


# ---------------------------------------------------------------------------
# Timeline editing and playback
# ---------------------------------------------------------------------------

DEFAULT_MERGE_GAP = _env_float("CAPTION_MERGE_GAP", 0.5)
"""Gap in seconds at or below which merge_adjacent joins two cues."""

DEFAULT_SPLIT_MAX_DURATION = _env_float("CAPTION_SPLIT_MAX_DURATION", 5.0)
DEFAULT_SPLIT_MAX_WORDS = _env_int("CAPTION_SPLIT_MAX_WORDS", 12)

DEFAULT_FPS = _env_float("CAPTION_FPS", 30.0)
DEFAULT_FADE_FRAMES = _env_int("CAPTION_FADE_FRAMES", 5)
DEFAULT_STYLE = os.getenv("CAPTION_STYLE", "bottom-centered").strip() or "bottom-centered"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("CAPTION_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
