"""Tests for environment-driven segmentation configuration.

WHY: Deployments retune thresholds through CAPTION_* variables. An
override must change only the key it names, leave the preset constants
alone, and fail loudly when the value is not a number.

HOW: monkeypatch sets and clears the variables around calls to
segmentation_config(), which reads the environment at call time.
"""

import pytest

from caption_timeline import config
from cue_segmenter import PRESET_KARAOKE, PRESET_STANDARD

THRESHOLD_VARS = [
    "CAPTION_MAX_DURATION",
    "CAPTION_MAX_WORDS",
    "CAPTION_PAUSE_THRESHOLD",
    "CAPTION_SENTENCE_MIN_WORDS",
    "CAPTION_FALLBACK_DURATION",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in THRESHOLD_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSegmentationConfig:
    """segmentation_config() layers env overrides over a preset."""

    def test_preset_values_without_overrides(self):
        assert config.segmentation_config("karaoke") == PRESET_KARAOKE

    def test_default_preset(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_PRESET", "standard")
        assert config.segmentation_config() == PRESET_STANDARD

    def test_override_single_key(self, monkeypatch):
        monkeypatch.setenv("CAPTION_MAX_WORDS", "8")
        cfg = config.segmentation_config("standard")
        assert cfg["max_words"] == 8
        assert cfg["max_duration"] == PRESET_STANDARD["max_duration"]

    def test_float_override(self, monkeypatch):
        monkeypatch.setenv("CAPTION_PAUSE_THRESHOLD", "0.75")
        assert config.segmentation_config("long_form")["pause_threshold"] == 0.75

    def test_blank_value_ignored(self, monkeypatch):
        monkeypatch.setenv("CAPTION_MAX_DURATION", "  ")
        assert config.segmentation_config("standard")["max_duration"] == 5.0

    def test_returns_fresh_copy(self):
        cfg = config.segmentation_config("standard")
        cfg["max_words"] = 1
        assert PRESET_STANDARD["max_words"] == 12

    def test_malformed_number_names_variable(self, monkeypatch):
        monkeypatch.setenv("CAPTION_MAX_WORDS", "many")
        with pytest.raises(ValueError, match="CAPTION_MAX_WORDS"):
            config.segmentation_config("standard")

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="Unknown preset"):
            config.segmentation_config("cinema")


class TestDefaults:
    """Module-level defaults used by the CLI."""

    def test_log_format(self):
        assert config.LOG_FORMAT == "%(asctime)s %(name)s %(levelname)s %(message)s"

    def test_positive_clock_defaults(self):
        assert config.DEFAULT_FPS > 0
        assert config.DEFAULT_FADE_FRAMES >= 0
