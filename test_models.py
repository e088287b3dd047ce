"""Tests for the core data models."""

import pytest

from narrator.models import MixSettings, NarrationAudio, PlaybackState, SourceVideo


def test_mix_settings_defaults_and_validation():
    settings = MixSettings()
    assert settings.video_gain == 0.5
    assert settings.narration_gain == 0.5

    with pytest.raises(ValueError):
        MixSettings(video_gain=1.5)
    with pytest.raises(ValueError):
        MixSettings(narration_gain=-0.1)


def test_mix_settings_setters_clamp():
    settings = MixSettings.from_percent(30, 120)
    assert settings.video_gain == pytest.approx(0.3)
    assert settings.narration_gain == 1.0

    settings.set_video_gain(-2)
    assert settings.video_gain == 0.0
    settings.set_narration_percent(25)
    assert settings.narration_gain == 0.25


def test_snapshot_is_independent():
    settings = MixSettings(0.2, 0.4)
    snapshot = settings.snapshot()
    settings.set_video_gain(0.9)
    assert snapshot.video_gain == 0.2


def test_narration_staleness():
    audio = NarrationAudio(data=b"mp3", source_text="Once upon a time")
    assert not audio.is_stale_for("Once upon a time")
    assert audio.is_stale_for("Once upon a time.")


def test_playback_state_clamps():
    state = PlaybackState(duration=10.0)
    assert state.seek(12.0) == 10.0
    assert state.advance(-20.0) == 0.0
    state.seek(8.0)
    state.set_duration(5.0)
    assert state.current_time == 5.0


@pytest.mark.parametrize("filename, ext", [
    ("clip.mov", "mov"),
    ("My Holiday.MKV", "MKV"),
    ("no_extension", "mp4"),
    ("weird.m$v", "mp4"),
    (None, "mp4"),
])
def test_extension_for(filename, ext):
    assert SourceVideo.extension_for(filename) == ext
