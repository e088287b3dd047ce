"""Tests for timeline click/key handling."""

import pytest

from conftest import FakeClock, FakeMixerBackend, make_track
from narrator.managers.mix_preview import AudioMixPreviewEngine
from narrator.managers.timeline_controller import (
    TimelineController,
    pointer_to_time,
    ruler_ticks,
    time_to_fraction,
)
from narrator.models import MixSettings
from narrator.utils import format_time


@pytest.fixture
def timeline(source_video):
    preview = AudioMixPreviewEngine(
        MixSettings(),
        backend=FakeMixerBackend(),
        track_loader=lambda path, fps: make_track(30, fps),
        bytes_loader=lambda data, suffix, fps: make_track(10, fps),
        clock=FakeClock(),
    )
    preview.load_source(source_video)
    return TimelineController(preview)


@pytest.mark.parametrize("x, expected", [
    (0, 0.0),
    (400, 30.0),
    (200, 15.0),
    (-20, 0.0),
    (900, 30.0),
])
def test_pointer_to_time(x, expected):
    """Test p*D with clamping to [0, D]"""
    assert pointer_to_time(x, 400, 30.0) == pytest.approx(expected)


def test_pointer_without_media():
    assert pointer_to_time(100, 400, 0.0) == 0.0
    assert pointer_to_time(100, 0, 30.0) == 0.0


def test_click_seeks_and_plays(timeline):
    assert timeline.on_click(100, 400) == pytest.approx(7.5)
    assert timeline.preview.is_playing
    assert timeline.playhead_fraction() == pytest.approx(0.25)
    assert timeline.time_label() == "00:07.50 / 00:30.00"


@pytest.mark.parametrize("key, start, expected", [
    ("ArrowRight", 10.0, 12.0),
    ("Right", 10.0, 12.0),
    ("ArrowLeft", 10.0, 8.0),
    ("Left", 1.0, 0.0),
    ("ArrowRight", 29.0, 30.0),
])
def test_arrow_keys_step_two_seconds(timeline, key, start, expected):
    """Test +/-2 s steps clamped to [0, D]"""
    timeline.preview.seek_and_play(start)
    assert timeline.on_key(key) == pytest.approx(expected)


def test_other_keys_are_ignored(timeline):
    timeline.preview.seek_and_play(5.0)
    assert timeline.on_key("Space") is None
    assert timeline.on_key("a") is None
    assert timeline.preview.playback.current_time == 5.0


def test_no_media_ignores_interaction():
    preview = AudioMixPreviewEngine(MixSettings(), backend=FakeMixerBackend(), clock=FakeClock())
    timeline = TimelineController(preview)
    assert timeline.on_click(10, 100) is None
    assert timeline.on_key("ArrowRight") is None
    assert timeline.playhead_fraction() == 0.0


def test_ruler_ticks_every_three_seconds():
    ticks = ruler_ticks(10.0)
    assert [t for t, _, _ in ticks] == [0, 3, 6, 9, 12]
    assert ticks[1][1] == pytest.approx(0.3)
    assert ticks[2][2] == "00:06.00"


def test_time_helpers():
    assert time_to_fraction(45.0, 30.0) == 1.0
    assert format_time(75.255) == "01:15.25"
    assert format_time(0) == "00:00.00"
