"""Tests for frame sampling."""

import io

import pytest
from PIL import Image

from narrator.errors import ExtractionSuperseded, FrameExtractionError
from narrator.models import FrameSet
from narrator.processors.frame_sampler import FrameSampler, downscale, frame_timestamps


class FakeCapture:
    """Decoder stand-in: returns a solid frame per seek and records timestamps."""

    def __init__(self, path, size=(1920, 1080), fail_at=None):
        self.path = path
        self.size = size
        self.fail_at = fail_at or set()
        self.seeks = []
        self.released = False

    def get_frame_at(self, seconds):
        self.seeks.append(seconds)
        if round(seconds, 6) in self.fail_at:
            return None
        return Image.new("RGB", self.size, (200, 10, 10))

    def release(self):
        self.released = True


def sampler_with(capture, **kwargs):
    return FrameSampler(capture_factory=lambda path: capture, **kwargs)


@pytest.mark.parametrize("duration", [0.5, 1.0, 21.0, 63.7, 3600.0])
def test_timestamps_strictly_increasing_inside_duration(duration):
    """Test 20 timestamps at D/(N+1)*i, all inside (0, D)"""
    stamps = frame_timestamps(duration)
    assert len(stamps) == 20
    assert all(0 < t < duration for t in stamps)
    assert all(a < b for a, b in zip(stamps, stamps[1:]))
    assert stamps[0] == pytest.approx(duration / 21)


def test_non_positive_duration_rejected():
    with pytest.raises(ValueError):
        frame_timestamps(0)


def test_downscale_preserves_aspect_ratio():
    """Test uniform scaling of the longest edge to 512"""
    assert downscale(Image.new("RGB", (1920, 1080))).size == (512, 288)
    assert downscale(Image.new("RGB", (720, 1280))).size == (288, 512)
    # Never upscaled
    assert downscale(Image.new("RGB", (320, 240))).size == (320, 240)


def test_sample_produces_twenty_jpeg_frames_in_order():
    """Test a full run: N frames, sequential seeks, progress i/N"""
    capture = FakeCapture("clip.mp4")
    progress = []
    frames = sampler_with(capture).sample("clip.mp4", 42.0, progress_callback=lambda i, n: progress.append(f"{i}/{n}"))

    assert isinstance(frames, FrameSet)
    assert len(frames) == 20
    assert capture.seeks == frame_timestamps(42.0)
    assert progress == [f"{i}/20" for i in range(1, 21)]
    assert capture.released

    first = Image.open(io.BytesIO(frames.frames[0]))
    assert first.format == "JPEG"
    assert first.size == (512, 288)
    assert frames.timestamps == pytest.approx(frame_timestamps(42.0))


def test_unsettled_seek_retries_then_uses_fallback():
    """Test the bounded wait: retries, then the exact fallback capture"""
    stamps = frame_timestamps(21.0)
    capture = FakeCapture("clip.mp4", fail_at={round(stamps[4], 6)})
    fallback_calls = []

    def fallback(path, t):
        fallback_calls.append(t)
        return Image.new("RGB", (640, 360))

    frames = sampler_with(capture, seek_attempts=3, fallback_capture=fallback).sample("clip.mp4", 21.0)

    assert len(frames) == 20
    assert fallback_calls == [stamps[4]]
    assert capture.seeks.count(stamps[4]) == 3


def test_failed_capture_aborts_without_partial_set():
    """Test all-or-nothing extraction"""
    stamps = frame_timestamps(21.0)
    capture = FakeCapture("clip.mp4", fail_at={round(stamps[10], 6)})
    progress = []

    with pytest.raises(FrameExtractionError):
        sampler_with(capture, fallback_capture=None).sample(
            "clip.mp4", 21.0, progress_callback=lambda i, n: progress.append(i)
        )
    assert progress == list(range(1, 11))
    assert capture.released


def test_fallback_errors_become_extraction_errors():
    stamps = frame_timestamps(21.0)
    capture = FakeCapture("clip.mp4", fail_at={round(stamps[0], 6)})

    def broken(path, t):
        raise OSError("decoder crashed")

    with pytest.raises(FrameExtractionError):
        sampler_with(capture, fallback_capture=broken).sample("clip.mp4", 21.0)


def test_superseded_extraction_is_discarded():
    """Test that should_continue() returning False stops the run"""
    capture = FakeCapture("clip.mp4")
    calls = {"n": 0}

    def should_continue():
        calls["n"] += 1
        return calls["n"] <= 5

    with pytest.raises(ExtractionSuperseded):
        sampler_with(capture).sample("clip.mp4", 21.0, should_continue=should_continue)
    assert len(capture.seeks) == 5
    assert capture.released


def test_frame_set_size_invariant():
    """Test that a FrameSet is exactly N frames or empty"""
    assert len(FrameSet.empty()) == 0
    with pytest.raises(ValueError):
        FrameSet(frames=(b"x",) * 7, duration=10.0)


def test_configured_frame_count_is_honoured():
    """Test a sampler configured for a different frame count"""
    capture = FakeCapture("clip.mp4")
    frames = sampler_with(capture, frame_count=8).sample("clip.mp4", 18.0)

    assert len(frames) == 8
    assert capture.seeks == frame_timestamps(18.0, 8)
    assert frames.timestamps == pytest.approx([2.0 * i for i in range(1, 9)])
