"""Shared fakes for the narrator tests."""

import os
from types import SimpleNamespace

import numpy as np
import pytest

from narrator.engine.media_engine import MediaInfo
from narrator.errors import ErrorKind, MediaEngineError
from narrator.models import SourceVideo
from narrator.utils.video_utils import AudioTrack


class FakeMediaEngine:
    """In-memory working area; exec() writes its last argument as output."""

    def __init__(self, has_audio=True, exec_results=None):
        self.files = {}
        self.has_audio = has_audio
        self.exec_results = list(exec_results or [])
        self.exec_calls = []
        self.deleted = []
        self.ready_calls = 0
        self.fail_delete = set()
        self.fail_write = False
        self.output_duration = 5.0

    def ensure_ready(self):
        self.ready_calls += 1

    def write_file(self, name, data):
        if self.fail_write:
            raise OSError("No space left in working area")
        self.files[name] = bytes(data)

    def read_file(self, name):
        if name not in self.files:
            raise FileNotFoundError(name)
        return self.files[name]

    def exists(self, name):
        return name in self.files

    def list_dir(self):
        return sorted(self.files)

    def delete_file(self, name):
        if name in self.fail_delete:
            raise OSError(f"busy: {name}")
        self.deleted.append(name)
        del self.files[name]

    def probe(self, name):
        if name.startswith("in_video"):
            return MediaInfo(duration=3.0, has_video=True, has_audio=self.has_audio)
        return MediaInfo(duration=self.output_duration, has_video=True, has_audio=True)

    def exec(self, args):
        args = list(args)
        self.exec_calls.append(args)
        result = self.exec_results.pop(0) if self.exec_results else None
        if isinstance(result, Exception):
            raise result
        output_name = result if isinstance(result, str) else args[-1]
        self.files[output_name] = ("MERGED " + " ".join(args)).encode()


def missing_stream_error():
    return MediaEngineError(
        "ffmpeg failed: Stream specifier ':a' in filtergraph description matches no streams.",
        ErrorKind.MISSING_STREAM,
    )


class FakeChannel:
    def __init__(self, index):
        self.index = index
        self.volume = 1.0
        self.sound = None
        self.play_calls = 0
        self.stop_calls = 0

    def play(self, sound):
        self.sound = sound
        self.play_calls += 1

    def stop(self):
        self.sound = None
        self.stop_calls += 1

    def set_volume(self, value):
        self.volume = value


class FakeMixerBackend:
    """Records channel activity instead of producing sound."""

    def __init__(self, frequency=1000):
        self.frequency = frequency
        self.init_calls = 0
        self.channels = {}
        self.events = []

    def init(self):
        self.init_calls += 1
        return self.frequency

    def make_sound(self, samples):
        return SimpleNamespace(samples=samples)

    def channel(self, index):
        if index not in self.channels:
            self.channels[index] = FakeChannel(index)
        return self.channels[index]

    def pause_all(self):
        self.events.append("pause")

    def unpause_all(self):
        self.events.append("unpause")

    def quit(self):
        self.events.append("quit")


def make_track(seconds, fps=1000):
    """Stereo int16 ramp so offsets are visible in the samples."""
    n = int(seconds * fps)
    ramp = np.arange(n, dtype=np.int16)
    return AudioTrack(np.stack([ramp, ramp], axis=1), fps)


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def fake_engine():
    return FakeMediaEngine()


@pytest.fixture
def source_video(tmp_path):
    path = tmp_path / "holiday.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42 fake video")
    return SourceVideo(path=str(path), duration=30.0, extension="mp4",
                       size_bytes=os.path.getsize(path), has_audio=True)
