"""
Data models for the narrator core.
"""

import os
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from ..config import DEFAULT_GAIN, DEFAULT_VIDEO_EXTENSION, FRAME_COUNT


@dataclass(frozen=True)
class SourceVideo:
    """Uploaded video; immutable once probed."""
    path: str
    duration: float
    extension: str = DEFAULT_VIDEO_EXTENSION
    size_bytes: int = 0
    has_audio: bool = True

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    def read_bytes(self) -> bytes:
        with open(self.path, "rb") as f:
            return f.read()

    @staticmethod
    def extension_for(filename: str) -> str:
        """Container extension of a file name, defaulting to mp4."""
        _, ext = os.path.splitext(filename or "")
        ext = ext.lstrip(".")
        if ext and ext.replace("_", "").isalnum():
            return ext
        return DEFAULT_VIDEO_EXTENSION


@dataclass(frozen=True)
class FrameSet:
    """Evenly spaced JPEG frames sampled from a video (exactly expected_count or none)."""
    frames: Tuple[bytes, ...] = ()
    duration: float = 0.0
    expected_count: int = field(default=FRAME_COUNT, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "frames", tuple(self.frames))
        if len(self.frames) not in (0, self.expected_count):
            raise ValueError(f"FrameSet must hold 0 or {self.expected_count} frames, got {len(self.frames)}")

    @classmethod
    def empty(cls) -> "FrameSet":
        return cls()

    @property
    def timestamps(self) -> List[float]:
        n = len(self.frames)
        if n == 0:
            return []
        interval = self.duration / (n + 1)
        return [interval * i for i in range(1, n + 1)]

    def __len__(self) -> int:
        return len(self.frames)

    def __bool__(self) -> bool:
        return bool(self.frames)


@dataclass(frozen=True)
class NarrationAudio:
    """Encoded narration audio plus the text snapshot it was spoken from."""
    data: bytes
    source_text: str
    extension: str = "mp3"

    def is_stale_for(self, text: str) -> bool:
        return self.source_text != text


def _clamp_gain(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


@dataclass
class MixSettings:
    """Gains for the video's own audio and the narration, each in [0, 1]."""
    video_gain: float = DEFAULT_GAIN
    narration_gain: float = DEFAULT_GAIN

    def __post_init__(self):
        for name in ("video_gain", "narration_gain"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")

    @classmethod
    def from_percent(cls, video_percent: int, narration_percent: int) -> "MixSettings":
        return cls(_clamp_gain(video_percent / 100), _clamp_gain(narration_percent / 100))

    def set_video_gain(self, value: float) -> None:
        self.video_gain = _clamp_gain(value)

    def set_narration_gain(self, value: float) -> None:
        self.narration_gain = _clamp_gain(value)

    def set_video_percent(self, percent: int) -> None:
        self.set_video_gain(percent / 100)

    def set_narration_percent(self, percent: int) -> None:
        self.set_narration_gain(percent / 100)

    def snapshot(self) -> "MixSettings":
        """Copy of the current values, for one consistent read."""
        return replace(self)


class MixStrategy(Enum):
    """How the merged audio track was produced."""
    AMIX = "amix"
    NARRATION_ONLY = "narration_only"


@dataclass(frozen=True)
class MergedOutput:
    """Result of one successful export run."""
    data: bytes
    extension: str = "mp4"
    strategy: MixStrategy = MixStrategy.AMIX
    duration: Optional[float] = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class PlaybackState:
    """Transport position of whichever media is currently addressable."""
    current_time: float = 0.0
    duration: float = 0.0

    def clamp(self, t: float) -> float:
        return max(0.0, min(self.duration, t))

    def seek(self, t: float) -> float:
        self.current_time = self.clamp(t)
        return self.current_time

    def advance(self, dt: float) -> float:
        return self.seek(self.current_time + dt)

    def set_duration(self, duration: float) -> None:
        self.duration = max(0.0, duration)
        self.current_time = self.clamp(self.current_time)


@dataclass(frozen=True)
class NarrationRequest:
    """Prompt plus frames for the narration text model."""
    prompt: str
    image_data_uris: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MergeRequest:
    """Inputs of one merge run."""
    source: Optional[SourceVideo]
    narration: Optional[NarrationAudio]
    settings: MixSettings
