"""
Timeline/scrubber control: maps pointer positions and arrow keys to
transport times and drives the preview engine.
"""

import math
from typing import List, Optional, Tuple

from ..config import RULER_TICK_SECONDS, TIMELINE_STEP_SECONDS
from ..utils import format_time

STEP_KEYS = {"Right": 1, "Left": -1, "ArrowRight": 1, "ArrowLeft": -1}


def clamp_time(t: float, duration: float) -> float:
    return max(0.0, min(duration, t))


def pointer_to_time(x: float, width: float, duration: float) -> float:
    """Map a pointer x within a track of the given width to a clamped time."""
    if width <= 0 or duration <= 0:
        return 0.0
    return clamp_time((x / width) * duration, duration)


def time_to_fraction(t: float, duration: float) -> float:
    """Playhead position as a fraction of the track width."""
    if duration <= 0:
        return 0.0
    return clamp_time(t, duration) / duration


def step_time(current: float, direction: int, duration: float,
              step: float = TIMELINE_STEP_SECONDS) -> float:
    return clamp_time(current + direction * step, duration)


def ruler_ticks(duration: float, interval: int = RULER_TICK_SECONDS) -> List[Tuple[float, float, str]]:
    """(seconds, fraction of width, label) every `interval` seconds."""
    span = duration if duration > 0 else 1
    count = math.ceil(span / interval) + 1
    return [(i * interval, (i * interval) / span, format_time(i * interval)) for i in range(count)]


class TimelineController:
    """Forwards timeline interaction to the preview engine."""

    def __init__(self, preview):
        """
        Initialize timeline controller.

        Args:
            preview: AudioMixPreviewEngine (anything with playback, duration and seek_and_play)
        """
        self.preview = preview

    @property
    def duration(self) -> float:
        return self.preview.duration

    def on_click(self, x: float, width: float) -> Optional[float]:
        """Seek to the clicked position; ignored while no media is loaded."""
        if self.duration <= 0:
            return None
        return self.preview.seek_and_play(pointer_to_time(x, width, self.duration))

    def on_key(self, key: str) -> Optional[float]:
        """Move the playhead by +/-2 seconds for arrow keys; other keys are ignored."""
        direction = STEP_KEYS.get(key)
        if direction is None or self.duration <= 0:
            return None
        current = self.preview.tick()
        return self.preview.seek_and_play(step_time(current, direction, self.duration))

    def playhead_fraction(self) -> float:
        return time_to_fraction(self.preview.playback.current_time, self.duration)

    def time_label(self) -> str:
        return f"{format_time(self.preview.playback.current_time)} / {format_time(self.duration)}"
