"""
Utility functions for the narrator core.
"""

import math


def format_time(seconds: float) -> str:
    """Format time in MM:SS.cc format (centiseconds)."""
    seconds = max(0.0, seconds)
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    centis = int((seconds % 1) * 100)
    return f"{minutes:02d}:{secs:02d}.{centis:02d}"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def format_gain(gain: float) -> str:
    """Render a gain for an ffmpeg volume filter (0.5, 1, 0.25)."""
    return f"{gain:g}"
