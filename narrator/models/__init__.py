"""
Data models for the narrator core.
"""

from .models import (
    SourceVideo,
    FrameSet,
    NarrationAudio,
    MixSettings,
    MixStrategy,
    MergedOutput,
    PlaybackState,
    NarrationRequest,
    MergeRequest,
)

__all__ = [
    'SourceVideo', 'FrameSet', 'NarrationAudio', 'MixSettings', 'MixStrategy',
    'MergedOutput', 'PlaybackState', 'NarrationRequest', 'MergeRequest'
]
