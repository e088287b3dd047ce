"""
Narrator - AI narration for videos.
Samples frames from a video, generates a spoken narration for it, lets the
narration be auditioned against the video's own audio, and merges both into
a new video with ffmpeg.
"""

from .config import NarratorConfig
from .models import (
    SourceVideo, FrameSet, NarrationAudio, MixSettings, MixStrategy,
    MergedOutput, PlaybackState, NarrationRequest, MergeRequest
)
from .pipeline import MergePipeline
from .export import VideoExporter, export_filename
from .managers import NarrationSession, AudioMixPreviewEngine, TimelineController

__all__ = [
    'NarratorConfig', 'SourceVideo', 'FrameSet', 'NarrationAudio', 'MixSettings',
    'MixStrategy', 'MergedOutput', 'PlaybackState', 'NarrationRequest', 'MergeRequest',
    'MergePipeline', 'VideoExporter', 'export_filename',
    'NarrationSession', 'AudioMixPreviewEngine', 'TimelineController'
]
__version__ = '1.0.0'
