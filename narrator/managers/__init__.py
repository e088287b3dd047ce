"""
Managers and controllers for a narration session.
"""

from .mix_preview import AudioMixPreviewEngine, PygameMixerBackend
from .timeline_controller import TimelineController
from .session_manager import NarrationSession

__all__ = [
    'AudioMixPreviewEngine',
    'PygameMixerBackend',
    'TimelineController',
    'NarrationSession'
]
