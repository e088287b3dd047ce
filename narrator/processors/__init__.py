"""
Frame sampling and narration generation.
"""

from .frame_sampler import FrameSampler, frame_timestamps
from .narration_request import NarrationRequestBuilder, word_budget
from .narration_generator import NarrationGenerator

__all__ = ['FrameSampler', 'frame_timestamps', 'NarrationRequestBuilder',
           'word_budget', 'NarrationGenerator']
