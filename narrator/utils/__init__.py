"""
Utility functions for the narrator core.
"""

from .utils import format_time, format_gain, round_half_up
from .logging_utils import DualLogger, get_log_helper
from .progress_logger import ProgressLogger

__all__ = ['format_time', 'format_gain', 'round_half_up',
           'DualLogger', 'get_log_helper', 'ProgressLogger']
