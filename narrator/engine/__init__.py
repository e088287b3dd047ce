"""
Media execution engine.
"""

from .media_engine import MediaEngine, MediaInfo, classify_ffmpeg_error, get_engine, probe_media

__all__ = ['MediaEngine', 'MediaInfo', 'classify_ffmpeg_error', 'get_engine', 'probe_media']
