"""
Video and audio utility functions for frame capture and audio decoding.
"""

import os
import tempfile
import threading
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np
from moviepy import AudioFileClip, VideoFileClip
from PIL import Image


class VideoUtils:
    """Thread-safe video frame capture utilities."""

    def __init__(self, video_path: str):
        """
        Initialize video utilities.

        Args:
            video_path: Path to video file
        """
        self.video_path = video_path
        self.cap = None
        self.cap_lock = threading.Lock()

    def _open(self):
        if self.cap is None:
            self.cap = cv2.VideoCapture(self.video_path)
            if not self.cap.isOpened():
                self.cap = None
                raise IOError(f"Could not open video: {self.video_path}")

    def get_frame_at(self, seconds: float) -> Optional[Image.Image]:
        """
        Seek to a timestamp and decode the frame there (thread-safe).

        Args:
            seconds: Position in seconds

        Returns:
            PIL Image or None if the decoder did not deliver a frame
        """
        with self.cap_lock:
            self._open()
            self.cap.set(cv2.CAP_PROP_POS_MSEC, seconds * 1000.0)
            ret, frame = self.cap.read()
            if not ret or frame is None:
                return None

            rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            return Image.fromarray(rgb_frame)

    def release(self):
        """Release video capture resources."""
        with self.cap_lock:
            if self.cap:
                self.cap.release()
                self.cap = None


def capture_frame_moviepy(video_path: str, seconds: float) -> Image.Image:
    """Decode one frame with moviepy (slower, but exact at the requested time)."""
    clip = VideoFileClip(video_path, audio=False)
    try:
        t = max(0.0, min(seconds, clip.duration - 0.05))
        return Image.fromarray(clip.get_frame(t))
    finally:
        clip.close()


@dataclass
class AudioTrack:
    """Decoded int16 stereo PCM at a fixed sample rate."""
    samples: np.ndarray
    fps: int

    @property
    def duration(self) -> float:
        if self.fps <= 0:
            return 0.0
        return len(self.samples) / float(self.fps)

    def slice_from(self, seconds: float) -> np.ndarray:
        start = int(max(0.0, seconds) * self.fps)
        return self.samples[start:]


def _to_int16_stereo(array: np.ndarray) -> np.ndarray:
    if array.ndim == 1:
        array = array[:, np.newaxis]
    if array.shape[1] == 1:
        array = np.repeat(array, 2, axis=1)
    elif array.shape[1] > 2:
        array = array[:, :2]
    pcm = np.clip(array, -1.0, 1.0) * 32767
    return np.ascontiguousarray(pcm.astype(np.int16))


def load_audio_track(path: str, fps: int) -> Optional[AudioTrack]:
    """
    Decode the audio of a media file.

    Args:
        path: Video or audio file
        fps: Target sample rate

    Returns:
        AudioTrack, or None if the file exposes no audio stream
    """
    _, ext = os.path.splitext(path)
    if ext.lower() in (".mp3", ".wav", ".m4a", ".aac", ".ogg"):
        clip = AudioFileClip(path)
        try:
            return AudioTrack(_to_int16_stereo(clip.to_soundarray(fps=fps)), fps)
        finally:
            clip.close()

    clip = VideoFileClip(path)
    try:
        if clip.audio is None:
            return None
        return AudioTrack(_to_int16_stereo(clip.audio.to_soundarray(fps=fps)), fps)
    finally:
        clip.close()


def load_audio_track_from_bytes(data: bytes, suffix: str, fps: int) -> Optional[AudioTrack]:
    """Decode in-memory media by spilling it to a temporary file."""
    temp_file = tempfile.NamedTemporaryFile(suffix=suffix, delete=False)
    temp_path = temp_file.name
    try:
        temp_file.write(data)
        temp_file.close()
        return load_audio_track(temp_path, fps)
    finally:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
