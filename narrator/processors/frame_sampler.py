"""
Frame sampling for the narration prompt.
"""

import io
import time
from typing import Callable, List, Optional

from PIL import Image

from ..config import FRAME_COUNT, JPEG_QUALITY, MAX_FRAME_SIZE, SEEK_ATTEMPTS
from ..errors import ExtractionSuperseded, FrameExtractionError
from ..models import FrameSet
from ..utils.logging_utils import DualLogger, get_log_helper
from ..utils.video_utils import VideoUtils, capture_frame_moviepy


def frame_timestamps(duration: float, count: int = FRAME_COUNT) -> List[float]:
    """Evenly spaced timestamps strictly inside (0, duration)."""
    if duration <= 0:
        raise ValueError(f"Duration must be positive, got {duration}")
    interval = duration / (count + 1)
    return [interval * i for i in range(1, count + 1)]


def downscale(image: Image.Image, max_size: int = MAX_FRAME_SIZE) -> Image.Image:
    """Uniformly scale so the longest edge is at most max_size."""
    width, height = image.size
    scale = min(1.0, max_size / max(width, height))
    if scale >= 1.0:
        return image
    new_size = (max(1, round(width * scale)), max(1, round(height * scale)))
    return image.resize(new_size, Image.Resampling.LANCZOS)


def encode_jpeg(image: Image.Image, quality: int = JPEG_QUALITY) -> bytes:
    if image.mode != "RGB":
        image = image.convert("RGB")
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


class FrameSampler:
    """Extracts a fixed number of evenly spaced, downscaled JPEG frames."""

    def __init__(
        self,
        frame_count: int = FRAME_COUNT,
        max_size: int = MAX_FRAME_SIZE,
        quality: int = JPEG_QUALITY,
        seek_attempts: int = SEEK_ATTEMPTS,
        capture_factory: Callable[[str], VideoUtils] = VideoUtils,
        fallback_capture: Optional[Callable[[str, float], Image.Image]] = capture_frame_moviepy,
        logger: Optional[DualLogger] = None,
        verbose: bool = False
    ):
        """
        Initialize frame sampler.

        Args:
            frame_count: Number of frames per run
            max_size: Longest edge of each frame, in pixels
            quality: JPEG quality (1-95)
            seek_attempts: Seeks tried before using the fallback capture
            capture_factory: Builds the decoder for a video path
            fallback_capture: Exact (slow) single-frame capture, or None to abort directly
            logger: Optional DualLogger instance
            verbose: Print when no logger is given
        """
        self.frame_count = frame_count
        self.max_size = max_size
        self.quality = quality
        self.seek_attempts = max(1, seek_attempts)
        self.capture_factory = capture_factory
        self.fallback_capture = fallback_capture
        self.log = get_log_helper(logger, verbose)

    def sample(
        self,
        video_path: str,
        duration: float,
        progress_callback: Optional[Callable[[int, int], None]] = None,
        should_continue: Optional[Callable[[], bool]] = None
    ) -> FrameSet:
        """
        Capture frames at duration/(N+1) * i for i in 1..N, one at a time.

        Args:
            video_path: Path to the video
            duration: Video duration in seconds
            progress_callback: Called with (i, N) after each captured frame
            should_continue: Checked before each frame; False discards the run

        Returns:
            FrameSet with exactly N frames

        Raises:
            FrameExtractionError: a frame could not be captured
            ExtractionSuperseded: should_continue() returned False
        """
        timestamps = frame_timestamps(duration, self.frame_count)
        frames: List[bytes] = []
        start = time.time()

        capture = self.capture_factory(video_path)
        try:
            for index, t in enumerate(timestamps, start=1):
                if should_continue is not None and not should_continue():
                    self.log.info(f"Frame extraction superseded at {index}/{self.frame_count}")
                    raise ExtractionSuperseded(f"Extraction of {video_path} was superseded")

                image = self._capture(capture, video_path, t)
                frames.append(encode_jpeg(downscale(image, self.max_size), self.quality))

                if progress_callback:
                    progress_callback(index, self.frame_count)
                # Let other threads (status display) run between frames
                time.sleep(0)
        finally:
            capture.release()

        self.log.info(f"Extracted {len(frames)} frames in {time.time() - start:.2f}s")
        return FrameSet(frames=tuple(frames), duration=duration, expected_count=self.frame_count)

    def _capture(self, capture: VideoUtils, video_path: str, t: float) -> Image.Image:
        for attempt in range(1, self.seek_attempts + 1):
            try:
                image = capture.get_frame_at(t)
            except IOError as e:
                raise FrameExtractionError(f"Could not decode {video_path}: {e}")
            if image is not None:
                return image
            self.log.debug(f"Seek to {t:.2f}s did not settle (attempt {attempt}/{self.seek_attempts})")

        if self.fallback_capture is None:
            raise FrameExtractionError(f"Seek to {t:.2f}s never settled")

        self.log.warning(f"Seek to {t:.2f}s never settled, using fallback capture")
        try:
            return self.fallback_capture(video_path, t)
        except Exception as e:
            raise FrameExtractionError(f"Frame capture at {t:.2f}s failed: {e}")
