"""
FFmpeg execution engine with an isolated working area.

The engine is expensive to bring up (binary resolution, self check, scratch
directory), so one shared instance is initialised lazily and reused by every
probe and merge run.
"""

import os
import re
import shutil
import subprocess
import tempfile
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import List, Optional, Sequence

import imageio_ffmpeg
from moviepy.video.io.ffmpeg_reader import ffmpeg_parse_infos

from ..errors import ErrorKind, MediaEngineError
from ..utils.logging_utils import DualLogger, get_log_helper

# FFmpeg diagnostics for a stream specifier/map that selected nothing
_MISSING_STREAM_PATTERN = re.compile(
    r"matches no streams|did not match any streams",
    re.IGNORECASE
)


def classify_ffmpeg_error(stderr: str) -> ErrorKind:
    """Map an ffmpeg diagnostic to an ErrorKind."""
    if stderr and _MISSING_STREAM_PATTERN.search(stderr):
        return ErrorKind.MISSING_STREAM
    return ErrorKind.OTHER


@dataclass(frozen=True)
class MediaInfo:
    """Probe result for a staged file."""
    duration: Optional[float]
    has_video: bool
    has_audio: bool


def probe_media(path: str) -> MediaInfo:
    """
    Inspect a media file's streams with moviepy's ffmpeg parser.

    Raises:
        MediaEngineError: if the file cannot be parsed
    """
    try:
        infos = ffmpeg_parse_infos(path)
    except (IOError, OSError) as e:
        raise MediaEngineError(f"Could not probe {os.path.basename(path)}: {e}", ErrorKind.OTHER)
    return MediaInfo(
        duration=infos.get("duration"),
        has_video=bool(infos.get("video_found")),
        has_audio=bool(infos.get("audio_found")),
    )


class MediaEngine:
    """Lazily initialised ffmpeg runner owning a private working directory."""

    def __init__(self, logger: Optional[DualLogger] = None, verbose: bool = False, timeout: Optional[float] = None):
        """
        Initialize media engine (nothing is started until ensure_ready()).

        Args:
            logger: Optional DualLogger instance
            verbose: Print when no logger is given
            timeout: Optional per-command timeout in seconds
        """
        self.log = get_log_helper(logger, verbose)
        self.timeout = timeout
        self.ffmpeg_exe: Optional[str] = None
        self.workdir: Optional[str] = None
        self.init_count = 0
        self._init_lock = threading.Lock()
        self._init_future: Optional[Future] = None

    @property
    def loaded(self) -> bool:
        future = self._init_future
        return future is not None and future.done() and future.exception() is None

    def ensure_ready(self) -> None:
        """
        Initialise the engine once; concurrent callers share the same attempt.

        Raises:
            MediaEngineError: if initialisation failed
        """
        with self._init_lock:
            future = self._init_future
            owner = future is None or (future.done() and future.exception() is not None)
            if owner:
                future = Future()
                self._init_future = future

        if owner:
            try:
                self._initialize()
            except MediaEngineError as e:
                future.set_exception(e)
            except Exception as e:
                future.set_exception(MediaEngineError(f"Media engine failed to load: {e}", ErrorKind.NOT_READY))
            else:
                future.set_result(True)

        future.result()

    def _initialize(self) -> None:
        start = time.time()
        self.log.info("Loading media engine...")
        exe = imageio_ffmpeg.get_ffmpeg_exe()

        result = subprocess.run([exe, "-hide_banner", "-version"], capture_output=True, text=True)
        if result.returncode != 0:
            raise MediaEngineError(f"ffmpeg self check failed: {result.stderr.strip()}", ErrorKind.NOT_READY)

        self.ffmpeg_exe = exe
        self.workdir = tempfile.mkdtemp(prefix="narrator_")
        self.init_count += 1
        self.log.info(f"Media engine loaded in {time.time() - start:.2f}s ({exe})")

    def _require_ready(self):
        if not self.loaded:
            raise MediaEngineError("Media engine not initialised; call ensure_ready() first", ErrorKind.NOT_READY)

    def _path(self, name: str) -> str:
        self._require_ready()
        if not name or os.path.basename(name) != name:
            raise ValueError(f"Invalid working area file name: {name!r}")
        return os.path.join(self.workdir, name)

    # Working area

    def write_file(self, name: str, data: bytes) -> None:
        with open(self._path(name), "wb") as f:
            f.write(data)

    def read_file(self, name: str) -> bytes:
        path = self._path(name)
        if not os.path.isfile(path):
            raise FileNotFoundError(f"No such file in working area: {name}")
        with open(path, "rb") as f:
            return f.read()

    def exists(self, name: str) -> bool:
        return os.path.isfile(self._path(name))

    def list_dir(self) -> List[str]:
        self._require_ready()
        return sorted(
            entry for entry in os.listdir(self.workdir)
            if os.path.isfile(os.path.join(self.workdir, entry))
        )

    def delete_file(self, name: str) -> None:
        os.remove(self._path(name))

    def file_size(self, name: str) -> int:
        return os.path.getsize(self._path(name))

    # Commands

    def probe(self, name: str) -> MediaInfo:
        """
        Inspect a staged file's streams.

        Raises:
            MediaEngineError: if the file cannot be parsed
        """
        return probe_media(self._path(name))

    def exec(self, args: Sequence[str]) -> None:
        """
        Run ffmpeg inside the working area (relative names resolve there).

        Raises:
            MediaEngineError: with kind MISSING_STREAM or OTHER
        """
        self._require_ready()
        cmd = [self.ffmpeg_exe, "-hide_banner", "-y", *args]
        self.log.debug(f"FFmpeg command: {' '.join(cmd)}")

        try:
            completed = subprocess.run(
                cmd,
                cwd=self.workdir,
                capture_output=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise MediaEngineError(f"ffmpeg timed out after {e.timeout}s", ErrorKind.OTHER)

        if completed.returncode != 0:
            stderr = completed.stderr.decode(errors="ignore") if completed.stderr else ""
            kind = classify_ffmpeg_error(stderr)
            tail = stderr.strip().splitlines()[-1] if stderr.strip() else f"exit code {completed.returncode}"
            raise MediaEngineError(f"ffmpeg failed: {tail}", kind, stderr)

    def close(self) -> None:
        """Remove the working area; the engine must be re-initialised afterwards."""
        with self._init_lock:
            if self.workdir:
                shutil.rmtree(self.workdir, ignore_errors=True)
            self.workdir = None
            self._init_future = None


_shared_engine: Optional[MediaEngine] = None
_shared_lock = threading.Lock()


def get_engine(logger: Optional[DualLogger] = None) -> MediaEngine:
    """Return the process-wide media engine (created on first use)."""
    global _shared_engine
    with _shared_lock:
        if _shared_engine is None:
            _shared_engine = MediaEngine(logger=logger)
        return _shared_engine
