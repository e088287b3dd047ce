"""
Narration session: owns the in-session entities and passes explicit
requests into the frame sampler, generators, preview engine and pipeline.
"""

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from ..config import NarratorConfig
from ..engine.media_engine import MediaEngine, get_engine, probe_media
from ..errors import (
    ExtractionSuperseded,
    InputReadError,
    MediaEngineError,
    MissingPrerequisiteError,
    StaleNarrationError,
)
from ..export import VideoExporter
from ..models import FrameSet, MergedOutput, MergeRequest, MixSettings, NarrationAudio, SourceVideo
from ..pipeline import MergePipeline
from ..processors.frame_sampler import FrameSampler
from ..processors.narration_generator import NarrationGenerator
from ..processors.narration_request import NarrationRequestBuilder
from ..utils.progress_logger import ProgressLogger
from .mix_preview import AudioMixPreviewEngine
from .timeline_controller import TimelineController


class NarrationSession:
    """One editing session: upload, narrate, audition, merge, export."""

    def __init__(
        self,
        config: Optional[NarratorConfig] = None,
        engine: Optional[MediaEngine] = None,
        sampler: Optional[FrameSampler] = None,
        generator: Optional[NarrationGenerator] = None,
        preview: Optional[AudioMixPreviewEngine] = None,
        probe: Callable = probe_media,
        status_callback: Optional[Callable[[str], None]] = None
    ):
        """
        Initialize session.

        Args:
            config: NarratorConfig (defaults from environment)
            engine: Media engine (defaults to the shared engine)
            sampler: Frame sampler
            generator: Narration generator (built lazily when first needed)
            preview: Mix preview engine
            probe: Media probe used on upload
            status_callback: Receives progress/status strings
        """
        self.config = config or NarratorConfig()
        self.logger = ProgressLogger(self.config.log_file, self.config.verbose, status_callback)

        self.engine = engine or get_engine(self.logger)
        self.sampler = sampler or FrameSampler(
            frame_count=self.config.frame_count,
            max_size=self.config.max_frame_size,
            quality=self.config.jpeg_quality,
            seek_attempts=self.config.seek_attempts,
            logger=self.logger
        )
        self.request_builder = NarrationRequestBuilder(self.config.prompt_template_path, logger=self.logger)
        self._generator = generator
        self.pipeline = MergePipeline(self.engine, logger=self.logger)
        self.probe = probe

        # The preview and the merge read the same settings object
        self.preview = preview or AudioMixPreviewEngine(
            MixSettings(self.config.video_gain, self.config.narration_gain), logger=self.logger
        )
        self.settings = self.preview.settings
        self.timeline = TimelineController(self.preview)

        self.source: Optional[SourceVideo] = None
        self.frames: FrameSet = FrameSet.empty()
        self.instructions = ""
        self.narration_text = ""
        self.narration_audio: Optional[NarrationAudio] = None
        self.merged_output: Optional[MergedOutput] = None

        self._generation = 0
        self._generation_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="narrator")

    @property
    def generator(self) -> NarrationGenerator:
        if self._generator is None:
            self._generator = NarrationGenerator(self.config, logger=self.logger)
        return self._generator

    @property
    def playback_state(self):
        return self.preview.playback

    # Upload and frames

    def _probe_source(self, path: str) -> SourceVideo:
        if not os.path.isfile(path):
            raise InputReadError(f"Video file not found: {path}")
        try:
            info = self.probe(path)
        except MediaEngineError as e:
            raise InputReadError(f"Could not read video {os.path.basename(path)}: {e}") from e
        if not info.duration or info.duration <= 0:
            raise InputReadError(f"Could not determine the duration of {os.path.basename(path)}")
        return SourceVideo(
            path=path,
            duration=info.duration,
            extension=SourceVideo.extension_for(path),
            size_bytes=os.path.getsize(path),
            has_audio=info.has_audio,
        )

    def upload_video(self, path: str) -> Optional[FrameSet]:
        """
        Replace the source video and sample its frames.

        Returns:
            The new FrameSet, or None when a newer upload superseded this one
        """
        source = self._probe_source(path)
        with self._generation_lock:
            self._generation += 1
            generation = self._generation
            self.source = source
            self.frames = FrameSet.empty()
            self.narration_text = ""
            self.narration_audio = None
            self.merged_output = None
            # Under the lock: an older upload can never reload the preview after a newer one
            self.preview.load_merged(None)
            self.preview.load_narration(None)
            self.preview.load_source(source)

        self.logger.info(f"Loaded {source.name} ({source.duration:.1f}s, audio: {source.has_audio})")

        try:
            frames = self.sampler.sample(
                source.path,
                source.duration,
                progress_callback=self.logger.frames_progress,
                should_continue=lambda: self._generation == generation,
            )
        except ExtractionSuperseded:
            return None
        finally:
            self.logger.clear()

        with self._generation_lock:
            if self._generation != generation:
                return None
            self.frames = frames
        return frames

    def submit_upload(self, path: str) -> Future:
        """Run upload_video on a worker thread."""
        return self._executor.submit(self.upload_video, path)

    # Narration

    def generate_narration_text(self, instructions: Optional[str] = None) -> str:
        if instructions is not None:
            self.instructions = instructions
        if self.source is None:
            raise MissingPrerequisiteError("Please upload a video and enter instructions")
        request = self.request_builder.build(self.source.duration, self.instructions, self.frames)
        self.narration_text = self.generator.generate_text(request)
        return self.narration_text

    def set_narration_text(self, text: str):
        self.narration_text = text or ""
        if self.narration_audio_is_stale:
            self.logger.warning("Narration text changed; narration audio is out of date")

    def generate_narration_audio(self) -> NarrationAudio:
        audio = self.generator.generate_audio(self.narration_text)
        self.narration_audio = audio
        self.preview.load_narration(audio)
        return audio

    @property
    def narration_audio_is_stale(self) -> bool:
        return self.narration_audio is not None and self.narration_audio.is_stale_for(self.narration_text)

    # Mixing

    def set_video_volume(self, percent: int):
        self.preview.set_gains(video_gain=percent / 100)

    def set_narration_volume(self, percent: int):
        self.preview.set_gains(narration_gain=percent / 100)

    def merge(self, allow_stale: bool = False) -> MergedOutput:
        """
        Mix and remux with the current settings.
        The previous merged output is kept if this run fails.
        """
        if self.narration_audio_is_stale and not allow_stale:
            raise StaleNarrationError(
                "Narration audio was generated from different text; regenerate it or merge with allow_stale=True"
            )
        request = MergeRequest(source=self.source, narration=self.narration_audio, settings=self.settings)
        try:
            merged = self.pipeline.run(request)
        except Exception as e:
            self.logger.error(f"Error merging video: {e}")
            raise

        self.merged_output = merged
        self.preview.load_merged(merged)
        return merged

    def export(self, output_dir: str) -> str:
        source_name = self.source.name if self.source else None
        return VideoExporter.export(self.merged_output, output_dir, source_name)

    def close(self):
        self.preview.close()
        self._executor.shutdown(wait=False)
        self.logger.close()
