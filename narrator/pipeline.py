"""
Merge/export pipeline: mixes the narration with the video's own audio and
remuxes the result with the untouched video stream.
"""

import time
from typing import List, Optional, Tuple

from .config import (
    AUDIO_BITRATE,
    AUDIO_CODEC,
    LARGE_FILE_THRESHOLD,
    OUTPUT_EXTENSION,
    STAGED_NARRATION_NAME,
    STAGED_OUTPUT_NAME,
    STAGED_VIDEO_BASENAME,
)
from .engine.media_engine import MediaEngine, get_engine
from .errors import (
    ErrorKind,
    InputReadError,
    MediaEngineError,
    MissingPrerequisiteError,
    MixEncodeError,
    OutputRetrievalError,
    StagingWriteError,
)
from .models import MergedOutput, MergeRequest, MixStrategy
from .utils.logging_utils import DualLogger, get_log_helper
from .utils.utils import format_gain

LARGE_FILE_HINT = " Try a shorter or smaller video (e.g. under 100 MB)."


def build_amix_filter(video_gain: float, narration_gain: float) -> str:
    """Scale both audio inputs and sum them, lasting as long as the longer one."""
    # amix keeps its default normalisation: while both inputs are active each
    # is weighted 1/2 after the volume filters, so the export sits about 6 dB
    # below the preview at equal gains. The narration-only args have no amix
    # and apply the narration gain unscaled.
    return (
        f"[0:a]volume={format_gain(video_gain)}[a1];"
        f"[1:a]volume={format_gain(narration_gain)}[a2];"
        f"[a1][a2]amix=inputs=2:duration=longest[outa]"
    )


def build_amix_args(video_name: str, narration_name: str, output_name: str,
                    video_gain: float, narration_gain: float) -> List[str]:
    return [
        "-i", video_name,
        "-i", narration_name,
        "-filter_complex", build_amix_filter(video_gain, narration_gain),
        "-map", "0:v:0",
        "-map", "[outa]",
        "-c:v", "copy",
        "-c:a", AUDIO_CODEC,
        "-b:a", AUDIO_BITRATE,
        output_name,
    ]


def build_narration_only_args(video_name: str, narration_name: str, output_name: str,
                              narration_gain: float) -> List[str]:
    """Video copy plus the scaled narration, cut at the shorter stream."""
    return [
        "-i", video_name,
        "-i", narration_name,
        "-map", "0:v:0",
        "-map", "1:a:0",
        "-c:v", "copy",
        "-c:a", AUDIO_CODEC,
        "-b:a", AUDIO_BITRATE,
        "-filter:a", f"volume={format_gain(narration_gain)}",
        "-shortest",
        output_name,
    ]


class MergePipeline:
    """Stages inputs, runs the mix command and retrieves the merged container."""

    def __init__(self, engine: Optional[MediaEngine] = None,
                 logger: Optional[DualLogger] = None, verbose: bool = False):
        """
        Initialize merge pipeline.

        Args:
            engine: Media engine (defaults to the shared engine)
            logger: Optional DualLogger instance
            verbose: Print when no logger is given
        """
        self.engine = engine or get_engine(logger)
        self.log = get_log_helper(logger, verbose)
        self.output_name = STAGED_OUTPUT_NAME
        self.narration_name = STAGED_NARRATION_NAME

    def run(self, request: MergeRequest) -> MergedOutput:
        """
        Produce one merged container from the request.

        Raises:
            MissingPrerequisiteError: no source video or no narration audio
            InputReadError: the source could not be read
            StagingWriteError: the working area could not be written
            MixEncodeError: the mix command failed
            OutputRetrievalError: no output container was found
        """
        source, narration = request.source, request.narration
        if source is None or narration is None:
            raise MissingPrerequisiteError("Please upload a video and generate narration audio first")

        start = time.time()
        self.engine.ensure_ready()

        video_name = f"{STAGED_VIDEO_BASENAME}.{source.extension}"
        staged = [video_name, self.narration_name, self.output_name]
        self._clean_working_area(staged)

        try:
            self._stage(request, video_name)

            # Read gains once, at time of use
            settings = request.settings.snapshot()
            self.log.info(
                f"Merging {source.name}: video gain {format_gain(settings.video_gain)}, "
                f"narration gain {format_gain(settings.narration_gain)}"
            )

            strategy = self._mix(video_name, settings.video_gain, settings.narration_gain)
            output_name, data = self._retrieve_output(staged)
            duration = self._output_duration(output_name)
        finally:
            self._cleanup(staged)

        self.log.info(f"Merge finished in {time.time() - start:.2f}s ({strategy.value}, {len(data)} bytes)")
        return MergedOutput(data=data, extension=OUTPUT_EXTENSION, strategy=strategy, duration=duration)

    def _clean_working_area(self, names: List[str]) -> None:
        try:
            existing = set(self.engine.list_dir())
        except OSError as e:
            self.log.warning(f"Could not list working area: {e}")
            return
        for name in names:
            if name in existing:
                self.log.debug(f"Removing leftover {name}")
                try:
                    self.engine.delete_file(name)
                except OSError as e:
                    self.log.warning(f"Could not remove leftover {name}: {e}")

    def _stage(self, request: MergeRequest, video_name: str) -> None:
        source = request.source
        try:
            video_data = source.read_bytes()
            narration_data = bytes(request.narration.data)
        except (OSError, TypeError) as e:
            raise InputReadError(f"Reading files: {e}") from e

        try:
            self.engine.write_file(video_name, video_data)
            self.engine.write_file(self.narration_name, narration_data)
        except OSError as e:
            size = source.size_bytes or len(video_data)
            hint = LARGE_FILE_HINT if size > LARGE_FILE_THRESHOLD else ""
            raise StagingWriteError(f"Writing to working area (video may be too large): {e}.", hint) from e

        self.log.debug(f"Staged {video_name} ({len(video_data)} bytes) and "
                       f"{self.narration_name} ({len(narration_data)} bytes)")

    def _source_has_audio(self, video_name: str) -> bool:
        try:
            return self.engine.probe(video_name).has_audio
        except MediaEngineError as e:
            # Let the primary command decide
            self.log.warning(f"Could not probe {video_name}, assuming it has audio: {e}")
            return True

    def _mix(self, video_name: str, video_gain: float, narration_gain: float) -> MixStrategy:
        if self._source_has_audio(video_name):
            try:
                self.engine.exec(build_amix_args(
                    video_name, self.narration_name, self.output_name, video_gain, narration_gain
                ))
                return MixStrategy.AMIX
            except MediaEngineError as e:
                if e.kind is not ErrorKind.MISSING_STREAM:
                    raise MixEncodeError(f"Error merging video: {e}") from e
                self.log.warning("Source video has no audio stream, mixing narration only")
        else:
            self.log.info("Source video has no audio stream, mixing narration only")

        try:
            self.engine.exec(build_narration_only_args(
                video_name, self.narration_name, self.output_name, narration_gain
            ))
        except MediaEngineError as e:
            raise MixEncodeError(f"Error merging video: {e}") from e
        return MixStrategy.NARRATION_ONLY

    def _retrieve_output(self, staged: List[str]) -> Tuple[str, bytes]:
        try:
            return self.output_name, self.engine.read_file(self.output_name)
        except FileNotFoundError as read_err:
            suffix = f".{OUTPUT_EXTENSION}"
            try:
                # Staged inputs may share the container extension
                candidates = [name for name in self.engine.list_dir()
                              if name.endswith(suffix) and name not in staged]
                if candidates:
                    self.log.warning(f"{self.output_name} not found, using {candidates[0]}")
                    staged.append(candidates[0])
                    return candidates[0], self.engine.read_file(candidates[0])
            except OSError as e:
                raise OutputRetrievalError(f"Reading output (merge may have failed): {e}") from e
            raise OutputRetrievalError(f"Reading output (merge may have failed): {read_err}") from read_err

    def _output_duration(self, name: str) -> Optional[float]:
        try:
            return self.engine.probe(name).duration
        except MediaEngineError as e:
            self.log.debug(f"Could not probe {name}: {e}")
            return None

    def _cleanup(self, names: List[str]) -> None:
        for name in names:
            try:
                if self.engine.exists(name):
                    self.engine.delete_file(name)
            except (OSError, MediaEngineError) as e:
                self.log.warning(f"Could not remove staged file {name}: {e}")
