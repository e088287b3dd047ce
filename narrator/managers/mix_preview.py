"""
Live audition of the narration mixed with the video's own audio.
Two gain-controlled mixer channels feed one output; nothing is encoded.
"""

import time
from typing import Callable, Optional

import numpy as np

try:
    import pygame
    HAS_PYGAME = True
except ImportError:
    HAS_PYGAME = False

from ..config import MIXER_BUFFER, MIXER_FREQUENCY
from ..models import MergedOutput, MixSettings, NarrationAudio, PlaybackState, SourceVideo
from ..utils.logging_utils import DualLogger, get_log_helper
from ..utils.video_utils import AudioTrack, load_audio_track, load_audio_track_from_bytes

VIDEO_ROUTE = 0
NARRATION_ROUTE = 1
DIRECT_ROUTE = 2

MODE_MERGED = "merged"
MODE_MIX = "mix"
MODE_SOURCE = "source"


class PygameMixerBackend:
    """pygame.mixer wrapper; the mixer is initialised once."""

    def __init__(self, frequency: int = MIXER_FREQUENCY, buffer: int = MIXER_BUFFER):
        self.frequency = frequency
        self.buffer = buffer
        self._initialized = False

    def init(self) -> int:
        """Initialise the mixer and return its actual sample rate."""
        if not HAS_PYGAME:
            raise RuntimeError("pygame is required for the mix preview. Install with: pip install pygame")
        if not self._initialized:
            pygame.mixer.init(frequency=self.frequency, size=-16, channels=2, buffer=self.buffer)
            pygame.mixer.set_num_channels(max(pygame.mixer.get_num_channels(), DIRECT_ROUTE + 1))
            self._initialized = True
        freq, _, _ = pygame.mixer.get_init()
        return freq

    def make_sound(self, samples: np.ndarray):
        return pygame.sndarray.make_sound(samples)

    def channel(self, index: int):
        return pygame.mixer.Channel(index)

    def pause_all(self):
        if self._initialized:
            pygame.mixer.pause()

    def unpause_all(self):
        if self._initialized:
            pygame.mixer.unpause()

    def quit(self):
        if self._initialized:
            pygame.mixer.quit()
            self._initialized = False


class AudioMixPreviewEngine:
    """Plays source audio and narration through independent gains."""

    def __init__(
        self,
        settings: MixSettings,
        backend=None,
        track_loader: Callable[[str, int], Optional[AudioTrack]] = load_audio_track,
        bytes_loader: Callable[[bytes, str, int], Optional[AudioTrack]] = load_audio_track_from_bytes,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[DualLogger] = None,
        verbose: bool = False
    ):
        """
        Initialize preview engine (the mixer is not touched until playback).

        Args:
            settings: Shared MixSettings, read at time of use
            backend: Mixer backend (defaults to PygameMixerBackend)
            track_loader: Decodes a media file at a sample rate
            bytes_loader: Decodes in-memory media at a sample rate
            clock: Monotonic clock used for the transport position
            logger: Optional DualLogger instance
            verbose: Print when no logger is given
        """
        self.settings = settings
        self.backend = backend or PygameMixerBackend()
        self.track_loader = track_loader
        self.bytes_loader = bytes_loader
        self.clock = clock
        self.log = get_log_helper(logger, verbose)

        self.source: Optional[SourceVideo] = None
        self.narration: Optional[NarrationAudio] = None
        self.merged: Optional[MergedOutput] = None
        self._tracks = {}

        self.playback = PlaybackState()
        self.is_playing = False
        self._play_offset = 0.0
        self._play_started_at = 0.0

        self._frequency: Optional[int] = None
        self._video_route = None
        self._narration_route = None
        self.graph_builds = 0

    # Media

    def load_source(self, source: Optional[SourceVideo]):
        self.stop()
        self.source = source
        self._tracks.pop(MODE_SOURCE, None)
        self._refresh_duration()

    def load_narration(self, narration: Optional[NarrationAudio]):
        self.stop()
        self.narration = narration
        self._tracks.pop(MODE_MIX, None)

    def load_merged(self, merged: Optional[MergedOutput]):
        self.stop()
        self.merged = merged
        self._tracks.pop(MODE_MERGED, None)
        self._refresh_duration()

    @property
    def mode(self) -> str:
        if self.merged is not None:
            return MODE_MERGED
        if self.narration is not None:
            return MODE_MIX
        return MODE_SOURCE

    @property
    def video_muted(self) -> bool:
        """Whether the host should mute the video element's own audio."""
        return self.mode == MODE_MIX

    @property
    def duration(self) -> float:
        if self.merged is not None and self.merged.duration:
            return self.merged.duration
        return self.source.duration if self.source else 0.0

    def _refresh_duration(self):
        self.playback.set_duration(self.duration)

    def _ensure_mixer(self) -> int:
        if self._frequency is None:
            self._frequency = self.backend.init()
        return self._frequency

    def _source_track(self) -> Optional[AudioTrack]:
        if MODE_SOURCE not in self._tracks:
            track = None
            if self.source is not None and self.source.has_audio:
                track = self.track_loader(self.source.path, self._ensure_mixer())
                if track is None:
                    self.log.warning(f"{self.source.name} has no audio track, previewing narration only")
            self._tracks[MODE_SOURCE] = track
        return self._tracks[MODE_SOURCE]

    def _narration_track(self) -> Optional[AudioTrack]:
        if MODE_MIX not in self._tracks:
            narration = self.narration
            self._tracks[MODE_MIX] = self.bytes_loader(
                narration.data, f".{narration.extension}", self._ensure_mixer()
            ) if narration else None
        return self._tracks[MODE_MIX]

    def _merged_track(self) -> Optional[AudioTrack]:
        if MODE_MERGED not in self._tracks:
            merged = self.merged
            self._tracks[MODE_MERGED] = self.bytes_loader(
                merged.data, f".{merged.extension}", self._ensure_mixer()
            ) if merged else None
        return self._tracks[MODE_MERGED]

    # Graph

    def _ensure_graph(self):
        """Build the two-route graph once; later calls reuse it."""
        if self._video_route is not None:
            return
        self._ensure_mixer()
        self._video_route = self.backend.channel(VIDEO_ROUTE)
        self._narration_route = self.backend.channel(NARRATION_ROUTE)
        self.graph_builds += 1
        self.log.debug("Mix preview graph built")
        self.apply_settings()

    def apply_settings(self):
        """Push the current shared gains onto the live routes."""
        if self._video_route is None:
            return
        video_gain = self.settings.video_gain if self._tracks.get(MODE_SOURCE) is not None else 0.0
        self._video_route.set_volume(video_gain)
        self._narration_route.set_volume(self.settings.narration_gain)

    def set_gains(self, video_gain: Optional[float] = None, narration_gain: Optional[float] = None):
        """Update the shared settings and mutate the routes in place."""
        if video_gain is not None:
            self.settings.set_video_gain(video_gain)
        if narration_gain is not None:
            self.settings.set_narration_gain(narration_gain)
        self.apply_settings()

    # Transport

    def _play(self, channel, track: Optional[AudioTrack], seconds: float) -> bool:
        if track is None:
            return False
        samples = track.slice_from(seconds)
        if len(samples) == 0:
            return False
        channel.play(self.backend.make_sound(samples))
        return True

    def _stop_channels(self):
        for route in (self._video_route, self._narration_route):
            if route is not None:
                route.stop()
        if self._frequency is not None:
            self.backend.channel(DIRECT_ROUTE).stop()

    def seek_and_play(self, seconds: float) -> float:
        """
        Move both sources to a time and start them together.

        Args:
            seconds: Requested transport time

        Returns:
            The clamped time actually used
        """
        self._refresh_duration()
        t = self.playback.seek(seconds)
        mode = self.mode

        self._ensure_mixer()
        self._stop_channels()

        if mode == MODE_MIX:
            self._ensure_graph()
            source_track = self._source_track()
            narration_track = self._narration_track()
            narration_time = min(t, narration_track.duration) if narration_track else t

            self.backend.pause_all()
            self._play(self._video_route, source_track, t)
            self._play(self._narration_route, narration_track, narration_time)
            self.apply_settings()
            self.backend.unpause_all()
        else:
            # Merged output (preview graph bypassed) or plain source audio
            track = self._merged_track() if mode == MODE_MERGED else self._source_track()
            direct = self.backend.channel(DIRECT_ROUTE)
            self._play(direct, track, t)
            direct.set_volume(1.0)

        self.is_playing = True
        self._play_offset = t
        self._play_started_at = self.clock()
        self.log.debug(f"Preview playing from {t:.2f}s ({mode})")
        return t

    def tick(self) -> float:
        """Advance the transport from the clock; stops at the end."""
        if self.is_playing:
            t = self.playback.seek(self._play_offset + (self.clock() - self._play_started_at))
            if t >= self.playback.duration:
                self.is_playing = False
        return self.playback.current_time

    def position(self) -> float:
        return self.tick()

    def pause(self):
        if not self.is_playing:
            return
        self.tick()
        self.is_playing = False
        self.backend.pause_all()

    def resume(self):
        if self.is_playing:
            return
        self._play_offset = self.playback.current_time
        self._play_started_at = self.clock()
        self.is_playing = True
        self.backend.unpause_all()

    def stop(self):
        self._stop_channels()
        self.is_playing = False
        self.playback.seek(0.0)

    def close(self):
        self.stop()
        self.backend.quit()
