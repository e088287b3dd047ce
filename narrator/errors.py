"""
Exception types raised by the narrator core.
"""

from enum import Enum
from typing import Optional


class NarratorError(Exception):
    """Base class for all narrator errors."""


class MissingPrerequisiteError(NarratorError):
    """A required entity (video, frames, narration...) is missing."""


class InputReadError(NarratorError):
    """The source or narration content could not be read."""


class StagingWriteError(NarratorError):
    """Writing into the media engine's working area failed."""

    def __init__(self, message: str, hint: str = ""):
        super().__init__(f"{message}{hint}")
        self.hint = hint


class MixEncodeError(NarratorError):
    """The mix/encode command failed."""


class OutputRetrievalError(NarratorError):
    """The merged container could not be found after the command ran."""


class FrameExtractionError(NarratorError):
    """A frame could not be captured; no partial frame set is produced."""


class ExtractionSuperseded(NarratorError):
    """A newer upload replaced the video while frames were being extracted."""


class StaleNarrationError(NarratorError):
    """Narration audio was generated from text that has since changed."""


class NarrationGenerationError(NarratorError):
    """The narration text or speech generation call failed."""


class ErrorKind(Enum):
    """Classification of media engine failures."""
    MISSING_STREAM = "missing_stream"
    NOT_READY = "not_ready"
    OTHER = "other"


class MediaEngineError(NarratorError):
    """A media engine command failed."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.OTHER, stderr: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.stderr = stderr or ""
