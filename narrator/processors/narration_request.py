"""
Builds the narration text request from duration, instructions and frames.
"""

import base64
from typing import Iterable, Optional

from ..config import PROMPT_TEMPLATE_PATH, WORDS_PER_MINUTE
from ..errors import MissingPrerequisiteError
from ..models import FrameSet, NarrationRequest
from ..utils.logging_utils import DualLogger, get_log_helper
from ..utils.utils import round_half_up


def word_budget(duration_seconds: float, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Number of narration words that fit the video (100 words per minute)."""
    return round_half_up(duration_seconds / 60 * words_per_minute)


def to_data_uri(jpeg_bytes: bytes, mime_type: str = "image/jpeg") -> str:
    encoded = base64.b64encode(jpeg_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def render_prompt(template: str, num_words: int, instructions: str) -> str:
    # Only the first occurrence of each placeholder is filled
    return (template
            .replace("{num_words}", str(num_words), 1)
            .replace("{instructions}", instructions, 1))


class NarrationRequestBuilder:
    """Turns a duration, free-text instructions and frames into one request."""

    def __init__(self, template_path: str = PROMPT_TEMPLATE_PATH,
                 logger: Optional[DualLogger] = None, verbose: bool = False):
        self.template_path = template_path
        self.log = get_log_helper(logger, verbose)

    def load_template(self) -> Optional[str]:
        try:
            with open(self.template_path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            self.log.warning(f"Error loading prompt template, using instructions as prompt: {e}")
            return None

    def build_prompt(self, duration: float, instructions: str) -> str:
        """Fill the template, or fall back to the raw instructions."""
        template = self.load_template()
        if template is None:
            return instructions
        return render_prompt(template, word_budget(duration), instructions)

    def build(self, duration: float, instructions: str, frames: Iterable[bytes]) -> NarrationRequest:
        """
        Build the request for the multimodal text model.

        Raises:
            MissingPrerequisiteError: no frames, no instructions, or no duration
        """
        frame_list = list(frames.frames if isinstance(frames, FrameSet) else frames)
        if not frame_list or not (instructions or "").strip() or not duration or duration <= 0:
            raise MissingPrerequisiteError("Please upload a video and enter instructions")

        prompt = self.build_prompt(duration, instructions)
        uris = tuple(to_data_uri(frame) for frame in frame_list)
        self.log.debug(f"Narration request: {word_budget(duration)} words, {len(uris)} images")
        return NarrationRequest(prompt=prompt, image_data_uris=uris)
