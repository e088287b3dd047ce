"""
Narration text and speech generation via the OpenAI API.
"""

import time
from typing import Optional

from openai import APIConnectionError, APIError, APITimeoutError, OpenAI, RateLimitError

from ..config import NarratorConfig
from ..errors import MissingPrerequisiteError, NarrationGenerationError
from ..models import NarrationAudio, NarrationRequest
from ..utils.llm_utils import retry_transient
from ..utils.logging_utils import DualLogger, get_log_helper

_TRANSIENT_ERRORS = (RateLimitError, APIConnectionError, APITimeoutError)


def extract_output_text(response) -> str:
    """Join the output_text parts of every message item with newlines."""
    texts = []
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for content in getattr(item, "content", None) or []:
            if getattr(content, "type", None) == "output_text":
                texts.append(content.text)
    return "\n".join(texts)


class NarrationGenerator:
    """Calls the multimodal text model and the text-to-speech model."""

    def __init__(
        self,
        config: Optional[NarratorConfig] = None,
        client: Optional[OpenAI] = None,
        logger: Optional[DualLogger] = None,
        verbose: bool = False
    ):
        """
        Initialize narration generator.

        Args:
            config: NarratorConfig (API key, models, voice)
            client: Optional pre-built OpenAI client
            logger: Optional DualLogger instance
            verbose: Print when no logger is given
        """
        self.config = config or NarratorConfig()
        if client is None:
            if not self.config.api_key:
                raise ValueError("OpenAI API key not provided. Set OPENAI_API_KEY environment variable or pass api_key in the config.")
            # Transient failures are retried by retry_transient
            client = OpenAI(api_key=self.config.api_key, max_retries=0)
        self.client = client
        self.log = get_log_helper(logger, verbose)

    @retry_transient("Narration text request", retryable_exceptions=_TRANSIENT_ERRORS)
    def _create_response(self, request: NarrationRequest):
        image_inputs = [{"type": "input_image", "image_url": uri} for uri in request.image_data_uris]
        return self.client.responses.create(
            model=self.config.text_model,
            input=[
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": request.prompt}, *image_inputs],
                }
            ],
        )

    @retry_transient("Narration speech request", retryable_exceptions=_TRANSIENT_ERRORS)
    def _create_speech(self, text: str) -> bytes:
        response = self.client.audio.speech.create(
            model=self.config.tts_model,
            voice=self.config.tts_voice,
            input=text,
        )
        return response.read()

    def generate_text(self, request: NarrationRequest) -> str:
        """
        Generate narration text from a prompt and frames.

        Raises:
            NarrationGenerationError: the API call failed
        """
        start = time.time()
        try:
            response = self._create_response(request)
        except APIError as e:
            self.log.error(f"Error generating narration: {e}")
            raise NarrationGenerationError(f"Error generating narration: {e}") from e

        text = extract_output_text(response)
        self.log.info(f"Narration text generated in {time.time() - start:.2f}s ({len(text.split())} words)")
        return text

    def generate_audio(self, text: str) -> NarrationAudio:
        """
        Speak narration text with the fixed TTS model and voice.

        Raises:
            MissingPrerequisiteError: text is empty
            NarrationGenerationError: the API call failed
        """
        if not text or not text.strip():
            raise MissingPrerequisiteError("Please generate narration text first")

        start = time.time()
        try:
            data = self._create_speech(text)
        except APIError as e:
            self.log.error(f"Error generating audio: {e}")
            raise NarrationGenerationError(f"Error generating audio: {e}") from e

        self.log.info(f"Narration audio generated in {time.time() - start:.2f}s ({len(data)} bytes)")
        return NarrationAudio(data=data, source_text=text, extension="mp3")
