"""
Configuration constants for the narrator package.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

try:
    from dotenv import load_dotenv
    load_dotenv()  # Load .env file if it exists
except ImportError:
    pass  # python-dotenv not installed, will use environment variables only

# Frame sampling
FRAME_COUNT = 20
MAX_FRAME_SIZE = 512  # Longest edge in pixels
JPEG_QUALITY = 80
SEEK_ATTEMPTS = 3

# Narration generation
WORDS_PER_MINUTE = 100
DEFAULT_TEXT_MODEL = "gpt-4o"
TTS_MODEL = "gpt-4o-mini-tts"
TTS_VOICE = "nova"
PROMPT_TEMPLATE_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "prompts", "prompt_narration.txt")

# Mixing
DEFAULT_GAIN = 0.5
AUDIO_CODEC = "aac"
AUDIO_BITRATE = "192k"

# Working area names (constant per run, never derived from user file names)
STAGED_VIDEO_BASENAME = "in_video"
STAGED_NARRATION_NAME = "in_narration.mp3"
STAGED_OUTPUT_NAME = "out.mp4"
OUTPUT_EXTENSION = "mp4"
DEFAULT_VIDEO_EXTENSION = "mp4"

# Above this size staging failures get a remediation hint
LARGE_FILE_THRESHOLD = 100 * 1024 * 1024

# Preview mixer
MIXER_FREQUENCY = 22050
MIXER_BUFFER = 512

# Timeline
TIMELINE_STEP_SECONDS = 2.0
RULER_TICK_SECONDS = 3


@dataclass
class NarratorConfig:
    """Configuration class for a narration session."""

    # OpenAI
    api_key: Optional[str] = field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    text_model: str = field(default_factory=lambda: os.getenv("NARRATOR_MODEL", DEFAULT_TEXT_MODEL))
    tts_model: str = TTS_MODEL
    tts_voice: str = TTS_VOICE
    prompt_template_path: str = field(
        default_factory=lambda: os.getenv("NARRATOR_PROMPT_TEMPLATE", PROMPT_TEMPLATE_PATH)
    )

    # Frame sampling
    frame_count: int = FRAME_COUNT
    max_frame_size: int = MAX_FRAME_SIZE
    jpeg_quality: int = JPEG_QUALITY
    seek_attempts: int = SEEK_ATTEMPTS

    # Mixing defaults
    video_gain: float = DEFAULT_GAIN
    narration_gain: float = DEFAULT_GAIN

    # Logging
    log_file: Optional[str] = None
    verbose: bool = True
