"""Tests for building the narration text request."""

import base64

import pytest

from narrator.config import PROMPT_TEMPLATE_PATH
from narrator.errors import MissingPrerequisiteError
from narrator.processors.narration_request import (
    NarrationRequestBuilder,
    render_prompt,
    to_data_uri,
    word_budget,
)
from narrator.utils import round_half_up

FRAMES = [b"\xff\xd8frame-%d" % i for i in range(20)]


@pytest.mark.parametrize("duration, expected", [
    (60, 100),
    (30, 50),
    (90, 150),
    (93, 155),
    (0.2, 0),
    (40, 67),
])
def test_word_budget(duration, expected):
    """Test round(duration/60 * 100)"""
    assert word_budget(duration) == expected


def test_half_rounds_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.4) == 2


def test_render_prompt_substitutes_placeholders():
    template = "Write {num_words} words. {instructions} ({num_words})"
    assert render_prompt(template, 50, "Be upbeat.") == "Write 50 words. Be upbeat. ({num_words})"


def test_packaged_template_has_placeholders():
    with open(PROMPT_TEMPLATE_PATH, encoding="utf-8") as f:
        template = f.read()
    assert "{num_words}" in template
    assert "{instructions}" in template


def test_build_uses_template(tmp_path):
    """Test the full request: filled prompt plus one data URI per frame"""
    template = tmp_path / "prompt.txt"
    template.write_text("Narrate in {num_words} words: {instructions}", encoding="utf-8")

    request = NarrationRequestBuilder(str(template)).build(120.0, "Sound like a nature documentary", FRAMES)

    assert request.prompt == "Narrate in 200 words: Sound like a nature documentary"
    assert len(request.image_data_uris) == 20
    uri = request.image_data_uris[3]
    assert uri.startswith("data:image/jpeg;base64,")
    assert base64.b64decode(uri.split(",", 1)[1]) == FRAMES[3]


def test_unreadable_template_falls_back_to_instructions(tmp_path):
    builder = NarrationRequestBuilder(str(tmp_path / "missing.txt"))
    request = builder.build(60.0, "Just describe it", FRAMES)
    assert request.prompt == "Just describe it"


@pytest.mark.parametrize("duration, instructions, frames", [
    (60.0, "Describe it", []),
    (60.0, "   ", FRAMES),
    (0.0, "Describe it", FRAMES),
])
def test_missing_prerequisites(duration, instructions, frames):
    with pytest.raises(MissingPrerequisiteError):
        NarrationRequestBuilder().build(duration, instructions, frames)


def test_to_data_uri():
    assert to_data_uri(b"abc") == "data:image/jpeg;base64,YWJj"
