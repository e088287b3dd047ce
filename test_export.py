"""Tests for exporting the merged video."""

import os
from datetime import datetime

import pytest

from narrator.errors import MissingPrerequisiteError
from narrator.export import VideoExporter, export_filename
from narrator.models import MergedOutput

NOW = datetime(2024, 3, 9, 14, 5, 7)


@pytest.mark.parametrize("source_name, expected", [
    ("holiday.mp4", "holiday_ai_narration_2024-03-09_14-05-07.mp4"),
    ("clip.final.mov", "clip.final_ai_narration_2024-03-09_14-05-07.mp4"),
    (None, "video_ai_narration_2024-03-09_14-05-07.mp4"),
    ("", "video_ai_narration_2024-03-09_14-05-07.mp4"),
])
def test_export_filename(source_name, expected):
    assert export_filename(source_name, NOW) == expected


def test_export_writes_merged_bytes(tmp_path):
    merged = MergedOutput(data=b"merged video bytes")
    output_dir = tmp_path / "exports"

    path = VideoExporter.export(merged, str(output_dir), "holiday.mp4", now=NOW)

    assert os.path.basename(path) == "holiday_ai_narration_2024-03-09_14-05-07.mp4"
    with open(path, "rb") as f:
        assert f.read() == b"merged video bytes"


def test_export_without_merge_fails(tmp_path):
    with pytest.raises(MissingPrerequisiteError):
        VideoExporter.export(None, str(tmp_path), "holiday.mp4")
    assert os.listdir(tmp_path) == []
