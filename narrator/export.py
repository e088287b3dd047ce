"""
Export of the merged video to a file.
"""

import os
from datetime import datetime
from typing import Optional

from .config import OUTPUT_EXTENSION
from .errors import MissingPrerequisiteError
from .models import MergedOutput


def export_filename(source_name: Optional[str], now: Optional[datetime] = None,
                    extension: str = OUTPUT_EXTENSION) -> str:
    """
    Build "{base}_ai_narration_{YYYY-MM-DD_HH-MM-SS}.{ext}".

    Args:
        source_name: Original upload name ("video" is used when unknown)
        now: Export time (defaults to the current local time)
        extension: Container extension
    """
    base = os.path.splitext(os.path.basename(source_name))[0] if source_name else ""
    base = base or "video"
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")
    return f"{base}_ai_narration_{stamp}.{extension}"


class VideoExporter:
    """Handles video export functionality."""

    @staticmethod
    def export(merged: Optional[MergedOutput], output_dir: str, source_name: Optional[str] = None,
               now: Optional[datetime] = None) -> str:
        """
        Write the merged video to output_dir.

        Args:
            merged: Result of the last successful merge
            output_dir: Target directory (created if missing)
            source_name: Original upload name, for the file name
            now: Export time override

        Returns:
            Path of the written file
        """
        if merged is None:
            raise MissingPrerequisiteError("Please create a merged video first")

        os.makedirs(output_dir, exist_ok=True)
        output_path = os.path.join(output_dir, export_filename(source_name, now, merged.extension))
        with open(output_path, "wb") as f:
            f.write(merged.data)

        print(f"[NARRATOR] Video exported to: {output_path}")
        return output_path
