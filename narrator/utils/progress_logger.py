"""Progress logger for status display updates."""

import time
from typing import Callable, Optional

from .logging_utils import DualLogger


class ProgressLogger(DualLogger):
    """Logger that extends DualLogger with status display updates."""

    def __init__(
        self,
        log_file: Optional[str] = None,
        verbose: bool = True,
        ui_callback: Optional[Callable[[str], None]] = None
    ):
        """
        Initialize progress logger.

        Args:
            log_file: Path to log file (if None, only console logging)
            verbose: Whether to print to console
            ui_callback: Callback receiving status strings (may be called from a worker thread)
        """
        super().__init__(log_file, verbose)
        self.ui_callback = ui_callback
        self.start_time = time.time()
        self.last_progress_message = ""

    def _update_ui(self, message: str):
        if message and self.ui_callback:
            try:
                self.ui_callback(message)
            except Exception as e:
                # UI errors must not break logging
                if self.verbose:
                    print(f"[Progress Logger Error] {e}")

    def frames_progress(self, index: int, total: int):
        """Report frame extraction progress as "Extracting frames i/N..."."""
        message = f"Extracting frames {index}/{total}..."
        self.last_progress_message = message
        self.debug(message)
        self._update_ui(message)

    def clear(self):
        """Clear the status display."""
        self.last_progress_message = ""
        self._update_ui(" ")

    def info(self, message: str):
        super().info(message)
        self._update_ui(message)

    def error(self, message: str):
        super().error(message)
        self._update_ui(f"❌ {message}")

    def warning(self, message: str):
        super().warning(message)
        self._update_ui(f"⚠️ {message}")
