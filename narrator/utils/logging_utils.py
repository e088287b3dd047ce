"""
Session-scoped logging for the narrator core.

Each DualLogger owns its own child of the "narrator" logger, so several
sessions can log side by side (each to its own file) without touching each
other's handlers.
"""

import itertools
import logging
import sys
from pathlib import Path
from typing import List, Optional

LOGGER_NAME = "narrator"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_session_ids = itertools.count(1)


class DualLogger:
    """Logger that writes to both file and console."""

    def __init__(self, log_file: Optional[str] = None, verbose: bool = True):
        """
        Initialize dual logger on a fresh "narrator.session<N>" logger.

        Args:
            log_file: Path to log file (if None, only console logging)
            verbose: Whether to print to console
        """
        self.verbose = verbose
        self.log_file = log_file
        self.name = f"{LOGGER_NAME}.session{next(_session_ids)}"
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(logging.DEBUG)
        self._handlers: List[logging.Handler] = []

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        if verbose:
            self._attach(logging.StreamHandler(sys.stdout), logging.INFO, formatter)

        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            # Everything goes to the file
            self._attach(logging.FileHandler(log_file, encoding='utf-8'), logging.DEBUG, formatter)

    def _attach(self, handler: logging.Handler, level: int, formatter: logging.Formatter):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        self.logger.addHandler(handler)
        self._handlers.append(handler)

    def debug(self, message: str):
        self.logger.debug(message)

    def info(self, message: str):
        self.logger.info(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str):
        self.logger.error(message)

    def close(self):
        """Detach and close this logger's handlers; other sessions keep theirs."""
        for handler in self._handlers:
            self.logger.removeHandler(handler)
            handler.close()
        self._handlers = []

    def __call__(self, message: str):
        self.info(message)


class LogHelper:
    """Routes messages to a DualLogger, or to tagged prints when verbose."""

    _TAGS = {"debug": "[DEBUG] ", "info": "", "warning": "[WARNING] ", "error": "[ERROR] "}

    def __init__(self, logger: Optional[DualLogger] = None, verbose: bool = False):
        self.logger = logger
        self.verbose = verbose

    def _emit(self, level: str, msg: str):
        if self.logger is not None:
            getattr(self.logger, level)(msg)
        elif self.verbose:
            print(f"[NARRATOR] {self._TAGS[level]}{msg}")

    def debug(self, msg: str):
        self._emit("debug", msg)

    def info(self, msg: str):
        self._emit("info", msg)

    def warning(self, msg: str):
        self._emit("warning", msg)

    def error(self, msg: str):
        self._emit("error", msg)

    def __call__(self, msg: str):
        self.info(msg)


def get_log_helper(logger: Optional[DualLogger] = None, verbose: bool = False) -> LogHelper:
    """
    Logging helper for components that take an optional DualLogger.

    Args:
        logger: Optional DualLogger instance
        verbose: Whether to print if logger is None
    """
    return LogHelper(logger, verbose)
