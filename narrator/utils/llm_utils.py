"""Retry of transient API failures during narration generation."""

import time
from functools import wraps
from typing import Callable, TypeVar

from .logging_utils import get_log_helper

T = TypeVar('T')


def retry_transient(
    label: str,
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    retryable_exceptions: tuple = (Exception,),
    log_attr: str = "log"
):
    """
    Retry a method with exponential backoff, reporting each failed attempt
    through the instance's log helper (so it reaches the status display).

    Args:
        label: Name of the call in log messages
        max_attempts: Maximum number of attempts (default: 3)
        initial_delay: Delay before the second attempt, in seconds
        backoff_factor: Multiplier for delay between retries
        retryable_exceptions: Exceptions that trigger a retry; others propagate at once
        log_attr: Attribute of the instance holding its log helper
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(self, *args, **kwargs) -> T:
            log = getattr(self, log_attr, None) or get_log_helper()
            delay = initial_delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return func(self, *args, **kwargs)
                except retryable_exceptions as e:
                    if attempt >= max_attempts:
                        log.error(f"{label}: all {max_attempts} attempts failed ({type(e).__name__})")
                        raise
                    log.warning(
                        f"{label}: attempt {attempt}/{max_attempts} failed ({type(e).__name__}), "
                        f"retrying in {delay:.1f}s"
                    )
                    time.sleep(delay)
                    delay *= backoff_factor

            raise RuntimeError(f"{label}: retry loop exited without a result")

        return wrapper
    return decorator
