"""
retry.py

Bounded retry for remote platform calls.

Responsibilities:
- Classify platform errors as retryable or fatal
- Fixed, attempt-indexed backoff schedule
- Re-raise the last failure unchanged once attempts run out
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Sequence, TypeVar

import config
from logger import get_logger
from providers.errors import HttpStatusError, RateLimited, TransportError

logger = get_logger(__name__)
T = TypeVar("T")

Sleep = Callable[[float], None]


def is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, (TransportError, RateLimited)):
        return True
    if isinstance(exc, HttpStatusError):
        return exc.status in config.RETRYABLE_STATUS_CODES
    return False


def execute_with_retry(
    operation: Callable[[], T],
    name: str = "",
    *,
    max_attempts: int = config.MAX_RETRIES,
    delays: Sequence[float] = config.RETRY_DELAYS_SEC,
    sleep: Optional[Sleep] = None,
) -> T:
    sleep = sleep or time.sleep

    for attempt in range(max_attempts):
        try:
            return operation()
        except Exception as e:
            if not is_retryable(e) or attempt == max_attempts - 1:
                raise

            delay = delays[min(attempt, len(delays) - 1)]
            logger.warning(
                f"{name} failed (attempt {attempt + 1}/{max_attempts}), "
                f"retrying in {delay:g}s: {e}"
            )
            sleep(delay)

    # max_attempts < 1: nothing was attempted
    raise ValueError(f"execute_with_retry needs at least one attempt ({name})")
