"""Caller-side exponential backoff.

The clients and the search service never retry; callers that want retries
wrap a call with ``call_with_backoff``. Only rate limiting and 5xx API errors
are retried.
"""

from __future__ import annotations

import random
import time
from typing import Callable, Optional, TypeVar

from NdlSearch.core.errors import RateLimitError, is_retryable
from NdlSearch.utils.log import log

T = TypeVar("T")

JITTER = 0.5


def backoff_delay(
    attempt: int,
    *,
    base_pause: float,
    max_sleep: float,
    retry_after: Optional[str] = None,
) -> float:
    """Return the pause before the next attempt.

    Args:
        attempt: Failed attempt index (1-based).
        base_pause: First pause in seconds.
        max_sleep: Upper bound in seconds.
        retry_after: ``Retry-After`` header value; used when it is a number.

    Returns:
        Delay in seconds, never above ``max_sleep``.
    """
    if retry_after is not None:
        try:
            return min(max(0.0, float(retry_after)), max_sleep)
        except ValueError:
            pass
    delay = base_pause * (2 ** (attempt - 1)) + random.uniform(0, JITTER)
    return min(delay, max_sleep)


def call_with_backoff(
    func: Callable[[], T],
    *,
    max_attempts: int = 3,
    base_pause: float = 1.5,
    max_sleep: float = 20.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``func`` and retry retryable failures with exponential backoff.

    Args:
        func: Zero-argument callable issuing one request.
        max_attempts: Total attempts, including the first.
        base_pause: First pause in seconds.
        max_sleep: Upper bound of one pause.
        sleep: Sleep function, replaceable in tests.

    Returns:
        Whatever ``func`` returns.

    Raises:
        NdlSearchError: The last error when attempts are exhausted, or any
            non-retryable error immediately.
    """
    attempt = 1
    while True:
        try:
            return func()
        except Exception as e:
            if not is_retryable(e) or attempt >= max_attempts:
                raise
            retry_after = e.retry_after if isinstance(e, RateLimitError) else None
            delay = backoff_delay(attempt, base_pause=base_pause, max_sleep=max_sleep, retry_after=retry_after)
            log.warning("Request failed (attempt %d/%d): %s; retrying in %.1fs", attempt, max_attempts, e, delay)
            sleep(delay)
            attempt += 1
