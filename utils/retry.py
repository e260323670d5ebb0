"""
Retry helpers for provider API calls.

Used through `utils.llm_clients.complete` by batch scanners that query the
providers. The query expander does not retry; it falls back to templates.
"""

import logging
import random
import time
from functools import wraps
from typing import Callable, Optional

from config.settings import settings

logger = logging.getLogger(__name__)

RETRYABLE_TERMS = (
    "rate limit", "too many requests", "429",
    "timeout", "timed out",
    "network", "econnreset", "connection reset", "connection error",
    "500", "502", "503",
)


def is_retryable_error(error: BaseException) -> bool:
    """Rate limits, timeouts, network errors and 5xx responses are worth retrying."""
    if isinstance(error, (TimeoutError, ConnectionError)):
        return True
    error_msg = str(error).lower()
    return any(term in error_msg for term in RETRYABLE_TERMS)


def calculate_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Exponential backoff with 0-30% jitter, capped at max_delay."""
    exponential_delay = base_delay * (2 ** attempt)
    jitter = random.random() * 0.3 * exponential_delay
    return min(exponential_delay + jitter, max_delay)


def retry_with_backoff(
    max_retries: Optional[int] = None,
    base_delay: Optional[float] = None,
    max_delay: Optional[float] = None,
    should_retry: Callable[[BaseException], bool] = is_retryable_error,
    sleep: Callable[[float], None] = time.sleep
):
    """
    Decorator for retrying functions with exponential backoff.

    The wrapped function is attempted once plus up to ``max_retries`` retries.
    Errors rejected by ``should_retry`` and the error of the final attempt are
    re-raised unchanged.

    Args:
        max_retries: Retries after the first attempt (default: LLM_MAX_RETRIES)
        base_delay: Delay before the first retry in seconds
        max_delay: Upper bound for any single delay in seconds
        should_retry: Predicate deciding whether an error is transient
        sleep: Sleep function, replaceable in tests
    """
    retries = settings.LLM_MAX_RETRIES if max_retries is None else max_retries
    base = settings.LLM_RETRY_BASE_DELAY if base_delay is None else base_delay
    cap = settings.LLM_RETRY_MAX_DELAY if max_delay is None else max_delay

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(retries + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if attempt == retries or not should_retry(e):
                        if attempt > 0:
                            logger.error(f"All {attempt + 1} attempts failed: {str(e)}")
                        raise

                    wait_time = calculate_delay(attempt, base, cap)
                    logger.warning(
                        f"Attempt {attempt + 1}/{retries + 1} failed: {str(e)}. "
                        f"Retrying in {wait_time:.2f}s..."
                    )
                    sleep(wait_time)
        return wrapper
    return decorator
