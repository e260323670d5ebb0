# Shared helpers: rounding, UTC dates, retry

from .helpers import round_half_up, ensure_utc, utc_now, truncate_text
from .retry import retry_with_backoff, is_retryable_error

__all__ = [
    "round_half_up",
    "ensure_utc",
    "utc_now",
    "truncate_text",
    "retry_with_backoff",
    "is_retryable_error",
]
