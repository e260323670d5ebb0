"""
Utility functions and helpers for the AI Exposure Scoring Service.

This module provides small numeric and date helpers shared by the scoring,
trend and query expansion agents.
"""

import math
from datetime import datetime, timezone


def round_half_up(value: float) -> int:
    """
    Round a number to the nearest integer, with halves rounded upward.

    Python's built-in ``round`` uses banker's rounding (``round(62.5) == 62``).
    Scores are reported with half-up rounding so that a 62.5 becomes 63.

    Args:
        value: Number to round

    Returns:
        int: Rounded value

    Example:
        >>> round_half_up(62.5)
        63
        >>> round_half_up(-2.5)
        -2
    """
    return int(math.floor(value + 0.5))


def ensure_utc(value: datetime) -> datetime:
    """
    Return a timezone-aware datetime in UTC.

    Naive datetimes are assumed to already be in UTC.

    Example:
        >>> ensure_utc(datetime(2024, 1, 1)).tzinfo
        datetime.timezone.utc
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length with optional suffix.

    Useful for creating preview text or limiting response lengths in logs.

    Args:
        text: Text to truncate
        max_length: Maximum length of the output (default: 100)
        suffix: Suffix to append when truncating (default: "...")

    Returns:
        str: Truncated text with suffix if needed

    Example:
        >>> truncate_text("This is a very long text", max_length=10)
        'This is...'
        >>> truncate_text("Short", max_length=10)
        'Short'
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
