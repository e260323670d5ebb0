"""
Trend Calculator

Derives the direction of a score over time from caller-supplied history.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from models.schemas import (
    ExposureTrend,
    HistoricalScore,
    PeriodTrend,
    SOVTrend,
    TrendDataPoint,
    TrendPeriod,
    VisibilityHistoryPoint,
)
from utils.helpers import ensure_utc, round_half_up, utc_now

logger = logging.getLogger(__name__)

PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90}

# Exposure trends within +/-5% are reported as stable
STABLE_THRESHOLD_PERCENT = 5
# Windowed visibility trends use a tighter +/-2%
PERIOD_TREND_THRESHOLD_PERCENT = 2


def period_days(period: str) -> int:
    """Number of days covered by a trend period ("7d", "30d" or "90d")."""
    try:
        return PERIOD_DAYS[period]
    except KeyError:
        raise ValueError(f"Unknown trend period: {period}")


def _change_percent(current: float, previous: float) -> int:
    if previous > 0:
        return round_half_up((current - previous) / previous * 100)
    # Division by zero guard still signals growth from nothing
    return 100 if current > 0 else 0


def calculate_exposure_trend(
    current_score: float,
    historical_scores: Sequence[Union[HistoricalScore, Mapping]],
    period: TrendPeriod = "7d",
    now: Optional[datetime] = None
) -> ExposureTrend:
    """
    Compare the current score with the most recent score recorded at least
    one period ago.

    Args:
        current_score: Latest exposure score
        historical_scores: Earlier ``{date, score}`` records, in any order
        period: Comparison period ("7d", "30d" or "90d")
        now: Reference time (defaults to the current UTC time)

    Returns:
        ExposureTrend; stable with no previous score when no record is old enough
    """
    cutoff = ensure_utc(now or utc_now()) - timedelta(days=period_days(period))

    history = sorted(
        (HistoricalScore.model_validate(h) for h in historical_scores),
        key=lambda h: ensure_utc(h.date),
        reverse=True
    )
    previous = next((h for h in history if ensure_utc(h.date) <= cutoff), None)

    if previous is None:
        return ExposureTrend(direction="stable", change_percent=0, period=period, previous_score=None)

    change = current_score - previous.score
    change_percent = _change_percent(current_score, previous.score)

    if abs(change_percent) < STABLE_THRESHOLD_PERCENT:
        direction = "stable"
    else:
        direction = "up" if change > 0 else "down"

    return ExposureTrend(
        direction=direction,
        change_percent=change_percent,
        period=period,
        previous_score=previous.score,
    )


def _average(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _to_points(history: Sequence[Union[VisibilityHistoryPoint, Mapping]]) -> List[VisibilityHistoryPoint]:
    """Validate history and order it oldest first."""
    points = [VisibilityHistoryPoint.model_validate(h) for h in history]
    points.sort(key=lambda p: ensure_utc(p.recorded_at))
    return points


def _split_windows(
    points: Sequence[VisibilityHistoryPoint],
    value: Callable[[VisibilityHistoryPoint], float],
    period: TrendPeriod,
    now: datetime
) -> Tuple[List[float], List[float]]:
    """
    Values inside the current window ``[now - period, now]`` and inside the
    previous window of the same length immediately before it.
    """
    days = timedelta(days=period_days(period))
    current_start = now - days
    previous_start = current_start - days

    current_values = []
    previous_values = []
    for point in points:
        recorded_at = ensure_utc(point.recorded_at)
        if current_start <= recorded_at <= now:
            current_values.append(value(point))
        elif previous_start <= recorded_at < current_start:
            previous_values.append(value(point))
    return current_values, previous_values


def _daily_points(
    points: Sequence[VisibilityHistoryPoint],
    value: Callable[[VisibilityHistoryPoint], float],
    period: TrendPeriod,
    now: datetime
) -> List[TrendDataPoint]:
    """
    One point per UTC calendar day from ``now - period`` to ``now``.

    Days without a record score 0; when a day has several records the latest
    one wins.
    """
    by_date: Dict[str, float] = {}
    for point in points:
        by_date[ensure_utc(point.recorded_at).date().isoformat()] = value(point)

    data_points = []
    day = now - timedelta(days=period_days(period))
    while day <= now:
        date_str = day.date().isoformat()
        data_points.append(TrendDataPoint(date=date_str, score=by_date.get(date_str, 0)))
        day += timedelta(days=1)
    return data_points


def _window_trend(
    current_values: List[float],
    previous_values: List[float],
    period: TrendPeriod,
    data_points: List[TrendDataPoint]
) -> PeriodTrend:
    current_avg = _average(current_values)
    previous_avg = _average(previous_values)
    change = current_avg - previous_avg
    change_percent = change / previous_avg * 100 if previous_avg > 0 else 0.0

    if change_percent > PERIOD_TREND_THRESHOLD_PERCENT:
        direction = "up"
    elif change_percent < -PERIOD_TREND_THRESHOLD_PERCENT:
        direction = "down"
    else:
        direction = "stable"

    return PeriodTrend(
        period=period,
        current=round_half_up(current_avg),
        previous=round_half_up(previous_avg),
        change=round_half_up(change),
        change_percent=_round_one_decimal(change_percent),
        direction=direction,
        data_points=data_points,
    )


def _round_one_decimal(value: float) -> float:
    return round_half_up(value * 10) / 10


def calculate_period_trend(
    history: Sequence[Union[VisibilityHistoryPoint, Mapping]],
    period: TrendPeriod = "7d",
    now: Optional[datetime] = None
) -> PeriodTrend:
    """
    Compare the average visibility of the current window with the window
    before it.

    The current window is ``[now - period, now]`` inclusive of both ends; the
    previous window is the same length immediately before it. An empty
    previous window counts as 0 and yields a change percent of 0.
    """
    now = ensure_utc(now or utc_now())
    points = _to_points(history)

    def visibility(point):
        return point.visibility_score

    current_values, previous_values = _split_windows(points, visibility, period, now)
    return _window_trend(
        current_values,
        previous_values,
        period,
        _daily_points(points, visibility, period, now)
    )


def calculate_provider_trends(
    history: Sequence[Union[VisibilityHistoryPoint, Mapping]],
    period: TrendPeriod = "7d",
    now: Optional[datetime] = None
) -> Dict[str, PeriodTrend]:
    """
    Windowed trend of every provider that appears in any record's
    ``provider_scores``.

    A record without a score for a provider contributes 0 to that provider's
    averages and daily points.
    """
    now = ensure_utc(now or utc_now())
    points = _to_points(history)

    providers: Dict[str, None] = {}
    for point in points:
        providers.update(dict.fromkeys(point.provider_scores))

    trends = {}
    for provider in providers:
        def provider_score(point, provider=provider):
            return point.provider_scores.get(provider, 0)

        current_values, previous_values = _split_windows(points, provider_score, period, now)
        trends[provider] = _window_trend(
            current_values,
            previous_values,
            period,
            _daily_points(points, provider_score, period, now)
        )

    logger.debug(f"Provider trends ({period}) for {len(trends)} providers")
    return trends


def calculate_sov_trend(
    history: Sequence[Union[VisibilityHistoryPoint, Mapping]],
    period: TrendPeriod = "7d",
    now: Optional[datetime] = None
) -> Dict[str, SOVTrend]:
    """
    Average share of voice of each competitor in the current and previous
    windows, rounded to one decimal.

    Competitors are taken from every record's ``competitor_sov``; a record
    without a value for a competitor contributes 0.
    """
    now = ensure_utc(now or utc_now())
    points = _to_points(history)

    competitors: Dict[str, None] = {}
    for point in points:
        competitors.update(dict.fromkeys(point.competitor_sov))

    trends = {}
    for competitor in competitors:
        current_values, previous_values = _split_windows(
            points,
            lambda point: point.competitor_sov.get(competitor, 0),
            period,
            now
        )
        current_avg = _average(current_values)
        previous_avg = _average(previous_values)
        trends[competitor] = SOVTrend(
            current=_round_one_decimal(current_avg),
            previous=_round_one_decimal(previous_avg),
            change=_round_one_decimal(current_avg - previous_avg),
        )
    return trends
