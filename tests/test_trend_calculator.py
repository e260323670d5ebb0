"""
Tests for exposure trends and windowed visibility trends.
"""

from datetime import datetime, timedelta, timezone

import pytest

from agents.trend_calculator import (
    calculate_exposure_trend,
    calculate_period_trend,
    calculate_provider_trends,
    calculate_sov_trend,
    period_days,
)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def _days_ago(days):
    return (NOW - timedelta(days=days)).isoformat().replace("+00:00", "Z")


def test_rising_score_against_older_history():
    history = [{"date": _days_ago(10), "score": 50}]

    trend = calculate_exposure_trend(80, history, "7d", now=NOW)

    assert trend.previous_score == 50
    assert trend.change_percent == 60
    assert trend.direction == "up"
    assert trend.period == "7d"


def test_no_history_old_enough_is_stable():
    history = [{"date": _days_ago(3), "score": 10}]

    trend = calculate_exposure_trend(80, history, "7d", now=NOW)

    assert trend.direction == "stable"
    assert trend.change_percent == 0
    assert trend.previous_score is None


def test_empty_history_is_stable():
    trend = calculate_exposure_trend(80, [], "30d", now=NOW)

    assert trend.direction == "stable"
    assert trend.previous_score is None
    assert trend.period == "30d"


def test_picks_most_recent_entry_before_cutoff():
    history = [
        {"date": _days_ago(20), "score": 30},
        {"date": _days_ago(2), "score": 90},
        {"date": _days_ago(8), "score": 60},
    ]

    trend = calculate_exposure_trend(45, history, "7d", now=NOW)

    assert trend.previous_score == 60
    assert trend.change_percent == -25
    assert trend.direction == "down"


def test_entry_exactly_at_cutoff_counts():
    history = [{"date": _days_ago(30), "score": 40}]

    trend = calculate_exposure_trend(50, history, "30d", now=NOW)

    assert trend.previous_score == 40
    assert trend.change_percent == 25


def test_small_change_is_stable():
    history = [{"date": _days_ago(10), "score": 50}]

    trend = calculate_exposure_trend(52, history, "7d", now=NOW)

    assert trend.change_percent == 4
    assert trend.direction == "stable"


def test_zero_previous_score():
    history = [{"date": _days_ago(10), "score": 0}]

    rising = calculate_exposure_trend(10, history, "7d", now=NOW)
    flat = calculate_exposure_trend(0, history, "7d", now=NOW)

    assert rising.change_percent == 100
    assert rising.direction == "up"
    assert flat.change_percent == 0
    assert flat.direction == "stable"


def test_naive_dates_are_treated_as_utc():
    history = [{"date": "2024-06-01T12:00:00", "score": 50}]

    trend = calculate_exposure_trend(25, history, "7d", now=NOW)

    assert trend.previous_score == 50
    assert trend.direction == "down"


def test_ninety_day_period():
    history = [{"date": _days_ago(60), "score": 20}, {"date": _days_ago(100), "score": 40}]

    trend = calculate_exposure_trend(60, history, "90d", now=NOW)

    assert trend.previous_score == 40
    assert trend.change_percent == 50


def test_unknown_period():
    assert period_days("7d") == 7
    assert period_days("90d") == 90
    with pytest.raises(ValueError):
        period_days("1y")


def test_period_trend_compares_window_averages():
    history = [
        {"recorded_at": NOW - timedelta(days=2), "visibility_score": 60},
        {"recorded_at": NOW - timedelta(days=5), "visibility_score": 80},
        {"recorded_at": NOW - timedelta(days=10), "visibility_score": 50},
        {"recorded_at": NOW - timedelta(days=30), "visibility_score": 5},
    ]

    trend = calculate_period_trend(history, "7d", now=NOW)

    assert trend.current == 70
    assert trend.previous == 50
    assert trend.change == 20
    assert trend.change_percent == 40.0
    assert trend.direction == "up"


def test_period_trend_without_previous_window():
    history = [{"recorded_at": NOW - timedelta(days=1), "visibility_score": 70}]

    trend = calculate_period_trend(history, "7d", now=NOW)

    assert trend.previous == 0
    assert trend.change_percent == 0.0
    assert trend.direction == "stable"


def test_period_trend_small_drop_is_stable():
    history = [
        {"recorded_at": NOW - timedelta(days=1), "visibility_score": 99},
        {"recorded_at": NOW - timedelta(days=8), "visibility_score": 100},
    ]

    trend = calculate_period_trend(history, "7d", now=NOW)

    assert trend.change_percent == -1.0
    assert trend.direction == "stable"


def test_period_trend_daily_data_points():
    history = [
        {"recorded_at": NOW - timedelta(days=2), "visibility_score": 60},
        {"recorded_at": NOW - timedelta(days=2, hours=3), "visibility_score": 40},
        {"recorded_at": NOW - timedelta(days=5), "visibility_score": 80},
        {"recorded_at": NOW - timedelta(days=20), "visibility_score": 10},
    ]

    trend = calculate_period_trend(history, "7d", now=NOW)

    assert [p.date for p in trend.data_points] == [
        "2024-06-08", "2024-06-09", "2024-06-10", "2024-06-11",
        "2024-06-12", "2024-06-13", "2024-06-14", "2024-06-15",
    ]
    scores = {p.date: p.score for p in trend.data_points}
    # Latest record of the day wins; days without records are 0
    assert scores["2024-06-13"] == 60
    assert scores["2024-06-10"] == 80
    assert scores["2024-06-15"] == 0


def test_period_trend_thirty_day_series_length():
    trend = calculate_period_trend([], "30d", now=NOW)

    assert len(trend.data_points) == 31
    assert all(p.score == 0 for p in trend.data_points)


def test_provider_trends():
    history = [
        {"recorded_at": NOW - timedelta(days=1), "visibility_score": 60,
         "provider_scores": {"openai": 80, "gemini": 40}},
        {"recorded_at": NOW - timedelta(days=3), "visibility_score": 30,
         "provider_scores": {"openai": 60}},
        {"recorded_at": NOW - timedelta(days=10), "visibility_score": 50,
         "provider_scores": {"openai": 50, "gemini": 50}},
    ]

    trends = calculate_provider_trends(history, "7d", now=NOW)

    assert list(trends) == ["openai", "gemini"]

    openai = trends["openai"]
    assert (openai.current, openai.previous, openai.change) == (70, 50, 20)
    assert openai.change_percent == 40.0
    assert openai.direction == "up"

    # A record without a gemini score counts as 0
    gemini = trends["gemini"]
    assert (gemini.current, gemini.previous, gemini.change) == (20, 50, -30)
    assert gemini.change_percent == -60.0
    assert gemini.direction == "down"

    gemini_points = {p.date: p.score for p in gemini.data_points}
    assert gemini_points["2024-06-14"] == 40
    assert gemini_points["2024-06-12"] == 0
    assert len(gemini.data_points) == 8


def test_provider_trends_without_provider_scores():
    history = [{"recorded_at": NOW - timedelta(days=1), "visibility_score": 60}]

    assert calculate_provider_trends(history, "7d", now=NOW) == {}


def test_sov_trend_rounds_to_one_decimal():
    history = [
        {"recorded_at": NOW - timedelta(days=1), "visibility_score": 60,
         "competitor_sov": {"Confluence": 30.0, "Jira": 10}},
        {"recorded_at": NOW - timedelta(days=2), "visibility_score": 60,
         "competitor_sov": {"Confluence": 35.5}},
        {"recorded_at": NOW - timedelta(days=9), "visibility_score": 60,
         "competitor_sov": {"Confluence": 20}},
    ]

    trends = calculate_sov_trend(history, "7d", now=NOW)

    confluence = trends["Confluence"]
    assert (confluence.current, confluence.previous, confluence.change) == (32.8, 20.0, 12.8)

    jira = trends["Jira"]
    assert (jira.current, jira.previous, jira.change) == (5.0, 0.0, 5.0)


def test_sov_trend_empty_history():
    assert calculate_sov_trend([], "30d", now=NOW) == {}
