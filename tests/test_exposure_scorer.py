"""
Tests for the exposure scorer: weighted components, provider breakdown and
the heatmap/tier/comparison helpers.
"""

import pytest

from agents.exposure_scorer import (
    ExposureScorer,
    ScoringConfig,
    ScoringWeights,
    calculate_exposure_score,
    compare_keyword_performance,
    get_score_tier,
    to_heatmap_data,
)
from models.schemas import ExposureDataPoint, ExposureTrend


def _point(provider, mentioned, **kwargs):
    return ExposureDataPoint(provider=provider, mentioned=mentioned, **kwargs)


SAMPLE_RESULTS = [
    _point("openai", True, position=1, sentiment="positive", prominence="featured"),
    _point("gemini", True, position=3, sentiment="neutral", prominence="primary"),
    _point("anthropic", False),
    _point("perplexity", False),
]


def test_empty_results_score_zero_with_neutral_sentiment():
    score = calculate_exposure_score("협업 툴", [])

    assert score.keyword == "협업 툴"
    assert score.overall_score == 0
    assert score.components.mention_frequency == 0
    assert score.components.position_score == 0
    assert score.components.sentiment_score == 50
    assert score.components.prominence_score == 0
    assert score.breakdown == []
    assert score.trend.direction == "stable"
    assert score.trend.previous_score is None


def test_mention_frequency_is_share_of_mentioned_results():
    results = [_point("openai", True)] * 3 + [_point("gemini", False)] * 2

    score = calculate_exposure_score("crm", results)

    assert score.components.mention_frequency == 60
    # No positions among mentions is a gap (0); sentiment/prominence fall back to 50/30
    assert score.components.position_score == 0
    assert score.components.sentiment_score == 50
    assert score.components.prominence_score == 30
    assert score.overall_score == 36


@pytest.mark.parametrize("position,expected", [
    (1, 100),
    (2, 80),
    (3, 60),
    (4, 40),
    (5, 20),
    (7, 20),
    (0, 0),
    (-1, 0),
])
def test_position_table(position, expected):
    score = calculate_exposure_score("crm", [_point("openai", True, position=position)])

    assert score.components.position_score == expected


def test_single_first_place_mention():
    score = calculate_exposure_score("crm", [_point("openai", True, position=1)])

    # 100*0.40 + 100*0.30 + 50*0.15 + 30*0.15
    assert score.overall_score == 82


def test_positions_of_unmentioned_results_are_ignored():
    results = [
        _point("openai", True, position=2),
        _point("gemini", False, position=1),
    ]

    score = calculate_exposure_score("crm", results)

    assert score.components.position_score == 80


def test_weighted_overall_score_uses_unrounded_components():
    score = calculate_exposure_score("crm", SAMPLE_RESULTS)

    assert score.components.mention_frequency == 50
    assert score.components.position_score == 80
    assert score.components.sentiment_score == 75
    assert score.components.prominence_score == 90
    # 20 + 24 + 11.25 + 13.5 = 68.75
    assert score.overall_score == 69


def test_overall_score_rounds_half_up():
    results = [_point("openai", True, position=5, sentiment="negative", prominence="mentioned")]

    score = calculate_exposure_score("crm", results)

    # 40 + 6 + 0 + 4.5 = 50.5
    assert score.overall_score == 51


def test_provider_breakdown_sorted_by_score():
    results = [
        _point("anthropic", False),
        _point("openai", True, position=1, sentiment="positive", prominence="featured"),
        _point("openai", True, position=3, sentiment="positive", prominence="featured"),
        _point("gemini", True, position=2),
        _point("gemini", False),
    ]

    score = calculate_exposure_score("crm", results)
    breakdown = {b.provider: b for b in score.breakdown}

    assert [b.provider for b in score.breakdown] == ["openai", "gemini", "anthropic"]
    assert breakdown["openai"].score == 100
    assert breakdown["openai"].mention_count == 2
    assert breakdown["openai"].avg_position == 2.0
    assert breakdown["openai"].sentiment == "positive"
    assert breakdown["openai"].prominence == "featured"
    assert breakdown["gemini"].score == 50
    assert breakdown["gemini"].avg_position == 2.0
    assert breakdown["gemini"].sentiment is None
    assert breakdown["gemini"].prominence is None
    assert breakdown["anthropic"].score == 0
    assert breakdown["anthropic"].mention_count == 0
    assert breakdown["anthropic"].avg_position is None


def test_breakdown_ties_keep_first_seen_provider_order():
    results = [_point("perplexity", True), _point("openai", True), _point("gemini", True)]

    score = calculate_exposure_score("crm", results)

    assert [b.provider for b in score.breakdown] == ["perplexity", "openai", "gemini"]


def test_majority_vote_tie_prefers_canonical_order_by_default():
    results = [
        _point("openai", True, sentiment="negative", prominence="secondary"),
        _point("openai", True, sentiment="positive", prominence="featured"),
    ]

    provider = calculate_exposure_score("crm", results).breakdown[0]

    assert provider.sentiment == "positive"
    assert provider.prominence == "featured"


def test_majority_vote_tie_first_seen_policy():
    results = [
        _point("openai", True, sentiment="negative", prominence="secondary"),
        _point("openai", True, sentiment="positive", prominence="featured"),
    ]
    config = ScoringConfig(tie_break="first_seen")

    provider = calculate_exposure_score("crm", results, config).breakdown[0]

    assert provider.sentiment == "negative"
    assert provider.prominence == "secondary"


def test_majority_vote_without_tie():
    results = [
        _point("openai", True, sentiment="negative"),
        _point("openai", True, sentiment="neutral"),
        _point("openai", True, sentiment="neutral"),
    ]

    for tie_break in ("canonical", "first_seen"):
        config = ScoringConfig(tie_break=tie_break)
        assert calculate_exposure_score("crm", results, config).breakdown[0].sentiment == "neutral"


def test_scores_stay_within_bounds():
    sentiments = [None, "positive", "neutral", "negative"]
    prominences = [None, "featured", "primary", "secondary", "mentioned"]
    positions = [None, -3, 0, 1, 2, 3, 4, 5, 12]

    for i, sentiment in enumerate(sentiments):
        for j, prominence in enumerate(prominences):
            for k, position in enumerate(positions):
                results = [
                    _point("openai", (i + j + k) % 2 == 0, position=position,
                           sentiment=sentiment, prominence=prominence),
                    _point("gemini", True, position=position, sentiment=sentiment),
                    _point("grok", False),
                ]
                score = calculate_exposure_score("crm", results)

                assert 0 <= score.overall_score <= 100
                for value in score.components.model_dump().values():
                    assert 0 <= value <= 100
                for provider in score.breakdown:
                    assert 0 <= provider.score <= 100


def test_scoring_is_pure():
    first = calculate_exposure_score("crm", SAMPLE_RESULTS)
    second = calculate_exposure_score("crm", SAMPLE_RESULTS)

    assert first.model_dump_json() == second.model_dump_json()


def test_accepts_plain_dicts():
    results = [{"provider": "openai", "mentioned": True, "position": 1}]

    assert calculate_exposure_score("crm", results).overall_score == 82


def test_custom_weights():
    config = ScoringConfig(weights=ScoringWeights(
        mention_frequency=1.0,
        position_score=0.0,
        sentiment_score=0.0,
        prominence_score=0.0,
    ))

    score = ExposureScorer(config).score("crm", SAMPLE_RESULTS)

    assert score.overall_score == 50


def test_weights_must_sum_to_one():
    with pytest.raises(ValueError):
        ScoringWeights(mention_frequency=0.5, position_score=0.5, sentiment_score=0.5, prominence_score=0.0)


def test_heatmap_fills_missing_providers_with_zero():
    score = calculate_exposure_score("crm", SAMPLE_RESULTS)
    score = score.model_copy(update={"trend": ExposureTrend(direction="up", change_percent=20)})

    rows = to_heatmap_data([score], ["openai", "anthropic", "grok"])

    assert len(rows) == 1
    row = rows[0]
    assert row.keyword == "crm"
    assert row.overall_score == score.overall_score
    assert row.overall_trend == "up"
    assert [(c.provider, c.score, c.trend) for c in row.providers] == [
        ("openai", 100, "up"),
        ("anthropic", 0, "up"),
        ("grok", 0, "up"),
    ]


@pytest.mark.parametrize("score,tier,label", [
    (95, "excellent", "우수"),
    (80, "excellent", "우수"),
    (79, "good", "양호"),
    (60, "good", "양호"),
    (40, "fair", "보통"),
    (39, "poor", "미흡"),
    (0, "poor", "미흡"),
])
def test_score_tiers(score, tier, label):
    result = get_score_tier(score)

    assert result.tier == tier
    assert result.label == label


def test_compare_keyword_performance():
    current = calculate_exposure_score("crm", SAMPLE_RESULTS)
    previous = calculate_exposure_score("crm", [_point("openai", True)] + [_point("gemini", False)] * 3)

    comparison = compare_keyword_performance(current, previous)

    # previous: 25*0.4 + 0 + 7.5 + 4.5 = 22
    assert comparison.previous_score == 22
    assert comparison.current_score == 69
    assert comparison.change == 47
    assert comparison.change_percent == 214
    assert comparison.best_provider == "openai"
    assert comparison.worst_provider == "perplexity"


def test_compare_without_previous_score():
    current = calculate_exposure_score("crm", SAMPLE_RESULTS)

    comparison = compare_keyword_performance(current, None)

    assert comparison.previous_score == 0
    assert comparison.change_percent == 100


def test_compare_empty_breakdown():
    comparison = compare_keyword_performance(calculate_exposure_score("crm", []), None)

    assert comparison.change_percent == 0
    assert comparison.best_provider is None
    assert comparison.worst_provider is None
