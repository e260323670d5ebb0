"""
Exposure Scoring Controller

Handles business logic for keyword exposure scoring and trends.
"""

import logging
from typing import List, Sequence

from agents.exposure_scorer import (
    calculate_exposure_score,
    compare_keyword_performance,
    get_score_tier,
    to_heatmap_data,
)
from agents.share_of_voice import (
    calculate_share_of_voice,
    compare_sov,
    generate_sov_insights,
)
from agents.trend_calculator import (
    calculate_exposure_trend,
    calculate_period_trend,
    calculate_provider_trends,
    calculate_sov_trend,
)
from models.schemas import (
    CompareRequest,
    ExposureScore,
    ExposureScoreRequest,
    ExposureScoreResponse,
    KeywordHeatmapRow,
    KeywordPerformanceComparison,
    ProviderType,
    ShareOfVoiceRequest,
    ShareOfVoiceResponse,
    VisibilityTrendRequest,
    VisibilityTrendResponse,
)

logger = logging.getLogger(__name__)


def score_keyword(request: ExposureScoreRequest) -> ExposureScore:
    """
    Score one keyword and attach its trend against the supplied history.

    Args:
        request: Keyword, provider data points, history and trend period

    Returns:
        ExposureScore with trend populated
    """
    score = calculate_exposure_score(request.keyword, request.results)
    trend = calculate_exposure_trend(score.overall_score, request.history, request.period)
    return score.model_copy(update={"trend": trend})


def score_keyword_with_tier(request: ExposureScoreRequest) -> ExposureScoreResponse:
    score = score_keyword(request)
    logger.info(f"Scored keyword '{score.keyword}': {score.overall_score} ({score.trend.direction})")
    return ExposureScoreResponse(score=score, tier=get_score_tier(score.overall_score))


def build_heatmap(
    requests: Sequence[ExposureScoreRequest],
    providers: Sequence[ProviderType]
) -> List[KeywordHeatmapRow]:
    """Score every keyword and lay the results out as heatmap rows."""
    scores = [score_keyword(r) for r in requests]
    return to_heatmap_data(scores, providers)


def compare_scores(request: CompareRequest) -> KeywordPerformanceComparison:
    return compare_keyword_performance(request.current, request.previous)


def share_of_voice(request: ShareOfVoiceRequest) -> ShareOfVoiceResponse:
    """Share of voice of the brand and its competitors, with the brand trend and insights."""
    result = calculate_share_of_voice(request.brand_name, request.competitors, request.results)
    brand_sov = compare_sov(result.brand_sov, request.previous_brand_sov)
    result = result.model_copy(update={"brand_sov": brand_sov})

    logger.info(
        f"Share of voice for '{request.brand_name}': {brand_sov.percentage}% "
        f"of {result.total_mentions} mentions ({brand_sov.trend})"
    )
    return ShareOfVoiceResponse(
        result=result,
        insights=generate_sov_insights(brand_sov, result.competitor_sov)
    )


def visibility_trends(request: VisibilityTrendRequest) -> VisibilityTrendResponse:
    """Overall, per-provider and competitor share of voice trends over one period."""
    return VisibilityTrendResponse(
        trend=calculate_period_trend(request.history, request.period),
        provider_trends=calculate_provider_trends(request.history, request.period),
        sov_trends=calculate_sov_trend(request.history, request.period),
    )
