"""
Exposure Scoring Routes

Endpoints for keyword exposure scores, trends, heatmaps and comparisons.
"""

from typing import List

from fastapi import APIRouter
from models.schemas import (
    CompareRequest,
    ExposureScoreRequest,
    ExposureScoreResponse,
    ExposureTrend,
    ExposureTrendRequest,
    HeatmapRequest,
    KeywordHeatmapRow,
    KeywordPerformanceComparison,
    ShareOfVoiceRequest,
    ShareOfVoiceResponse,
    VisibilityTrendRequest,
    VisibilityTrendResponse,
)

from agents.trend_calculator import calculate_exposure_trend
from src.controllers.exposure_controller import (
    build_heatmap,
    compare_scores,
    score_keyword_with_tier,
    share_of_voice,
    visibility_trends,
)


router = APIRouter(prefix="/exposure", tags=["Exposure Scoring"])


@router.post("/score", response_model=ExposureScoreResponse)
def score_exposure(request: ExposureScoreRequest) -> ExposureScoreResponse:
    """
    Calculate the exposure score of one keyword.

    Example:
        POST /exposure/score
        {
            "keyword": "협업 툴",
            "results": [
                {"provider": "openai", "mentioned": true, "position": 1, "sentiment": "positive"},
                {"provider": "gemini", "mentioned": false}
            ],
            "history": [{"date": "2024-05-01T00:00:00Z", "score": 40}],
            "period": "7d"
        }
    """
    return score_keyword_with_tier(request)


@router.post("/trend", response_model=ExposureTrend)
def exposure_trend(request: ExposureTrendRequest) -> ExposureTrend:
    """Compare a current score with the supplied history."""
    return calculate_exposure_trend(request.current_score, request.history, request.period)


@router.post("/heatmap", response_model=List[KeywordHeatmapRow])
def exposure_heatmap(request: HeatmapRequest) -> List[KeywordHeatmapRow]:
    """Score several keywords and return a keyword x provider grid."""
    return build_heatmap(request.keywords, request.providers)


@router.post("/compare", response_model=KeywordPerformanceComparison)
def compare_exposure(request: CompareRequest) -> KeywordPerformanceComparison:
    """Compare a keyword's current score with an earlier one."""
    return compare_scores(request)


@router.post("/share-of-voice", response_model=ShareOfVoiceResponse)
def exposure_share_of_voice(request: ShareOfVoiceRequest) -> ShareOfVoiceResponse:
    """
    Share of voice of a brand against its competitors.

    Example:
        POST /exposure/share-of-voice
        {
            "brand_name": "Notion",
            "competitors": ["Confluence"],
            "results": [
                {"provider": "openai", "mentioned": true, "competitors_mentioned": ["Confluence"]},
                {"provider": "gemini", "mentioned": false, "competitors_mentioned": ["Confluence"]}
            ]
        }
    """
    return share_of_voice(request)


@router.post("/visibility-trends", response_model=VisibilityTrendResponse)
def exposure_visibility_trends(request: VisibilityTrendRequest) -> VisibilityTrendResponse:
    """Windowed visibility trends: overall, per provider and competitor share of voice."""
    return visibility_trends(request)
