"""
Share of Voice

A brand's share of voice (SOV) is its mention count as a percentage of all
mentions of the brand and its tracked competitors across provider responses.
Responses that errored are left out entirely.
"""

import logging
from typing import Dict, List, Optional, Sequence, Union

from models.schemas import (
    CompetitorAnalysis,
    ExposureDataPoint,
    ShareOfVoice,
    ShareOfVoiceResult,
)
from utils.helpers import round_half_up

logger = logging.getLogger(__name__)

ALL_PROVIDERS = ["gemini", "openai", "anthropic", "grok", "perplexity", "google_search"]

# SOV moves within +/-2 percentage points are reported as stable
SOV_STABLE_THRESHOLD = 2
# A competitor within 5 points of the brand is a close competitor
CLOSE_COMPETITOR_GAP = 5
LOW_SOV_PERCENT = 20


def _percentage(count: int, total: int, decimals: int) -> float:
    if total <= 0:
        return 0
    scale = 10 ** decimals
    return round_half_up(count / total * 100 * scale) / scale


def calculate_share_of_voice(
    brand_name: str,
    competitors: Sequence[str],
    results: Sequence[Union[ExposureDataPoint, dict]]
) -> ShareOfVoiceResult:
    """
    Calculate share of voice for a brand and its competitors.

    Only competitors in ``competitors`` are counted; other names in a
    response's ``competitors_mentioned`` are ignored. Percentages are rounded
    to one decimal.

    Args:
        brand_name: Brand being tracked
        competitors: Tracked competitor names
        results: One data point per provider response

    Returns:
        ShareOfVoiceResult with brand and competitor SOV and a per-competitor analysis
    """
    points = [ExposureDataPoint.model_validate(r) for r in results]
    valid = [p for p in points if not p.error]

    brand_mentions = sum(1 for p in valid if p.mentioned)

    competitor_counts: Dict[str, int] = {c: 0 for c in competitors}
    for point in valid:
        for competitor in point.competitors_mentioned:
            if competitor in competitor_counts:
                competitor_counts[competitor] += 1

    total_mentions = brand_mentions + sum(competitor_counts.values())

    brand_sov = ShareOfVoice(
        brand_name=brand_name,
        percentage=_percentage(brand_mentions, total_mentions, 1),
        mentions_count=brand_mentions,
    )
    competitor_sov = [
        ShareOfVoice(
            brand_name=competitor,
            percentage=_percentage(competitor_counts[competitor], total_mentions, 1),
            mentions_count=competitor_counts[competitor],
        )
        for competitor in competitors
    ]

    logger.debug(f"SOV for '{brand_name}': {brand_sov.percentage}% of {total_mentions} mentions")

    return ShareOfVoiceResult(
        brand_sov=brand_sov,
        competitor_sov=competitor_sov,
        total_mentions=total_mentions,
        competitor_analysis=build_competitor_analysis(competitors, valid),
    )


def build_competitor_analysis(
    competitors: Sequence[str],
    results: Sequence[ExposureDataPoint]
) -> List[CompetitorAnalysis]:
    """
    Per-competitor mention rollup over the non-errored responses.

    Competitor sentiment is not detected separately, so every mention counts
    as neutral. The share of voice here is rounded to two decimals and uses
    every competitor named in a response, tracked or not.
    """
    valid = [r for r in results if not r.error]
    total_mentions = sum(int(r.mentioned) + len(r.competitors_mentioned) for r in valid)

    analysis = []
    for competitor in competitors:
        mentioned_in = [r for r in valid if competitor in r.competitors_mentioned]
        positions = [
            r.competitor_positions[competitor]
            for r in mentioned_in
            if competitor in r.competitor_positions
        ]

        provider_mentions = {provider: False for provider in ALL_PROVIDERS}
        for r in mentioned_in:
            provider_mentions[r.provider] = True

        analysis.append(CompetitorAnalysis(
            competitor_name=competitor,
            visibility_score=round_half_up(len(mentioned_in) / len(valid) * 100) if valid else 0,
            mentions_count=len(mentioned_in),
            average_position=sum(positions) / len(positions) if positions else None,
            provider_mentions=provider_mentions,
            sentiment_neutral=len(mentioned_in),
            share_of_voice=_percentage(len(mentioned_in), total_mentions, 2),
        ))
    return analysis


def compare_sov(current: ShareOfVoice, previous: Optional[ShareOfVoice]) -> ShareOfVoice:
    """Set the trend of ``current`` from the change in percentage points since ``previous``."""
    if previous is None:
        return current.model_copy(update={"trend": "stable"})

    change = current.percentage - previous.percentage
    if change > SOV_STABLE_THRESHOLD:
        trend = "up"
    elif change < -SOV_STABLE_THRESHOLD:
        trend = "down"
    else:
        trend = "stable"
    return current.model_copy(update={"trend": trend})


def generate_sov_insights(brand_sov: ShareOfVoice, competitor_sov: Sequence[ShareOfVoice]) -> List[str]:
    """Korean summary lines about the brand's rank, close competitors and low visibility."""
    insights = []

    ranked_competitors = sorted(competitor_sov, key=lambda s: s.percentage, reverse=True)
    everyone = sorted([brand_sov, *competitor_sov], key=lambda s: s.percentage, reverse=True)
    brand_rank = next(i for i, s in enumerate(everyone) if s.brand_name == brand_sov.brand_name) + 1

    if brand_rank == 1:
        insights.append(f"귀사의 브랜드가 AI 검색 점유율 1위입니다 ({brand_sov.percentage:g}%)")
    else:
        leader = everyone[0]
        gap = abs(leader.percentage - brand_sov.percentage)
        insights.append(
            f"현재 AI 검색 점유율 {brand_rank}위입니다. "
            f"1위 {leader.brand_name}({leader.percentage:g}%)와 "
            f"{gap:.1f}%p 차이가 있습니다."
        )

    closest = next(
        (
            c for c in ranked_competitors
            if abs(c.percentage - brand_sov.percentage) < CLOSE_COMPETITOR_GAP and c.percentage > 0
        ),
        None
    )
    if closest is not None:
        gap = abs(closest.percentage - brand_sov.percentage)
        insights.append(
            f"{closest.brand_name}가 근소한 차이({gap:.1f}%p)로 경쟁 중입니다. 주의가 필요합니다."
        )

    if brand_sov.percentage < LOW_SOV_PERCENT and ranked_competitors:
        insights.append("전체 AI 검색 점유율이 낮습니다. 콘텐츠 최적화를 통해 가시성을 높일 필요가 있습니다.")

    return insights
