"""
Exposure Scorer

Calculates how visibly a brand appears across AI provider responses for a
single keyword. Four signals are combined into a weighted 0-100 score:

- Mention frequency (40%): share of responses that mention the brand
- Position (30%): where the brand ranks inside the responses that mention it
- Sentiment (15%): tone of the mentions
- Prominence (15%): how central the mention is to the response

All weights and lookup tables live in a ``ScoringConfig`` so that alternate
weighting schemes can be scored side by side.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.schemas import (
    ExposureDataPoint,
    ExposureScore,
    ExposureScoreComponents,
    ExposureTrend,
    HeatmapCell,
    KeywordHeatmapRow,
    KeywordPerformanceComparison,
    ProviderExposure,
    ProviderType,
    ScoreTier,
)
from utils.helpers import round_half_up

logger = logging.getLogger(__name__)


class ScoringWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    mention_frequency: float = 0.40
    position_score: float = 0.30
    sentiment_score: float = 0.15
    prominence_score: float = 0.15

    @model_validator(mode="after")
    def _weights_sum_to_one(self):
        total = (
            self.mention_frequency + self.position_score
            + self.sentiment_score + self.prominence_score
        )
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Scoring weights must sum to 1.0, got {total}")
        return self


class ScoringConfig(BaseModel):
    """
    Weights and lookup tables used by the exposure scorer.

    Tables are ordered from the strongest to the weakest value. With the
    ``canonical`` tie-break, a provider's dominant sentiment/prominence ties
    resolve to the value listed first here; with ``first_seen`` the value
    observed first in the data wins.
    """
    model_config = ConfigDict(frozen=True)

    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    position_scores: Dict[int, int] = Field(
        default_factory=lambda: {1: 100, 2: 80, 3: 60, 4: 40, 5: 20}
    )
    min_position_score: int = 20
    sentiment_scores: Dict[str, int] = Field(
        default_factory=lambda: {"positive": 100, "neutral": 50, "negative": 0}
    )
    prominence_scores: Dict[str, int] = Field(
        default_factory=lambda: {"featured": 100, "primary": 80, "secondary": 50, "mentioned": 30}
    )
    # Absence of sentiment is neutral, not negative
    default_sentiment_score: int = 50
    # Absence of prominence scores as a plain mention
    default_prominence_score: int = 30
    tie_break: Literal["canonical", "first_seen"] = "canonical"


DEFAULT_SCORING_CONFIG = ScoringConfig()


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


class ExposureScorer:
    """Computes ``ExposureScore`` objects from provider data points."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_SCORING_CONFIG

    def position_score(self, position: int) -> float:
        """Score a single 1-based rank."""
        if position <= 0:
            return 0
        if position >= 5:
            return self.config.min_position_score
        table_score = self.config.position_scores.get(position)
        if table_score is not None:
            return table_score
        return max(self.config.min_position_score, 100 - (position - 1) * 20)

    def calculate_position_score(self, positions: Iterable[Optional[int]]) -> float:
        valid = [p for p in positions if p is not None]
        if not valid:
            # Mentions without any rank are a real gap, not a neutral value
            return 0
        return _mean([self.position_score(p) for p in valid])

    def calculate_sentiment_score(self, sentiments: Iterable[Optional[str]]) -> float:
        valid = [s for s in sentiments if s is not None]
        if not valid:
            return self.config.default_sentiment_score
        return _mean([
            self.config.sentiment_scores.get(s, self.config.default_sentiment_score)
            for s in valid
        ])

    def calculate_prominence_score(self, prominences: Iterable[Optional[str]]) -> float:
        valid = [p for p in prominences if p is not None]
        if not valid:
            return self.config.default_prominence_score
        return _mean([
            self.config.prominence_scores.get(p, self.config.default_prominence_score)
            for p in valid
        ])

    def score(
        self,
        keyword: str,
        results: Sequence[Union[ExposureDataPoint, dict]]
    ) -> ExposureScore:
        """
        Calculate the overall exposure score for a keyword.

        Args:
            keyword: Keyword the data points were collected for
            results: One data point per provider response

        Returns:
            ExposureScore with rounded components and a provider breakdown
        """
        points = [ExposureDataPoint.model_validate(r) for r in results]

        if not points:
            return self.empty_score(keyword)

        mentioned = [p for p in points if p.mentioned]

        mention_frequency = len(mentioned) / len(points) * 100
        position_score = self.calculate_position_score(p.position for p in mentioned)
        sentiment_score = self.calculate_sentiment_score(p.sentiment for p in mentioned)
        prominence_score = self.calculate_prominence_score(p.prominence for p in mentioned)

        weights = self.config.weights
        overall_score = round_half_up(
            mention_frequency * weights.mention_frequency
            + position_score * weights.position_score
            + sentiment_score * weights.sentiment_score
            + prominence_score * weights.prominence_score
        )

        logger.debug(
            f"Exposure for '{keyword}': {overall_score} "
            f"({len(mentioned)}/{len(points)} mentions)"
        )

        return ExposureScore(
            keyword=keyword,
            overall_score=overall_score,
            components=ExposureScoreComponents(
                mention_frequency=round_half_up(mention_frequency),
                position_score=round_half_up(position_score),
                sentiment_score=round_half_up(sentiment_score),
                prominence_score=round_half_up(prominence_score),
            ),
            breakdown=self.provider_breakdown(points),
            trend=ExposureTrend(),
        )

    def provider_breakdown(self, points: Sequence[ExposureDataPoint]) -> List[ProviderExposure]:
        """Group data points by provider and roll each group up."""
        by_provider: Dict[str, List[ExposureDataPoint]] = {}
        for point in points:
            by_provider.setdefault(point.provider, []).append(point)

        breakdown = []
        for provider, provider_points in by_provider.items():
            mentioned = [p for p in provider_points if p.mentioned]
            positions = [p.position for p in mentioned if p.position is not None]

            breakdown.append(ProviderExposure(
                provider=provider,
                score=round_half_up(len(mentioned) / len(provider_points) * 100),
                mention_count=len(mentioned),
                avg_position=_mean(positions) if positions else None,
                sentiment=self._dominant(
                    [p.sentiment for p in mentioned if p.sentiment is not None],
                    self.config.sentiment_scores
                ),
                prominence=self._dominant(
                    [p.prominence for p in mentioned if p.prominence is not None],
                    self.config.prominence_scores
                ),
            ))

        # Stable sort: equal scores keep first-seen provider order
        breakdown.sort(key=lambda b: b.score, reverse=True)
        return breakdown

    def _dominant(self, values: List[str], table: Dict[str, int]) -> Optional[str]:
        """Majority vote over the observed values."""
        if not values:
            return None
        counts = Counter(values)
        if self.config.tie_break == "first_seen":
            # Counter keeps insertion order and most_common sorts stably
            return counts.most_common(1)[0][0]
        top = max(counts.values())
        order = list(table)
        tied = [v for v in counts if counts[v] == top]
        return min(tied, key=lambda v: order.index(v) if v in order else len(order))

    def empty_score(self, keyword: str) -> ExposureScore:
        """Score for a keyword with no data points."""
        return ExposureScore(
            keyword=keyword,
            overall_score=0,
            components=ExposureScoreComponents(
                mention_frequency=0,
                position_score=0,
                sentiment_score=self.config.default_sentiment_score,
                prominence_score=0,
            ),
            breakdown=[],
            trend=ExposureTrend(),
        )


def calculate_exposure_score(
    keyword: str,
    results: Sequence[Union[ExposureDataPoint, dict]],
    config: Optional[ScoringConfig] = None
) -> ExposureScore:
    """Calculate the exposure score for a keyword with the given (or default) config."""
    return ExposureScorer(config).score(keyword, results)


def to_heatmap_data(
    exposure_scores: Sequence[ExposureScore],
    providers: Sequence[ProviderType]
) -> List[KeywordHeatmapRow]:
    """
    Convert exposure scores to keyword x provider heatmap rows.

    Providers missing from a keyword's breakdown get a score of 0. Each cell
    carries the keyword's overall trend.
    """
    rows = []
    for score in exposure_scores:
        provider_scores = {b.provider: b.score for b in score.breakdown}
        rows.append(KeywordHeatmapRow(
            keyword=score.keyword,
            providers=[
                HeatmapCell(
                    provider=provider,
                    score=provider_scores.get(provider, 0),
                    trend=score.trend.direction,
                )
                for provider in providers
            ],
            overall_score=score.overall_score,
            overall_trend=score.trend.direction,
        ))
    return rows


def get_score_tier(score: float) -> ScoreTier:
    """Map a 0-100 score to a tier with its Korean display label."""
    if score >= 80:
        return ScoreTier(tier="excellent", label="우수")
    if score >= 60:
        return ScoreTier(tier="good", label="양호")
    if score >= 40:
        return ScoreTier(tier="fair", label="보통")
    return ScoreTier(tier="poor", label="미흡")


def compare_keyword_performance(
    current: ExposureScore,
    previous: Optional[ExposureScore]
) -> KeywordPerformanceComparison:
    """Compare a keyword's score with an earlier score (or with zero if none)."""
    current_score = current.overall_score
    previous_score = previous.overall_score if previous else 0
    change = current_score - previous_score
    if previous_score > 0:
        change_percent = round_half_up(change / previous_score * 100)
    else:
        change_percent = 100 if current_score > 0 else 0

    ranked = sorted(current.breakdown, key=lambda b: b.score, reverse=True)

    return KeywordPerformanceComparison(
        keyword=current.keyword,
        current_score=current_score,
        previous_score=previous_score,
        change=change,
        change_percent=change_percent,
        best_provider=ranked[0].provider if ranked else None,
        worst_provider=ranked[-1].provider if ranked else None,
    )
