"""
Data models and schemas for the AI Exposure Scoring Service.

This module defines the Pydantic models shared by the scoring and query
expansion agents, plus the request/response models of the HTTP API.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Optional, List, Literal


ProviderType = Literal["gemini", "openai", "anthropic", "grok", "perplexity", "google_search"]
Sentiment = Literal["positive", "neutral", "negative"]
ProminenceLevel = Literal["featured", "primary", "secondary", "mentioned"]
TrendDirection = Literal["up", "down", "stable"]
TrendPeriod = Literal["7d", "30d", "90d"]
ExpansionLevel = Literal["minimal", "standard", "comprehensive"]
MentionLikelihood = Literal["high", "medium", "low"]
QueryExpansionType = Literal[
    "intent_variation",
    "specificity",
    "price_focus",
    "alternative",
    "comparison",
    "review",
    "ranking",
    "feature_specific",
]


# Query Expansion Models

class QueryExpansionInput(BaseModel):
    """Base query plus brand context used to derive test prompts."""
    original_query: str = Field(
        ...,
        description="The base query to expand",
        examples=["협업 툴 추천"]
    )
    brand_name: str = Field(
        ...,
        description="Brand whose visibility is being tested",
        examples=["Notion"]
    )
    industry: str = Field(
        "",
        description="Industry of the brand",
        examples=["SaaS"]
    )
    keywords: List[str] = Field(
        default_factory=list,
        description="Brand keywords; the first one fills {keyword} placeholders"
    )
    competitors: List[str] = Field(
        default_factory=list,
        description="Competitor names; the first one fills {competitor} placeholders"
    )
    expansion_level: ExpansionLevel = Field(
        "standard",
        description="How many derived queries to generate (4/8/12)"
    )


class DerivedQuery(BaseModel):
    """A generated test prompt. Immutable once produced."""
    model_config = ConfigDict(frozen=True)

    query: str
    type: QueryExpansionType
    intent: str
    relevance_score: float = Field(..., ge=0.0, le=1.0)
    expected_brand_mention_likelihood: MentionLikelihood = "medium"


class QueryExpansionResult(BaseModel):
    """Derived queries together with a credit estimate for scanning them."""
    original_query: str
    derived_queries: List[DerivedQuery]
    total_queries: int = Field(..., ge=1, description="Derived queries plus the original")
    estimated_credits: int = Field(..., ge=0)
    strategy: Literal["llm", "template"]


class ExpansionPreview(BaseModel):
    """Estimate of an expansion without calling any model."""
    estimated_queries: int
    estimated_credits: int
    query_types: List[QueryExpansionType]


# Exposure Scoring Models

class ExposureDataPoint(BaseModel):
    """One observed signal from a single provider response for one keyword."""
    provider: ProviderType
    mentioned: bool
    position: Optional[int] = Field(None, description="1 = first, higher = later")
    sentiment: Optional[Sentiment] = None
    prominence: Optional[ProminenceLevel] = None
    response_content: Optional[str] = None
    competitors_mentioned: List[str] = Field(
        default_factory=list,
        description="Tracked competitors named in the same response"
    )
    competitor_positions: Dict[str, int] = Field(
        default_factory=dict,
        description="1-based rank of each mentioned competitor, when known"
    )
    error: Optional[str] = Field(None, description="Provider error; errored responses are left out of share of voice")


class ExposureScoreComponents(BaseModel):
    """Rounded sub-scores, each 0-100."""
    mention_frequency: int = Field(..., ge=0, le=100)
    position_score: int = Field(..., ge=0, le=100)
    sentiment_score: int = Field(..., ge=0, le=100)
    prominence_score: int = Field(..., ge=0, le=100)


class ProviderExposure(BaseModel):
    """Per-provider rollup of the data points for one keyword."""
    provider: ProviderType
    score: int = Field(..., ge=0, le=100, description="Mention rate x 100")
    mention_count: int = Field(..., ge=0)
    avg_position: Optional[float] = None
    sentiment: Optional[Sentiment] = None
    prominence: Optional[ProminenceLevel] = None


class ExposureTrend(BaseModel):
    direction: TrendDirection = "stable"
    change_percent: int = 0
    period: TrendPeriod = "7d"
    previous_score: Optional[float] = None


class ExposureScore(BaseModel):
    """Weighted 0-100 exposure of a brand for one keyword."""
    keyword: str
    overall_score: int = Field(..., ge=0, le=100)
    components: ExposureScoreComponents
    breakdown: List[ProviderExposure] = Field(default_factory=list)
    trend: ExposureTrend = Field(default_factory=ExposureTrend)


class HistoricalScore(BaseModel):
    """A previously recorded score, supplied by the caller."""
    date: datetime = Field(..., description="ISO 8601 timestamp; naive values are treated as UTC")
    score: float


class VisibilityHistoryPoint(BaseModel):
    """A recorded brand visibility score, used for windowed trend averages."""
    recorded_at: datetime
    visibility_score: float
    provider_scores: Dict[str, float] = Field(
        default_factory=dict,
        description="Visibility per provider; a missing provider counts as 0"
    )
    competitor_sov: Dict[str, float] = Field(
        default_factory=dict,
        description="Share of voice percentage per competitor"
    )


class TrendDataPoint(BaseModel):
    """One day of a trend chart."""
    date: str = Field(..., description="UTC calendar date, YYYY-MM-DD")
    score: float


class PeriodTrend(BaseModel):
    """Average score of the current window compared to the previous window."""
    period: TrendPeriod
    current: int
    previous: int
    change: int
    change_percent: float
    direction: TrendDirection
    data_points: List[TrendDataPoint] = Field(
        default_factory=list,
        description="Daily scores over the current window, oldest first"
    )


class SOVTrend(BaseModel):
    """Average share of voice of one competitor in the current and previous windows."""
    current: float
    previous: float
    change: float


class ShareOfVoice(BaseModel):
    brand_name: str
    percentage: float = Field(..., ge=0.0, le=100.0)
    mentions_count: int = Field(..., ge=0)
    trend: TrendDirection = "stable"


class CompetitorAnalysis(BaseModel):
    """Mention rollup of one competitor across provider responses."""
    competitor_name: str
    visibility_score: int = Field(..., description="Share of non-errored responses naming the competitor x 100")
    mentions_count: int
    average_position: Optional[float] = None
    provider_mentions: Dict[str, bool]
    sentiment_positive: int = 0
    sentiment_neutral: int = 0
    sentiment_negative: int = 0
    share_of_voice: float = Field(..., description="Percentage of all mentions, two decimals")


class ShareOfVoiceResult(BaseModel):
    brand_sov: ShareOfVoice
    competitor_sov: List[ShareOfVoice]
    total_mentions: int
    competitor_analysis: List[CompetitorAnalysis]


class ScoreTier(BaseModel):
    tier: Literal["excellent", "good", "fair", "poor"]
    label: str


class HeatmapCell(BaseModel):
    provider: ProviderType
    score: int
    trend: TrendDirection


class KeywordHeatmapRow(BaseModel):
    keyword: str
    providers: List[HeatmapCell]
    overall_score: int
    overall_trend: TrendDirection


class KeywordPerformanceComparison(BaseModel):
    keyword: str
    current_score: int
    previous_score: int
    change: int
    change_percent: int
    best_provider: Optional[ProviderType] = None
    worst_provider: Optional[ProviderType] = None


# API Request/Response Models

class ExposureScoreRequest(BaseModel):
    """Request model for the /exposure/score endpoint."""
    keyword: str = Field(..., min_length=1, examples=["협업 툴"])
    results: List[ExposureDataPoint] = Field(default_factory=list)
    history: List[HistoricalScore] = Field(
        default_factory=list,
        description="Previously recorded scores for this keyword"
    )
    period: TrendPeriod = "7d"


class ExposureScoreResponse(BaseModel):
    score: ExposureScore
    tier: ScoreTier


class ExposureTrendRequest(BaseModel):
    """Request model for the /exposure/trend endpoint."""
    current_score: float = Field(..., ge=0.0, le=100.0)
    history: List[HistoricalScore] = Field(default_factory=list)
    period: TrendPeriod = "7d"


class HeatmapRequest(BaseModel):
    """Request model for the /exposure/heatmap endpoint."""
    keywords: List[ExposureScoreRequest]
    providers: List[ProviderType] = Field(
        default_factory=lambda: ["gemini", "openai", "anthropic", "perplexity"]
    )


class CompareRequest(BaseModel):
    """Request model for the /exposure/compare endpoint."""
    current: ExposureScore
    previous: Optional[ExposureScore] = None


class ShareOfVoiceRequest(BaseModel):
    """Request model for the /exposure/share-of-voice endpoint."""
    brand_name: str = Field(..., min_length=1, examples=["Notion"])
    competitors: List[str] = Field(default_factory=list, examples=[["Confluence", "Jira"]])
    results: List[ExposureDataPoint] = Field(default_factory=list)
    previous_brand_sov: Optional[ShareOfVoice] = Field(
        None,
        description="Brand share of voice from the previous scan, used for the trend"
    )


class ShareOfVoiceResponse(BaseModel):
    result: ShareOfVoiceResult
    insights: List[str]


class VisibilityTrendRequest(BaseModel):
    """Request model for the /exposure/visibility-trends endpoint."""
    history: List[VisibilityHistoryPoint] = Field(default_factory=list)
    period: TrendPeriod = "7d"


class VisibilityTrendResponse(BaseModel):
    trend: PeriodTrend
    provider_trends: Dict[str, PeriodTrend]
    sov_trends: Dict[str, SOVTrend]


class ExpansionRequest(QueryExpansionInput):
    """Request model for the /expansion endpoints."""
    use_llm: bool = Field(True, description="Try LLM expansion before templates")
    providers: Optional[List[ProviderType]] = Field(
        None,
        description="Providers the derived queries will be scanned against"
    )


class HealthResponse(BaseModel):
    """Response model for the /health endpoint."""
    status: str = Field(
        ...,
        description="Health status of the system",
        examples=["healthy", "degraded"]
    )
    version: str = Field(
        ...,
        description="Application version",
        examples=["1.0.0"]
    )
    expansion_provider: str = Field(
        ...,
        description="LLM provider used for query expansion",
        examples=["openai"]
    )
    configured_providers: List[str] = Field(
        default_factory=list,
        description="LLM providers with an API key configured"
    )
