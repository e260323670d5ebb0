"""
Template-based query expansion.

Derived queries are produced by filling Korean query templates with the
brand, keyword and competitor of the input. No model calls are made, so the
template expander is deterministic and always available as a fallback.
"""

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.schemas import (
    DerivedQuery,
    ExpansionLevel,
    MentionLikelihood,
    QueryExpansionInput,
    QueryExpansionType,
)

logger = logging.getLogger(__name__)


class TemplateExpansionConfig(BaseModel):
    """Templates for one expansion category."""
    model_config = ConfigDict(frozen=True)

    type: QueryExpansionType
    templates: List[str]
    intent: str
    likelihood: MentionLikelihood


EXPANSION_TEMPLATES: List[TemplateExpansionConfig] = [
    TemplateExpansionConfig(
        type="intent_variation",
        templates=[
            "{query}",
            "{query} 비교해줘",
            "{query} 알려줘",
            "{query} 설명해줘",
        ],
        intent="의도 변형 - 같은 목적의 다른 표현",
        likelihood="high",
    ),
    TemplateExpansionConfig(
        type="specificity",
        templates=[
            "스타트업용 {keyword} 추천",
            "대기업용 {keyword} 추천",
            "초보자를 위한 {keyword}",
            "전문가용 {keyword}",
            "소규모 팀을 위한 {keyword}",
        ],
        intent="구체화 - 특정 사용 사례",
        likelihood="medium",
    ),
    TemplateExpansionConfig(
        type="price_focus",
        templates=[
            "가성비 좋은 {keyword}",
            "저렴한 {keyword} 추천",
            "무료 {keyword} 있어?",
            "{keyword} 가격 비교",
            "합리적인 가격의 {keyword}",
        ],
        intent="가격 관점 - 비용 중심 검색",
        likelihood="medium",
    ),
    TemplateExpansionConfig(
        type="alternative",
        templates=[
            "{brand} 대안 추천해줘",
            "{brand} 대신 쓸만한 거 있어?",
            "{brand} 말고 다른 {keyword}",
            "{brand} 비슷한 서비스",
        ],
        intent="대안 탐색 - 경쟁사 발견 기회",
        likelihood="high",
    ),
    TemplateExpansionConfig(
        type="comparison",
        templates=[
            "{brand} vs {competitor} 비교",
            "{brand}랑 {competitor} 뭐가 나아?",
            "{brand} {competitor} 차이점",
            "{competitor}보다 {brand}가 나은 점",
        ],
        intent="비교 쿼리 - 경쟁사 대비 위치",
        likelihood="high",
    ),
    TemplateExpansionConfig(
        type="review",
        templates=[
            "{brand} 사용 후기",
            "{brand} 실제 사용해본 사람",
            "{brand} 장단점",
            "{brand} 평가",
            "{brand} 써본 경험",
        ],
        intent="후기 쿼리 - 사회적 증거",
        likelihood="high",
    ),
    TemplateExpansionConfig(
        type="ranking",
        templates=[
            "2024년 {keyword} 순위",
            "{keyword} 1위",
            "최고의 {keyword} top 5",
            "인기 {keyword} 순위",
            "{keyword} 베스트",
        ],
        intent="순위 쿼리 - 권위 있는 위치",
        likelihood="medium",
    ),
    TemplateExpansionConfig(
        type="feature_specific",
        templates=[
            "협업 기능 좋은 {keyword}",
            "{keyword} 보안 좋은 거",
            "사용하기 쉬운 {keyword}",
            "기능 많은 {keyword}",
            "빠른 {keyword}",
        ],
        intent="기능 특화 - 특정 기능 관심",
        likelihood="medium",
    ),
]

ALL_TYPES_BY_PRIORITY: List[QueryExpansionType] = [
    "intent_variation",
    "comparison",
    "review",
    "ranking",
    "alternative",
    "price_focus",
    "specificity",
    "feature_specific",
]


class ExpansionConfig(BaseModel):
    """Template tables, per-level limits and relevance weights for expansion."""
    model_config = ConfigDict(frozen=True)

    templates: List[TemplateExpansionConfig] = Field(
        default_factory=lambda: list(EXPANSION_TEMPLATES)
    )
    queries_per_level: Dict[str, int] = Field(
        default_factory=lambda: {"minimal": 4, "standard": 8, "comprehensive": 12}
    )
    # Categories per level, in fill priority order. Comprehensive only
    # raises the cap over standard.
    types_by_level: Dict[str, List[QueryExpansionType]] = Field(
        default_factory=lambda: {
            "minimal": ["intent_variation", "comparison", "review", "ranking"],
            "standard": list(ALL_TYPES_BY_PRIORITY),
            "comprehensive": list(ALL_TYPES_BY_PRIORITY),
        }
    )
    base_relevance: Dict[str, float] = Field(
        default_factory=lambda: {
            "intent_variation": 0.95,
            "comparison": 0.90,
            "review": 0.85,
            "ranking": 0.80,
            "alternative": 0.75,
            "price_focus": 0.70,
            "specificity": 0.65,
            "feature_specific": 0.60,
        }
    )
    default_relevance: float = 0.5
    context_boost: float = 0.05
    generic_competitor: str = "경쟁사"

    def template_config(self, query_type: str) -> Optional[TemplateExpansionConfig]:
        return next((t for t in self.templates if t.type == query_type), None)

    def max_queries(self, level: ExpansionLevel) -> int:
        return self.queries_per_level[level]


DEFAULT_EXPANSION_CONFIG = ExpansionConfig()


class TemplateExpander:
    """Generates derived queries from the configured template tables."""

    def __init__(self, config: Optional[ExpansionConfig] = None):
        self.config = config or DEFAULT_EXPANSION_CONFIG

    def __call__(self, expansion_input: QueryExpansionInput) -> List[DerivedQuery]:
        return self.expand(expansion_input)

    def fill_template(self, template: str, expansion_input: QueryExpansionInput) -> str:
        """Replace {query}, {brand}, {keyword} and {competitor} placeholders."""
        keyword = expansion_input.keywords[0] if expansion_input.keywords else expansion_input.original_query
        competitor = (
            expansion_input.competitors[0]
            if expansion_input.competitors
            else self.config.generic_competitor
        )
        return (
            template
            .replace("{query}", expansion_input.original_query)
            .replace("{brand}", expansion_input.brand_name)
            .replace("{keyword}", keyword)
            .replace("{competitor}", competitor)
        )

    def relevance_score(self, query_type: str, expansion_input: QueryExpansionInput) -> float:
        score = self.config.base_relevance.get(query_type, self.config.default_relevance)

        if query_type == "comparison" and expansion_input.competitors:
            score += self.config.context_boost

        if query_type in ("specificity", "feature_specific") and expansion_input.keywords:
            score += self.config.context_boost

        return min(round(score, 4), 1.0)

    def expand(self, expansion_input: QueryExpansionInput) -> List[DerivedQuery]:
        """
        Generate derived queries for the input's expansion level.

        Categories are filled one at a time in priority order until the
        level's cap is reached, so at small caps the later categories may not
        appear at all. The result is sorted by relevance, highest first.
        """
        level = expansion_input.expansion_level
        max_queries = self.config.max_queries(level)
        original = expansion_input.original_query.lower()

        derived_queries: List[DerivedQuery] = []
        used_queries = set()

        for query_type in self.config.types_by_level[level]:
            if len(derived_queries) >= max_queries:
                break

            category = self.config.template_config(query_type)
            if category is None:
                continue

            for template in category.templates:
                if len(derived_queries) >= max_queries:
                    break

                query = self.fill_template(template, expansion_input)
                query_key = query.lower()

                if query_key in used_queries or query_key == original:
                    continue
                used_queries.add(query_key)

                derived_queries.append(DerivedQuery(
                    query=query,
                    type=category.type,
                    intent=category.intent,
                    relevance_score=self.relevance_score(category.type, expansion_input),
                    expected_brand_mention_likelihood=category.likelihood,
                ))

        derived_queries.sort(key=lambda q: q.relevance_score, reverse=True)

        logger.info(f"✓ Template expansion produced {len(derived_queries)} queries ({level})")
        return derived_queries


def expand_with_templates(
    expansion_input: QueryExpansionInput,
    config: Optional[ExpansionConfig] = None
) -> List[DerivedQuery]:
    """Generate derived queries using templates."""
    return TemplateExpander(config).expand(expansion_input)


def get_available_expansion_types(config: Optional[ExpansionConfig] = None) -> List[QueryExpansionType]:
    """All categories that have templates."""
    return [t.type for t in (config or DEFAULT_EXPANSION_CONFIG).templates]


def get_template_config(
    query_type: str,
    config: Optional[ExpansionConfig] = None
) -> Optional[TemplateExpansionConfig]:
    return (config or DEFAULT_EXPANSION_CONFIG).template_config(query_type)
