"""
Query Expander

Derives test prompts from a base brand query. Two strategies are available:

- Templates: fixed Korean query patterns per category, no API calls
- LLM: a chat model writes context-aware queries; on any failure the
  template expander takes over so callers always get queries back

The functions here are the entry points used by the HTTP routes and by
batch scanners.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from agents.query_expansion_agent.graph import run_query_expansion_workflow
from agents.query_expansion_agent.nodes import generate_llm_queries
from agents.query_expansion_agent.templates import (
    DEFAULT_EXPANSION_CONFIG,
    expand_with_templates,
)
from config.settings import settings
from models.schemas import (
    DerivedQuery,
    ExpansionPreview,
    QueryExpansionInput,
    QueryExpansionResult,
    QueryExpansionType,
)

logger = logging.getLogger(__name__)

# Credits charged per query per provider
CREDIT_COSTS: Dict[str, int] = {
    "gemini": 1,
    "openai": 2,
    "anthropic": 2,
    "grok": 2,
    "perplexity": 2,
    "google_search": 1,
}
DEFAULT_CREDIT_COST = 2

QUERY_TYPE_DISPLAY_NAMES: Dict[str, str] = {
    "intent_variation": "의도 변형",
    "specificity": "구체화",
    "price_focus": "가격/가성비",
    "alternative": "대안 탐색",
    "comparison": "비교",
    "review": "후기/리뷰",
    "ranking": "순위/랭킹",
    "feature_specific": "기능 특화",
}


def expand_with_llm(
    expansion_input: QueryExpansionInput,
    llm=None,
    llm_provider: Optional[str] = None
) -> List[DerivedQuery]:
    """
    Expand a query using an LLM.

    Returns an empty list on any failure; never raises.
    """
    return generate_llm_queries(expansion_input, llm=llm, llm_provider=llm_provider)


def expand_with_llm_and_fallback(
    expansion_input: QueryExpansionInput,
    template_expander: Callable[[QueryExpansionInput], List[DerivedQuery]] = expand_with_templates,
    llm=None,
    llm_provider: Optional[str] = None
) -> List[DerivedQuery]:
    """Expand with the LLM, falling back to ``template_expander`` when it returns nothing."""
    result = run_query_expansion_workflow(
        expansion_input,
        template_expander=template_expander,
        llm=llm,
        llm_provider=llm_provider
    )
    return result["derived_queries"]


def _credits_per_query(providers: Sequence[str]) -> int:
    return sum(CREDIT_COSTS.get(p, DEFAULT_CREDIT_COST) for p in providers)


def expand_queries(
    expansion_input: QueryExpansionInput,
    use_llm: bool = True,
    providers: Optional[Sequence[str]] = None,
    llm=None,
    llm_provider: Optional[str] = None
) -> QueryExpansionResult:
    """
    Expand a query and estimate the credits needed to scan the results.

    Every derived query plus the original is sent to every provider.

    Args:
        expansion_input: Base query and brand context
        use_llm: Try the LLM first (with template fallback); templates only when False
        providers: Providers the queries will be scanned against
        llm: Optional pre-built chat model
        llm_provider: Provider for the LLM when ``llm`` is None

    Returns:
        QueryExpansionResult
    """
    if providers is None:
        providers = settings.DEFAULT_SCAN_PROVIDERS

    if use_llm:
        result = run_query_expansion_workflow(
            expansion_input,
            template_expander=expand_with_templates,
            llm=llm,
            llm_provider=llm_provider
        )
        derived_queries = result["derived_queries"]
        strategy = result["strategy"]
    else:
        derived_queries = expand_with_templates(expansion_input)
        strategy = "template"

    total_queries = len(derived_queries) + 1

    return QueryExpansionResult(
        original_query=expansion_input.original_query,
        derived_queries=derived_queries,
        total_queries=total_queries,
        estimated_credits=total_queries * _credits_per_query(providers),
        strategy=strategy,
    )


def quick_expand(expansion_input: QueryExpansionInput) -> QueryExpansionResult:
    """Expand using templates only (no API calls)."""
    return expand_queries(expansion_input, use_llm=False)


def preview_expansion(
    expansion_input: QueryExpansionInput,
    providers: Optional[Sequence[str]] = None
) -> ExpansionPreview:
    """Estimate query count and credits before the user confirms a scan."""
    if providers is None:
        providers = settings.DEFAULT_SCAN_PROVIDERS

    level = expansion_input.expansion_level
    estimated_queries = DEFAULT_EXPANSION_CONFIG.max_queries(level) + 1

    return ExpansionPreview(
        estimated_queries=estimated_queries,
        estimated_credits=estimated_queries * _credits_per_query(providers),
        query_types=DEFAULT_EXPANSION_CONFIG.types_by_level[level],
    )


def group_queries_by_type(queries: Sequence[DerivedQuery]) -> Dict[QueryExpansionType, List[DerivedQuery]]:
    """Group derived queries by category; every category is present."""
    grouped: Dict[str, List[DerivedQuery]] = {t: [] for t in QUERY_TYPE_DISPLAY_NAMES}
    for query in queries:
        grouped[query.type].append(query)
    return grouped


def get_query_type_display_name(query_type: str) -> str:
    """Korean display name for a category."""
    return QUERY_TYPE_DISPLAY_NAMES.get(query_type, query_type)


def filter_by_relevance(queries: Sequence[DerivedQuery], min_score: float = 0.5) -> List[DerivedQuery]:
    return [q for q in queries if q.relevance_score >= min_score]
