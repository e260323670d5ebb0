"""
Utility functions for query expansion.
"""

import json
import logging
from typing import Dict, List, Optional

from pydantic import ValidationError

from agents.query_expansion_agent.models import LLMExpansionItem, LLMExpansionResponse
from models.schemas import DerivedQuery, QueryExpansionInput, QueryExpansionType

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an SEO/AEO (Answer Engine Optimization) expert specializing in Korean market.
Your task is to generate derived queries that will help test a brand's visibility across AI assistants.

You must generate queries in KOREAN language.

For each query, categorize it into one of these types:
- intent_variation: Same intent, different phrasing
- specificity: More specific use case (e.g., "for startups")
- price_focus: Price/value oriented
- alternative: Looking for alternatives to a brand
- comparison: Comparing brands directly
- review: Seeking reviews/experiences
- ranking: Looking for rankings/best lists
- feature_specific: Specific feature focused

Always return valid JSON with the exact schema requested."""

QUERY_TYPE_MAP: Dict[str, QueryExpansionType] = {
    "intent_variation": "intent_variation",
    "specificity": "specificity",
    "price_focus": "price_focus",
    "alternative": "alternative",
    "comparison": "comparison",
    "review": "review",
    "ranking": "ranking",
    "feature_specific": "feature_specific",
    # Common synonyms
    "intent": "intent_variation",
    "specific": "specificity",
    "price": "price_focus",
    "alternatives": "alternative",
    "compare": "comparison",
    "reviews": "review",
    "rankings": "ranking",
    "feature": "feature_specific",
}

LIKELIHOODS = ("high", "medium", "low")


def build_user_prompt(expansion_input: QueryExpansionInput, num_queries: int) -> str:
    """Build the user prompt asking for ``num_queries`` derived queries as JSON."""
    keywords = ", ".join(expansion_input.keywords) or "None"
    competitors = ", ".join(expansion_input.competitors) or "None"

    return f"""Generate {num_queries} derived queries for brand visibility testing.

Original Query: "{expansion_input.original_query}"
Brand Name: {expansion_input.brand_name}
Industry: {expansion_input.industry}
Keywords: {keywords}
Competitors: {competitors}

Requirements:
1. Generate diverse query types (recommendation, comparison, review, ranking, alternative, etc.)
2. All queries must be in Korean
3. Include queries that:
   - Directly ask for recommendations
   - Compare the brand with competitors
   - Ask for rankings/top lists
   - Seek reviews/experiences
   - Look for alternatives
   - Focus on pricing/value
   - Target specific use cases
4. Prioritize queries where the brand is likely to be mentioned
5. Order the queries from most to least relevant

Return JSON in this exact format:
{{
  "queries": [
    {{
      "query": "Generated query in Korean",
      "type": "query_type",
      "intent": "Brief description of search intent in Korean",
      "expectedBrandMentionLikelihood": "high" | "medium" | "low"
    }}
  ]
}}"""


def extract_json_object(text: str) -> Optional[dict]:
    """Return the first brace-delimited JSON object in the text, ignoring surrounding prose."""
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            obj, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(obj, dict):
            return obj
        start = text.find("{", start + 1)
    return None


def parse_expansion_response(text: str) -> Optional[LLMExpansionResponse]:
    """
    Parse and validate the model's response.

    Returns:
        LLMExpansionResponse, or None when no JSON object with a ``queries``
        list can be found
    """
    if not text:
        return None

    obj = extract_json_object(text)
    if obj is None:
        logger.error("No JSON object found in expansion response")
        return None

    try:
        return LLMExpansionResponse.model_validate(obj)
    except ValidationError as e:
        logger.error(f"Invalid expansion response: {e.error_count()} validation error(s)")
        return None


def map_query_type(query_type: Optional[str]) -> QueryExpansionType:
    """Map the model's free-text type to a category; unknown types become intent_variation."""
    if not query_type:
        return "intent_variation"
    return QUERY_TYPE_MAP.get(query_type.strip().lower(), "intent_variation")


def relevance_from_position(index: int, total: int) -> float:
    """Linear decay from 1.0 to 0.5 by position in the model's list."""
    if total <= 0:
        return 0.5
    return max(0.5, 1.0 - (index / total) * 0.5)


def to_derived_queries(response: LLMExpansionResponse, num_queries: int) -> List[DerivedQuery]:
    """
    Convert parsed model output into DerivedQuery objects.

    Items that are not objects with a non-empty ``query`` are skipped. The
    model is asked to order queries by relevance, so relevance is assigned
    from each item's position in the model's list; skipped items still
    occupy their position.
    """
    items = []
    for index, raw in enumerate(response.queries):
        try:
            item = LLMExpansionItem.model_validate(raw)
        except ValidationError:
            logger.warning(f"Skipping invalid expansion item: {str(raw)[:100]}")
            continue
        if item.query.strip():
            items.append((index, item))

    derived = []
    for index, item in items:
        likelihood = (item.expectedBrandMentionLikelihood or "").lower()
        derived.append(DerivedQuery(
            query=item.query.strip(),
            type=map_query_type(item.type),
            intent=item.intent or "",
            relevance_score=relevance_from_position(index, num_queries),
            expected_brand_mention_likelihood=likelihood if likelihood in LIKELIHOODS else "medium",
        ))
    return derived
