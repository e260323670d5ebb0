"""
Query Expansion Controller

Handles business logic for deriving test queries from a base query.
"""

import logging

from agents.query_expander import expand_queries, preview_expansion
from models.schemas import (
    ExpansionPreview,
    ExpansionRequest,
    QueryExpansionInput,
    QueryExpansionResult,
)

logger = logging.getLogger(__name__)


def _to_input(request: ExpansionRequest) -> QueryExpansionInput:
    return QueryExpansionInput.model_validate(
        request.model_dump(include=set(QueryExpansionInput.model_fields))
    )


def expand(request: ExpansionRequest) -> QueryExpansionResult:
    """
    Expand the request's base query.

    Uses the LLM with template fallback unless ``use_llm`` is False.
    """
    result = expand_queries(
        _to_input(request),
        use_llm=request.use_llm,
        providers=request.providers
    )
    logger.info(
        f"Expanded '{request.original_query}' into {len(result.derived_queries)} queries "
        f"via {result.strategy}"
    )
    return result


def preview(request: ExpansionRequest) -> ExpansionPreview:
    return preview_expansion(_to_input(request), providers=request.providers)
