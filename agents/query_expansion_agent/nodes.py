"""
Node functions for the query expansion LangGraph workflow.
"""

import logging
from typing import List, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from agents.query_expansion_agent.models import QueryExpansionState
from agents.query_expansion_agent.templates import DEFAULT_EXPANSION_CONFIG
from agents.query_expansion_agent.utils import (
    SYSTEM_PROMPT,
    build_user_prompt,
    parse_expansion_response,
    to_derived_queries,
)
from models.schemas import DerivedQuery, QueryExpansionInput
from utils.helpers import truncate_text
from utils.llm_clients import get_chat_llm, message_text

logger = logging.getLogger(__name__)


def generate_llm_queries(
    expansion_input: QueryExpansionInput,
    llm=None,
    llm_provider: Optional[str] = None,
    errors: Optional[List[str]] = None
) -> List[DerivedQuery]:
    """
    Ask a chat model for derived queries.

    Makes a single request. Every failure (provider not configured, network
    error, timeout, malformed JSON, missing ``queries``) is logged, recorded
    in ``errors`` and turned into an empty list.
    """
    if errors is None:
        errors = []

    num_queries = DEFAULT_EXPANSION_CONFIG.max_queries(expansion_input.expansion_level)

    try:
        if llm is None:
            llm = get_chat_llm(llm_provider)
        if llm is None:
            error_msg = f"Could not initialize {llm_provider or 'default'} LLM for query expansion"
            errors.append(error_msg)
            logger.error(error_msg)
            return []

        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=build_user_prompt(expansion_input, num_queries))
        ]

        result_text = message_text(llm.invoke(messages))

        if not result_text.strip():
            error_msg = "No content in LLM expansion response"
            errors.append(error_msg)
            logger.error(error_msg)
            return []

        parsed = parse_expansion_response(result_text)
        if parsed is None:
            error_msg = "Failed to parse LLM expansion response"
            errors.append(error_msg)
            logger.error(f"{error_msg}. Response: {truncate_text(result_text, 200)}")
            return []

        return to_derived_queries(parsed, num_queries)

    except Exception as e:
        error_msg = f"LLM expansion failed: {str(e)}"
        errors.append(error_msg)
        logger.error(error_msg)
        return []


def expand_with_llm_node(state: QueryExpansionState) -> QueryExpansionState:
    """Node: Generate derived queries with the LLM."""
    expansion_input = state["expansion_input"]
    errors = state.get("errors", [])

    logger.info(f"🧠 Expanding '{expansion_input.original_query}' with LLM...")

    llm_queries = generate_llm_queries(
        expansion_input,
        llm=state.get("llm"),
        llm_provider=state.get("llm_provider"),
        errors=errors
    )

    if llm_queries:
        logger.info(f"✓ LLM generated {len(llm_queries)} derived queries")
        state["derived_queries"] = llm_queries
        state["strategy"] = "llm"

    state["llm_queries"] = llm_queries
    state["errors"] = errors
    return state


def template_fallback(state: QueryExpansionState) -> QueryExpansionState:
    """Node: Fall back to the template expander."""
    logger.warning("LLM expansion returned nothing, falling back to templates")

    template_expander = state["template_expander"]
    state["derived_queries"] = template_expander(state["expansion_input"])
    state["strategy"] = "template"
    return state


def finalize(state: QueryExpansionState) -> QueryExpansionState:
    """Node: Finalize and mark as completed."""
    logger.info(
        f"✅ Query expansion complete: {len(state.get('derived_queries', []))} queries "
        f"via {state.get('strategy')}"
    )
    state["completed"] = True
    return state
