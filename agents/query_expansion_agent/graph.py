"""
LangGraph workflow definition for query expansion.
"""

from typing import Callable, List, Optional

from langgraph.graph import StateGraph, START, END

from agents.query_expansion_agent.models import QueryExpansionState
from agents.query_expansion_agent.nodes import (
    expand_with_llm_node,
    template_fallback,
    finalize
)
from agents.query_expansion_agent.templates import expand_with_templates
from models.schemas import DerivedQuery, QueryExpansionInput


# Singleton graph instance
_graph = None


def should_fallback(state: QueryExpansionState) -> str:
    """Conditional edge: Use templates when the LLM produced nothing."""
    if state.get("llm_queries"):
        return "finalize"
    return "template_fallback"


def create_query_expansion_graph():
    """Create the LangGraph workflow for query expansion."""
    workflow = StateGraph(QueryExpansionState)

    # Add nodes
    workflow.add_node("llm_expand", expand_with_llm_node)
    workflow.add_node("template_fallback", template_fallback)
    workflow.add_node("finalize", finalize)

    # Define edges (workflow)
    workflow.add_edge(START, "llm_expand")

    workflow.add_conditional_edges(
        "llm_expand",
        should_fallback,
        {
            "template_fallback": "template_fallback",
            "finalize": "finalize"
        }
    )

    workflow.add_edge("template_fallback", "finalize")
    workflow.add_edge("finalize", END)

    return workflow.compile()


def get_query_expansion_graph():
    """Get or create the query expansion graph."""
    global _graph
    if _graph is None:
        _graph = create_query_expansion_graph()
    return _graph


def run_query_expansion_workflow(
    expansion_input: QueryExpansionInput,
    template_expander: Callable[[QueryExpansionInput], List[DerivedQuery]] = expand_with_templates,
    llm=None,
    llm_provider: Optional[str] = None,
    progress_callback=None
):
    """
    Run the query expansion workflow with optional progress streaming.

    Entry point for the query expansion agent.

    Args:
        expansion_input: Base query and brand context
        template_expander: Fallback used when the LLM returns no queries
        llm: Optional pre-built chat model (skips provider lookup)
        llm_provider: LLM provider to use when ``llm`` is None
        progress_callback: Optional callback function(step, status, message, data) for progress updates

    Returns:
        Dictionary with derived_queries, strategy and errors
    """
    graph = get_query_expansion_graph()

    initial_state = {
        "expansion_input": expansion_input,
        "llm_provider": llm_provider,
        "llm": llm,
        "template_expander": template_expander,
        "llm_queries": [],
        "derived_queries": [],
        "strategy": "template",
        "errors": [],
        "completed": False
    }

    state = initial_state

    # Execute graph with streaming
    for step_output in graph.stream(initial_state):
        node_name = list(step_output.keys())[0]
        state = step_output[node_name]

        if progress_callback:
            if node_name == "llm_expand":
                num_generated = len(state.get("llm_queries", []))
                progress_callback("expansion", "in_progress", f"LLM generated {num_generated} queries", None)
            elif node_name == "template_fallback":
                progress_callback("expansion", "in_progress", "Falling back to templates", None)
            elif node_name == "finalize":
                progress_callback("expansion", "completed", "Query expansion complete", None)

    return {
        "derived_queries": state.get("derived_queries", []),
        "strategy": state.get("strategy", "template"),
        "errors": state.get("errors", [])
    }
