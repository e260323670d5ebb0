"""
Query Expansion Agent

A LangGraph-based agent that derives brand-visibility test queries from a
base query, using an LLM with a template fallback.
"""

from agents.query_expansion_agent.graph import run_query_expansion_workflow
from agents.query_expansion_agent.templates import (
    ExpansionConfig,
    TemplateExpander,
    expand_with_templates
)


__all__ = [
    "run_query_expansion_workflow",
    "ExpansionConfig",
    "TemplateExpander",
    "expand_with_templates"
]
