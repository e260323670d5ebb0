"""
Pydantic models and state for query expansion.
"""

from typing import Any, Callable, List, Optional, TypedDict
from pydantic import BaseModel, Field

from models.schemas import DerivedQuery, QueryExpansionInput


class LLMExpansionItem(BaseModel):
    """One derived query as returned by the model."""
    query: str = Field(min_length=1)
    type: Optional[str] = None
    intent: Optional[str] = None
    expectedBrandMentionLikelihood: Optional[str] = None


class LLMExpansionResponse(BaseModel):
    """Top-level JSON object the model is asked to return."""
    queries: List[Any] = Field(description="Derived queries in descending relevance")


class QueryExpansionState(TypedDict):
    """State for the query expansion graph."""
    # Input
    expansion_input: QueryExpansionInput
    llm_provider: Optional[str]
    llm: Optional[Any]  # Pre-built chat model; resolved from llm_provider when None
    template_expander: Callable[[QueryExpansionInput], List[DerivedQuery]]

    # Processing
    llm_queries: List[DerivedQuery]

    # Output
    derived_queries: List[DerivedQuery]
    strategy: str  # "llm" or "template"

    # Metadata
    errors: List[str]
    completed: bool
