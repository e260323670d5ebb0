"""
Query Expansion Routes

Endpoints for deriving brand-visibility test queries.
"""

from fastapi import APIRouter
from models.schemas import ExpansionPreview, ExpansionRequest, QueryExpansionResult

from src.controllers.expansion_controller import expand, preview


router = APIRouter(prefix="/expansion", tags=["Query Expansion"])


@router.post("/expand", response_model=QueryExpansionResult)
def expand_query(request: ExpansionRequest) -> QueryExpansionResult:
    """
    Derive test queries from a base query.

    With ``use_llm`` the configured LLM writes the queries and the templates
    are used only if it fails. The response always contains queries as long
    as the templates can produce some.

    Example:
        POST /expansion/expand
        {
            "original_query": "협업 툴 추천",
            "brand_name": "Notion",
            "industry": "SaaS",
            "keywords": ["협업 툴"],
            "competitors": ["Confluence"],
            "expansion_level": "standard",
            "use_llm": true
        }
    """
    return expand(request)


@router.post("/preview", response_model=ExpansionPreview)
def preview_query_expansion(request: ExpansionRequest) -> ExpansionPreview:
    """Estimate query count and credits without calling any model."""
    return preview(request)
