"""
Health Check Routes

Service status and configured LLM providers.
"""

from fastapi import APIRouter
from models.schemas import HealthResponse
from config.settings import settings
from utils.llm_clients import configured_providers


router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Scoring never depends on external services, so the service is healthy
    whenever it is up. It reports "degraded" when the configured query
    expansion provider has no API key, since expansion then always falls back
    to templates.
    """
    providers = configured_providers()
    expansion_provider = settings.QUERY_EXPANSION_PROVIDER.lower()
    if expansion_provider == "anthropic":
        expansion_provider = "claude"

    return HealthResponse(
        status="healthy" if expansion_provider in providers else "degraded",
        version=settings.APP_VERSION,
        expansion_provider=settings.QUERY_EXPANSION_PROVIDER,
        configured_providers=providers
    )


@router.get("/")
async def root():
    """List the service endpoints."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "endpoints": {
            "health": "GET /health",
            "exposure_score": "POST /exposure/score",
            "exposure_trend": "POST /exposure/trend",
            "exposure_heatmap": "POST /exposure/heatmap",
            "exposure_compare": "POST /exposure/compare",
            "share_of_voice": "POST /exposure/share-of-voice",
            "visibility_trends": "POST /exposure/visibility-trends",
            "expand_queries": "POST /expansion/expand",
            "preview_expansion": "POST /expansion/preview"
        }
    }
