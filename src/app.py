"""
Main FastAPI Application

Unified API server with all routes organized cleanly.
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from config.settings import settings
from utils.llm_clients import LLM_FACTORIES, configured_providers

from src.routes import health_routes, exposure_routes, expansion_routes

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%H:%M:%S'
)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="API for scoring keyword exposure across AI providers and expanding test queries"
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health_routes.router)
    app.include_router(exposure_routes.router)
    app.include_router(expansion_routes.router)

    @app.on_event("startup")
    async def startup_event():
        """Report which LLM providers can be used for query expansion."""
        logger = logging.getLogger(__name__)

        providers = configured_providers()
        if providers:
            logger.info(f"✅ LLM providers configured: {', '.join(providers)}")
        else:
            logger.warning("⚠️  No LLM API keys configured - query expansion will use templates only")

        if settings.QUERY_EXPANSION_PROVIDER.lower() not in LLM_FACTORIES:
            logger.warning(f"⚠️  Unknown QUERY_EXPANSION_PROVIDER: {settings.QUERY_EXPANSION_PROVIDER}")

        logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} ready")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
