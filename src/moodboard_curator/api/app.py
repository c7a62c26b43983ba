"""
FastAPI application for the moodboard curator.

Wires the shared providers, the session registry, middleware and routers.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..logging_config import setup_logging
from ..providers.enrichment import EnrichmentClient, create_enrichment_client
from ..providers.image_search import ImageSearchProvider, OpenverseClient
from ..version import API_VERSION
from .middleware import setup_error_handling, setup_logging_middleware
from .routes import analyze, health, images, sessions, version
from .session_store import SessionRegistry

# Setup logging on module import
setup_logging()
logger = structlog.get_logger(__name__)


def create_app(
    image_search: Optional[ImageSearchProvider] = None,
    enrichment: Optional[EnrichmentClient] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        image_search: Provider override (defaults to OpenverseClient)
        enrichment: Enrichment override (defaults to the configured provider)

    Returns:
        Configured FastAPI app instance
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting Moodboard Curator API",
            version=API_VERSION,
            log_level=settings.log_level,
            enrichment_provider=app.state.enrichment.provider_name,
        )
        yield
        await app.state.image_search.close()
        await app.state.enrichment.close()
        logger.info("Shutting down Moodboard Curator API")

    app = FastAPI(
        title="Moodboard Curator",
        description="Iterative image curation driven by a free-text vibe",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.image_search = image_search or OpenverseClient()
    app.state.enrichment = enrichment or create_enrichment_client()
    app.state.sessions = SessionRegistry()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Order matters - last registered middleware is outermost
    setup_logging_middleware(app)
    setup_error_handling(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(version.router, prefix="/api/v1", tags=["Version"])
    app.include_router(images.router)
    app.include_router(analyze.router)
    app.include_router(sessions.router)

    return app


def main() -> None:
    """
    Entry point for running the API server directly.

    For development use. In production, use uvicorn directly.
    """
    import uvicorn

    uvicorn.run(
        "moodboard_curator.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
