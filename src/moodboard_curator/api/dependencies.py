"""
FastAPI dependencies resolving the shared providers from application state.
"""

from fastapi import Request

from ..providers.enrichment import EnrichmentClient
from ..providers.image_search import ImageSearchProvider
from .session_store import SessionRegistry


def get_image_search(request: Request) -> ImageSearchProvider:
    return request.app.state.image_search


def get_enrichment(request: Request) -> EnrichmentClient:
    return request.app.state.enrichment


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions
