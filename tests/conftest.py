"""
Global pytest fixtures and configuration for test suite.

This module provides reusable fixtures for:
- Fake providers (image search, enrichment)
- Sessions and orchestrators wired to the fakes
- Test settings
- HTTP clients for the FastAPI app
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from moodboard_curator.api.app import create_app
from moodboard_curator.config import Settings
from moodboard_curator.curation.orchestrator import CurationOrchestrator
from moodboard_curator.models.session import Session
from tests.fakes import FakeEnrichment, FakeImageSearch, make_items


SEED_QUERY = "lonely, dark, single figure, horizon"


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings with safe defaults for tests.

    Returns:
        Settings instance with a short enrichment timeout
    """
    return Settings(
        log_level="INFO",
        log_json=False,  # Easier to read in tests
        enrichment_provider="heuristic",
        enrichment_timeout_seconds=0.2,
        image_search_retry_delay_seconds=0.0,
    )


@pytest.fixture
def image_search() -> FakeImageSearch:
    """Fake provider whose seed page holds items a..e."""
    return FakeImageSearch({(SEED_QUERY, 1): make_items("a", "b", "c", "d", "e")})


@pytest.fixture
def enrichment() -> FakeEnrichment:
    return FakeEnrichment()


@pytest.fixture
def session() -> Session:
    return Session(session_id="test-session", active_query=SEED_QUERY)


@pytest.fixture
def orchestrator(session, image_search, enrichment, test_settings) -> CurationOrchestrator:
    return CurationOrchestrator(session, image_search, enrichment, config=test_settings)


@pytest_asyncio.fixture
async def async_client(image_search, enrichment) -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing FastAPI endpoints.

    The app is wired to the fake providers.

    Yields:
        AsyncClient instance
    """
    app = create_app(image_search=image_search, enrichment=enrichment)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# Configuration for pytest-asyncio
def pytest_configure(config):
    """
    Configure pytest with custom markers and settings.
    """
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (API, end-to-end)"
    )
    config.addinivalue_line(
        "markers", "slow: Slow tests that may take longer to run"
    )
