"""
Integration tests for the image search proxy, analyze, health and version endpoints.
"""

import pytest

from moodboard_curator.errors import MalformedResponse, RateLimited, UpstreamError
from moodboard_curator.version import API_VERSION


SEED_QUERY = "lonely, dark, single figure, horizon"


@pytest.mark.integration
@pytest.mark.asyncio
class TestImagesAPI:
    """GET /api/v1/images"""

    async def test_search(self, async_client, image_search):
        response = await async_client.get("/api/v1/images", params={"q": SEED_QUERY, "page": 1})

        assert response.status_code == 200
        items = response.json()["items"]
        assert [item["id"] for item in items] == ["a", "b", "c", "d", "e"]
        assert items[0]["thumbnail_ref"].endswith("/a/thumb.jpg")
        assert image_search.calls == [(SEED_QUERY, 1)]

    async def test_unknown_query_is_empty(self, async_client):
        response = await async_client.get("/api/v1/images", params={"q": "nothing"})

        assert response.status_code == 200
        assert response.json() == {"items": []}

    async def test_rate_limited_maps_to_429(self, async_client, image_search):
        image_search.set_page("rain", 1, RateLimited(retry_after=20, provider="openverse"))

        response = await async_client.get("/api/v1/images", params={"q": "rain"})

        assert response.status_code == 429
        assert response.headers["retry-after"] == "20"
        assert response.json()["retry_after"] == 20

    async def test_upstream_error_maps_to_502(self, async_client, image_search):
        image_search.set_page("rain", 1, UpstreamError(503, provider="openverse"))

        response = await async_client.get("/api/v1/images", params={"q": "rain"})

        assert response.status_code == 502
        assert response.json()["error"] == "openverse 503"

    async def test_unexpected_error_maps_to_500(self, async_client, image_search):
        image_search.set_page("rain", 1, RuntimeError("bug"))

        response = await async_client.get("/api/v1/images", params={"q": "rain"})

        assert response.status_code == 500
        assert response.json()["success"] is False

    async def test_page_must_be_positive(self, async_client):
        response = await async_client.get("/api/v1/images", params={"q": "rain", "page": 0})
        assert response.status_code == 422


@pytest.mark.integration
@pytest.mark.asyncio
class TestAnalyzeAPI:
    """POST /api/v1/analyze"""

    async def test_analyze(self, async_client, enrichment):
        response = await async_client.post(
            "/api/v1/analyze",
            json={"text": "stormy sea", "accepted_titles": ["Small boat at dusk"]},
        )

        assert response.status_code == 200
        assert response.json()["search_query"] == "stormy sea"
        assert enrichment.calls == [("stormy sea", ["Small boat at dusk"])]

    async def test_malformed_enrichment_maps_to_502(self, async_client, enrichment):
        enrichment.error = MalformedResponse("enrichment returned non-JSON content")

        response = await async_client.post("/api/v1/analyze", json={"text": "rain"})

        assert response.status_code == 502


@pytest.mark.integration
@pytest.mark.asyncio
class TestServiceEndpoints:
    async def test_health(self, async_client):
        response = await async_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == API_VERSION
        assert data["enrichment_provider"] == "fake"
        assert data["active_sessions"] == 0

    async def test_health_counts_sessions(self, async_client):
        await async_client.post("/api/v1/sessions", json={})
        await async_client.post("/api/v1/sessions", json={"query": "rain"})

        response = await async_client.get("/health")

        assert response.json()["active_sessions"] == 2

    async def test_version(self, async_client):
        response = await async_client.get("/api/v1/version")

        data = response.json()
        assert data["api_version"] == API_VERSION
        assert set(data["components"]) == {"tokenizer", "lexicons", "scoring", "enrichment_prompt"}

    async def test_presets(self, async_client):
        response = await async_client.get("/api/v1/presets")

        data = response.json()
        assert data["default"] == SEED_QUERY
        assert SEED_QUERY in data["presets"]
