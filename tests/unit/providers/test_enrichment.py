"""
Unit tests for the enrichment providers.

Tests client construction, payload parsing, error mapping and the
heuristic fallback without calling any model.
"""

import json
from unittest.mock import AsyncMock, Mock

import httpx
import ollama
import pytest
from openai import (
    APIConnectionError,
    APIResponseValidationError,
    APIStatusError,
    RateLimitError,
)

from moodboard_curator.errors import (
    MalformedResponse,
    RateLimited,
    TransientNetworkFailure,
    UpstreamError,
)
from moodboard_curator.providers.enrichment import (
    EnrichmentResult,
    HeuristicEnrichmentClient,
    OllamaEnrichmentClient,
    OpenAICompatibleEnrichmentClient,
    create_enrichment_client,
    parse_enrichment_payload,
)
from moodboard_curator.providers.prompts import SYSTEM_PROMPT, build_enrichment_prompt


CHAT_URL = "https://api.test/v1/chat/completions"


def _openai_client() -> OpenAICompatibleEnrichmentClient:
    client = OpenAICompatibleEnrichmentClient(
        model="gpt-4o-mini", api_key="sk-test", base_url="https://api.test/v1"
    )
    client.client = Mock()
    return client


def _completion(content):
    return Mock(choices=[Mock(message=Mock(content=content))])


def _http_response(status_code: int, **kwargs) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", CHAT_URL), **kwargs)


class TestParseEnrichmentPayload:
    """Test parsing of model output."""

    def test_json_string(self):
        result = parse_enrichment_payload(
            '{"refined_query": "stormy sea small boat", "colors": ["grey"], "moods": ["stormy"]}'
        )
        assert result.refined_query == "stormy sea small boat"
        assert result.colors == ["grey"]
        assert result.moods == ["stormy"]
        assert result.tags == []

    def test_dict_payload(self):
        result = parse_enrichment_payload({"refined_query": "neon rain"})
        assert result == EnrichmentResult(refined_query="neon rain")

    def test_search_query_alias(self):
        result = parse_enrichment_payload({"search_query": "neon rain", "tags": ["city"]})
        assert result.refined_query == "neon rain"
        assert result.tags == ["city"]

    @pytest.mark.parametrize(
        "raw",
        ["not json at all", "[1, 2]", '{"colors": ["red"]}', '{"refined_query": 5}', 42],
    )
    def test_malformed(self, raw):
        with pytest.raises(MalformedResponse):
            parse_enrichment_payload(raw)


class TestPrompts:
    def test_prompt_includes_text_and_titles(self):
        prompt = build_enrichment_prompt("  stormy sea  ", ["Small Boat", "Grey Waves"])

        assert "Description: stormy sea" in prompt
        assert "- Small Boat" in prompt
        assert "- Grey Waves" in prompt

    def test_prompt_without_titles(self):
        prompt = build_enrichment_prompt("rain")
        assert "already liked" not in prompt

    def test_system_prompt_names_json_keys(self):
        for key in ("refined_query", "colors", "moods", "tags"):
            assert key in SYSTEM_PROMPT


@pytest.mark.asyncio
class TestHeuristicEnrichmentClient:
    """The local, model-free enrichment."""

    async def test_text_only(self):
        result = await HeuristicEnrichmentClient().enrich("  dark stormy sea ")

        assert result.refined_query == "dark stormy sea"
        assert result.colors == ["dark"]
        assert result.moods == ["stormy"]

    async def test_appends_up_to_five_titles(self):
        titles = [f"Title {i}" for i in range(8)]

        result = await HeuristicEnrichmentClient().enrich("rain", titles)

        assert result.refined_query == "rain Title 0 Title 1 Title 2 Title 3 Title 4"

    async def test_custom_title_limit(self):
        result = await HeuristicEnrichmentClient(max_kept_titles=1).enrich("rain", ["A", "B"])
        assert result.refined_query == "rain A"


@pytest.mark.asyncio
class TestOpenAICompatibleEnrichmentClient:
    """Test the OpenAI-compatible client with a mocked SDK."""

    async def test_success(self):
        client = _openai_client()
        client.client.chat.completions.create = AsyncMock(
            return_value=_completion(json.dumps({"refined_query": "neon rain city"}))
        )

        result = await client.enrich("rainy neon night", ["Tokyo Street"])

        assert result.refined_query == "neon rain city"
        call_kwargs = client.client.chat.completions.create.call_args.kwargs
        assert call_kwargs["model"] == "gpt-4o-mini"
        assert call_kwargs["response_format"] == {"type": "json_object"}
        assert "Tokyo Street" in call_kwargs["messages"][1]["content"]

    async def test_empty_content_is_malformed(self):
        client = _openai_client()
        client.client.chat.completions.create = AsyncMock(return_value=_completion(None))

        with pytest.raises(MalformedResponse):
            await client.enrich("rain")

    async def test_non_json_content_is_malformed(self):
        client = _openai_client()
        client.client.chat.completions.create = AsyncMock(
            return_value=_completion("Sure! Here are some keywords: rain, neon")
        )

        with pytest.raises(MalformedResponse):
            await client.enrich("rain")

    async def test_rate_limit_maps_to_rate_limited(self):
        client = _openai_client()
        error = RateLimitError(
            "slow down", response=_http_response(429, headers={"retry-after": "7"}), body=None
        )
        client.client.chat.completions.create = AsyncMock(side_effect=error)

        with pytest.raises(RateLimited) as exc_info:
            await client.enrich("rain")

        assert exc_info.value.retry_after == 7.0
        assert exc_info.value.provider == "openai"

    async def test_status_error_maps_to_upstream(self):
        client = _openai_client()
        error = APIStatusError("boom", response=_http_response(503), body=None)
        client.client.chat.completions.create = AsyncMock(side_effect=error)

        with pytest.raises(UpstreamError) as exc_info:
            await client.enrich("rain")

        assert exc_info.value.status_code == 503

    async def test_connection_error_maps_to_transient(self):
        client = _openai_client()
        error = APIConnectionError(request=httpx.Request("POST", CHAT_URL))
        client.client.chat.completions.create = AsyncMock(side_effect=error)

        with pytest.raises(TransientNetworkFailure):
            await client.enrich("rain")

    async def test_response_validation_error_is_malformed(self):
        client = _openai_client()
        error = APIResponseValidationError(response=_http_response(200), body={"choices": "??"})
        client.client.chat.completions.create = AsyncMock(side_effect=error)

        with pytest.raises(MalformedResponse):
            await client.enrich("rain")


@pytest.mark.asyncio
class TestOllamaEnrichmentClient:
    """Test the Ollama client with a mocked AsyncClient."""

    def _client(self) -> OllamaEnrichmentClient:
        client = OllamaEnrichmentClient(model="qwen2.5:7b", base_url="http://localhost:11434")
        client.client = Mock()
        return client

    async def test_success_uses_json_format(self):
        client = self._client()
        client.client.chat = AsyncMock(
            return_value={"message": {"content": '{"refined_query": "foggy forest path"}'}}
        )

        result = await client.enrich("misty woods")

        assert result.refined_query == "foggy forest path"
        assert client.client.chat.call_args.kwargs["format"] == "json"

    async def test_response_error_429(self):
        client = self._client()
        client.client.chat = AsyncMock(side_effect=ollama.ResponseError("busy", 429))

        with pytest.raises(RateLimited):
            await client.enrich("rain")

    async def test_response_error_500(self):
        client = self._client()
        client.client.chat = AsyncMock(side_effect=ollama.ResponseError("model crashed", 500))

        with pytest.raises(UpstreamError) as exc_info:
            await client.enrich("rain")

        assert exc_info.value.status_code == 500

    async def test_connection_refused(self):
        client = self._client()
        client.client.chat = AsyncMock(side_effect=ConnectionError("refused"))

        with pytest.raises(TransientNetworkFailure):
            await client.enrich("rain")

    async def test_empty_message_is_malformed(self):
        client = self._client()
        client.client.chat = AsyncMock(return_value={"message": {"content": ""}})

        with pytest.raises(MalformedResponse):
            await client.enrich("rain")

    async def test_request_error_is_malformed(self):
        client = self._client()
        client.client.chat = AsyncMock(side_effect=ollama.RequestError("must provide a model"))

        with pytest.raises(MalformedResponse):
            await client.enrich("rain")

    async def test_missing_message_is_malformed(self):
        client = self._client()
        client.client.chat = AsyncMock(return_value={"done": True})

        with pytest.raises(MalformedResponse):
            await client.enrich("rain")


class TestFactoryFunction:
    """Test create_enrichment_client."""

    def test_heuristic(self):
        assert isinstance(create_enrichment_client("heuristic"), HeuristicEnrichmentClient)

    def test_ollama(self):
        client = create_enrichment_client("ollama", "llama3.2", base_url="http://ollama.test:11434")

        assert isinstance(client, OllamaEnrichmentClient)
        assert client.model == "llama3.2"
        assert client.base_url == "http://ollama.test:11434"

    @pytest.mark.parametrize(
        "provider,base_url",
        [
            ("openai", "https://api.openai.com/v1"),
            ("deepseek", "https://api.deepseek.com"),
            ("openrouter", "https://openrouter.ai/api/v1"),
        ],
    )
    def test_openai_compatible(self, provider, base_url):
        client = create_enrichment_client(provider, "some-model", api_key="sk-test")

        assert isinstance(client, OpenAICompatibleEnrichmentClient)
        assert client.provider_name == provider
        assert client.base_url == base_url

    def test_missing_api_key(self):
        with pytest.raises(ValueError, match="API key required"):
            create_enrichment_client("openai", "gpt-4o-mini", api_key="")

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown enrichment provider"):
            create_enrichment_client("carrier-pigeon")
