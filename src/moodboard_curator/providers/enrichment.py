"""
Enrichment provider boundary.

Turns free text (plus recently kept titles) into a refined search query and
descriptive tag lists. Implementations:
- HeuristicEnrichmentClient: local, no network (text joined with kept titles)
- OllamaEnrichmentClient: self-hosted models via Ollama
- OpenAICompatibleEnrichmentClient: OpenAI, DeepSeek, OpenRouter

Malformed or non-JSON model output raises MalformedResponse; it is never
treated as an empty success.
"""

import json
import time
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

import httpx
import ollama
import structlog
from openai import (
    APIConnectionError,
    APIError,
    APIStatusError,
    AsyncOpenAI,
    RateLimitError,
)
from pydantic import BaseModel, Field, ValidationError

from ..config import settings
from ..curation.lexicons import COLOR_WORDS, MOOD_WORDS
from ..curation.tokenizer import tokenize
from ..errors import MalformedResponse, RateLimited, TransientNetworkFailure, UpstreamError
from .image_search import parse_retry_after
from .prompts import SYSTEM_PROMPT, build_enrichment_prompt


logger = structlog.get_logger(__name__)


class EnrichmentResult(BaseModel):
    """Refined query plus optional descriptive tags."""

    refined_query: str = Field(description="Refined search query")
    colors: List[str] = Field(default_factory=list)
    moods: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


def parse_enrichment_payload(raw: Any) -> EnrichmentResult:
    """
    Parse model output into an EnrichmentResult.

    Accepts a JSON string or an already decoded dict. ``search_query`` is
    accepted as an alias of ``refined_query``.

    Raises:
        MalformedResponse: On non-JSON content or a schema mismatch
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedResponse("enrichment returned non-JSON content") from e

    if not isinstance(raw, dict):
        raise MalformedResponse("enrichment returned a non-object payload")

    if "refined_query" not in raw and "search_query" in raw:
        raw = {**raw, "refined_query": raw["search_query"]}

    try:
        return EnrichmentResult.model_validate(raw)
    except ValidationError as e:
        raise MalformedResponse(f"enrichment payload invalid: {e.error_count()} errors") from e


class EnrichmentClient(ABC):
    """Free text in, refined query and tags out."""

    provider_name = "enrichment"

    def __init__(self, max_kept_titles: Optional[int] = None):
        self.max_kept_titles = max_kept_titles or settings.enrichment_max_kept_titles
        self.logger = logger.bind(enrichment_client=self.__class__.__name__)

    @abstractmethod
    async def enrich(self, text: str, kept_titles: Sequence[str] = ()) -> EnrichmentResult:
        """
        Enrich free text.

        Args:
            text: Free text typed by the user
            kept_titles: Recent kept titles, newest first (only the first few are used)

        Raises:
            RateLimited, UpstreamError, TransientNetworkFailure, MalformedResponse
        """

    async def close(self) -> None:
        """Release network resources."""


class HeuristicEnrichmentClient(EnrichmentClient):
    """
    Local enrichment without a model.

    The refined query is the trimmed text followed by up to five kept
    titles; colors and moods are read off the lexicons.
    """

    provider_name = "heuristic"

    async def enrich(self, text: str, kept_titles: Sequence[str] = ()) -> EnrichmentResult:
        base = text.strip()
        extras = " ".join(title.strip() for title in list(kept_titles)[: self.max_kept_titles])
        refined = " ".join(part for part in (base, extras) if part).strip()

        tokens = tokenize(refined)
        colors = list(dict.fromkeys(t for t in tokens if t in COLOR_WORDS))
        moods = list(dict.fromkeys(t for t in tokens if t in MOOD_WORDS))
        return EnrichmentResult(refined_query=refined, colors=colors, moods=moods)


class LLMEnrichmentClient(EnrichmentClient):
    """Shared prompt building, parsing and logging for model-backed enrichment."""

    def __init__(
        self,
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 256,
        timeout_seconds: float = 3.5,
        max_kept_titles: Optional[int] = None,
    ):
        super().__init__(max_kept_titles=max_kept_titles)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
        self.logger = self.logger.bind(model=model)

    @abstractmethod
    async def _complete(self, system_prompt: str, user_prompt: str) -> str:
        """Run one chat completion and return the raw message content."""

    async def enrich(self, text: str, kept_titles: Sequence[str] = ()) -> EnrichmentResult:
        start_time = time.time()
        user_prompt = build_enrichment_prompt(text, list(kept_titles)[: self.max_kept_titles])

        content = await self._complete(SYSTEM_PROMPT, user_prompt)
        result = parse_enrichment_payload(content)

        self.logger.info(
            "enrichment_completed",
            provider=self.provider_name,
            latency_ms=int((time.time() - start_time) * 1000),
            refined_query=result.refined_query,
        )
        return result


class OllamaEnrichmentClient(LLMEnrichmentClient):
    """Enrichment via a self-hosted Ollama model (JSON output mode)."""

    provider_name = "ollama"

    def __init__(self, model: str, base_url: str = "http://localhost:11434", **kwargs):
        super().__init__(model=model, **kwargs)
        self.base_url = base_url
        self.client = ollama.AsyncClient(host=base_url, timeout=self.timeout_seconds)

    async def _complete(self, system_prompt: str, user_prompt: str) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        try:
            response = await self.client.chat(
                model=self.model,
                messages=messages,
                format="json",
                options={
                    "temperature": self.temperature,
                    "num_predict": self.max_tokens,
                },
            )
        except ollama.ResponseError as e:
            if e.status_code == 429:
                raise RateLimited(provider=self.provider_name) from e
            raise UpstreamError(e.status_code, detail=e.error, provider=self.provider_name) from e
        except ollama.RequestError as e:
            raise MalformedResponse(f"ollama rejected the request: {e.error}") from e
        except (httpx.TransportError, ConnectionError) as e:
            raise TransientNetworkFailure(f"ollama unreachable: {type(e).__name__}") from e

        try:
            content = response["message"]["content"]
        except (KeyError, TypeError) as e:
            raise MalformedResponse("ollama response has no message") from e
        if not content:
            raise MalformedResponse("ollama returned an empty message")
        return content


class OpenAICompatibleEnrichmentClient(LLMEnrichmentClient):
    """
    Enrichment via any OpenAI-compatible chat endpoint.

    Works with OpenAI, DeepSeek and OpenRouter. SDK retries are disabled:
    the orchestrator owns the time budget.
    """

    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        provider_name: str = "openai",
        **kwargs,
    ):
        super().__init__(model=model, **kwargs)
        self.base_url = base_url
        self.provider_name = provider_name
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=self.timeout_seconds,
            max_retries=0,
        )

    async def _complete(self, system_prompt: str, user_prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except RateLimitError as e:
            retry_after = parse_retry_after(e.response.headers.get("retry-after"))
            raise RateLimited(retry_after=retry_after, provider=self.provider_name) from e
        except APIStatusError as e:
            raise UpstreamError(e.status_code, provider=self.provider_name) from e
        except APIConnectionError as e:
            # Covers APITimeoutError
            raise TransientNetworkFailure(
                f"{self.provider_name} unreachable: {type(e).__name__}"
            ) from e
        except APIError as e:
            # Response validation and other SDK failures
            raise MalformedResponse(f"{self.provider_name} failed: {type(e).__name__}") from e

        if not response.choices:
            raise MalformedResponse(f"{self.provider_name} returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise MalformedResponse(f"{self.provider_name} returned an empty message")
        return content

    async def close(self) -> None:
        await self.client.close()


_OPENAI_COMPATIBLE_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "deepseek": "https://api.deepseek.com",
    "openrouter": "https://openrouter.ai/api/v1",
}


def create_enrichment_client(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    **override_kwargs,
) -> EnrichmentClient:
    """
    Factory function to create the enrichment client based on configuration.

    Explicit parameters win over settings.

    Args:
        provider: "heuristic", "ollama", "openai", "deepseek" or "openrouter"
        model: Model name (provider-specific)
        **override_kwargs: Override any client parameters

    Returns:
        Configured EnrichmentClient instance

    Raises:
        ValueError: If provider is unknown or an API key is missing
    """
    provider = provider or settings.enrichment_provider
    model = model or settings.llm_model

    logger.info("creating_enrichment_client", provider=provider, model=model)

    if provider == "heuristic":
        return HeuristicEnrichmentClient(
            max_kept_titles=override_kwargs.get("max_kept_titles")
        )

    client_params = {
        "temperature": override_kwargs.get("temperature", settings.llm_temperature),
        "max_tokens": override_kwargs.get("max_tokens", settings.llm_max_tokens),
        "timeout_seconds": override_kwargs.get(
            "timeout_seconds", settings.enrichment_timeout_seconds
        ),
        "max_kept_titles": override_kwargs.get("max_kept_titles"),
    }

    if provider == "ollama":
        return OllamaEnrichmentClient(
            model=model,
            base_url=override_kwargs.get("base_url", settings.llm_api_base_url),
            **client_params,
        )

    if provider in _OPENAI_COMPATIBLE_BASE_URLS:
        api_key = override_kwargs.get("api_key", settings.llm_api_key)
        if not api_key:
            raise ValueError(f"{provider} API key required (set LLM_API_KEY env var)")
        return OpenAICompatibleEnrichmentClient(
            model=model,
            api_key=api_key,
            base_url=override_kwargs.get("base_url", _OPENAI_COMPATIBLE_BASE_URLS[provider]),
            provider_name=provider,
            **client_params,
        )

    raise ValueError(
        f"Unknown enrichment provider: {provider}. "
        f"Supported: heuristic, ollama, openai, deepseek, openrouter"
    )
