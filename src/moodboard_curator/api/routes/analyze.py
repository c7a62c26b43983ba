"""
Enrichment endpoint: free text plus accepted titles in, refined query out.
"""

import structlog
from fastapi import APIRouter, Depends

from ...models.api_models import AnalyzeRequest, AnalyzeResponse
from ...providers.enrichment import EnrichmentClient
from ..dependencies import get_enrichment


logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["Analyze"])


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(
    request: AnalyzeRequest,
    enrichment: EnrichmentClient = Depends(get_enrichment),
) -> AnalyzeResponse:
    """
    Enrich free text into a search query.

    Examples:
        POST /api/v1/analyze
        {"text": "stormy sea", "accepted_titles": ["Small boat at dusk"]}
    """
    result = await enrichment.enrich(request.text, request.accepted_titles)
    logger.info(
        "Analyze completed",
        provider=enrichment.provider_name,
        search_query=result.refined_query,
    )
    return AnalyzeResponse(
        search_query=result.refined_query,
        colors=result.colors,
        moods=result.moods,
        tags=result.tags,
    )
