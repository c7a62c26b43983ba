"""
Liveness probe: reports the active enrichment provider and session count.
"""

import time

from fastapi import APIRouter, Depends

from ...models.api_models import HealthResponse
from ...providers.enrichment import EnrichmentClient
from ...version import API_VERSION
from ..dependencies import get_enrichment, get_registry
from ..session_store import SessionRegistry

router = APIRouter()

_started_at = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    enrichment: EnrichmentClient = Depends(get_enrichment),
    registry: SessionRegistry = Depends(get_registry),
) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        uptime_seconds=time.time() - _started_at,
        enrichment_provider=enrichment.provider_name,
        active_sessions=len(registry),
    )
