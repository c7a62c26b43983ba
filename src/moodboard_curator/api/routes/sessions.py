"""
Curation session endpoints.

Each mutating endpoint runs one orchestrator action to completion and
returns the resulting session view.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ...curation.orchestrator import CurationOrchestrator
from ...models.api_models import CreateSessionRequest, SessionView, SlotRequest, TextRequest
from ...providers.enrichment import EnrichmentClient
from ...providers.image_search import ImageSearchProvider
from ..dependencies import get_enrichment, get_image_search, get_registry
from ..session_store import SessionNotFound, SessionRegistry


logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/sessions", tags=["Sessions"])


def _lookup(registry: SessionRegistry, session_id: str) -> CurationOrchestrator:
    try:
        return registry.get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}") from None


@router.post("", response_model=SessionView, status_code=201)
async def create_session(
    request: CreateSessionRequest,
    registry: SessionRegistry = Depends(get_registry),
    image_search: ImageSearchProvider = Depends(get_image_search),
    enrichment: EnrichmentClient = Depends(get_enrichment),
) -> SessionView:
    """Start a curation flow and issue the seed fetch."""
    orchestrator = CurationOrchestrator.create(image_search, enrichment, seed_query=request.query)
    registry.add(orchestrator)
    await orchestrator.start()
    return orchestrator.snapshot()


@router.get("/{session_id}", response_model=SessionView)
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionView:
    return _lookup(registry, session_id).snapshot()


@router.delete("/{session_id}", status_code=204)
async def end_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> None:
    """End the flow; the session state is dropped."""
    if registry.discard(session_id) is None:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")


@router.post("/{session_id}/accept", response_model=SessionView)
async def accept_candidate(
    session_id: str,
    request: SlotRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionView:
    orchestrator = _lookup(registry, session_id)
    try:
        await orchestrator.accept(request.slot)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return orchestrator.snapshot()


@router.post("/{session_id}/reject", response_model=SessionView)
async def reject_candidate(
    session_id: str,
    request: SlotRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionView:
    orchestrator = _lookup(registry, session_id)
    try:
        await orchestrator.reject(request.slot)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return orchestrator.snapshot()


@router.post("/{session_id}/analyze", response_model=SessionView)
async def analyze_and_search(
    session_id: str,
    request: TextRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionView:
    """Optimistic search of the text, refined by enrichment when it answers in time."""
    orchestrator = _lookup(registry, session_id)
    await orchestrator.analyze_and_search(request.text)
    return orchestrator.snapshot()


@router.post("/{session_id}/research", response_model=SessionView)
async def manual_research(
    session_id: str,
    request: TextRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionView:
    """Full reset of the session onto new text."""
    orchestrator = _lookup(registry, session_id)
    try:
        await orchestrator.manual_research(request.text)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    return orchestrator.snapshot()
