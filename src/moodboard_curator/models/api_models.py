"""
API request and response models for FastAPI endpoints.

This module defines the Pydantic models used for API request/response validation.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .items import Item
from .session import Session


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status", examples=["healthy"])
    version: str = Field(description="API version", examples=["1.0.0"])
    uptime_seconds: float = Field(description="Service uptime")
    enrichment_provider: str = Field(description="Active enrichment provider", examples=["heuristic"])
    active_sessions: int = Field(description="Curation sessions held in memory", ge=0)


class VersionResponse(BaseModel):
    """Version information response."""

    api_version: str = Field(description="API version")
    components: Dict[str, str] = Field(description="Component versions")


class ImageSearchResponse(BaseModel):
    """Proxied image-search page."""

    items: List[Item] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    """Free text plus recently accepted titles to enrich."""

    text: str = Field(description="Free text describing the vibe")
    accepted_titles: List[str] = Field(
        default_factory=list, description="Most recent kept titles, newest first"
    )


class AnalyzeResponse(BaseModel):
    """Enrichment output."""

    search_query: str = Field(description="Refined search query")
    colors: List[str] = Field(default_factory=list)
    moods: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class CreateSessionRequest(BaseModel):
    """Start a curation flow."""

    query: Optional[str] = Field(default=None, description="Seed query (defaults to configured seed)")


class SlotRequest(BaseModel):
    """Accept or reject the candidate in a visible slot."""

    slot: int = Field(ge=0, description="Visible slot index")


class TextRequest(BaseModel):
    """Submit new free text."""

    text: str = Field(min_length=1, description="Free text typed by the user")


class SessionView(BaseModel):
    """What the presentation layer needs to render a session."""

    session_id: str
    visible_text: str
    visible: List[Item]
    kept: List[Item]
    queue_size: int
    seen_count: int
    page: int
    generation: int
    loading: bool
    error: Optional[str] = None
    retry_after: Optional[float] = None

    @classmethod
    def from_session(cls, session: Session) -> "SessionView":
        return cls(
            session_id=session.session_id,
            visible_text=session.visible_text,
            visible=list(session.visible),
            kept=list(session.kept),
            queue_size=len(session.queue),
            seen_count=len(session.seen),
            page=session.page,
            generation=session.generation,
            loading=session.loading,
            error=session.error,
            retry_after=session.retry_after,
        )
