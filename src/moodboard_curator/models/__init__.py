# Data models for the curation engine

from .items import Item
from .session import SLOT_COUNT, Session
from .api_models import (
    AnalyzeRequest,
    AnalyzeResponse,
    HealthResponse,
    SessionView,
    VersionResponse,
)

__all__ = [
    "Item",
    "Session",
    "SLOT_COUNT",
    "AnalyzeRequest",
    "AnalyzeResponse",
    "HealthResponse",
    "SessionView",
    "VersionResponse",
]
