"""
In-process registry of active curation sessions.

Sessions are discarded when the flow ends or the process exits; nothing
is persisted.
"""

from typing import Dict, Optional

import structlog

from ..curation.orchestrator import CurationOrchestrator


logger = structlog.get_logger(__name__)


class SessionNotFound(KeyError):
    """No active session with the requested id."""


class SessionRegistry:
    """Maps session ids to their owning orchestrators."""

    def __init__(self) -> None:
        self._sessions: Dict[str, CurationOrchestrator] = {}

    def add(self, orchestrator: CurationOrchestrator) -> str:
        session_id = orchestrator.session.session_id
        self._sessions[session_id] = orchestrator
        logger.info("session_registered", session_id=session_id, active=len(self._sessions))
        return session_id

    def get(self, session_id: str) -> CurationOrchestrator:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None

    def discard(self, session_id: str) -> Optional[CurationOrchestrator]:
        orchestrator = self._sessions.pop(session_id, None)
        if orchestrator is not None:
            logger.info("session_discarded", session_id=session_id, active=len(self._sessions))
        return orchestrator

    def __len__(self) -> int:
        return len(self._sessions)
