"""
Session model - the mutable curation state for one active user flow.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set

from .items import Item


# Size of the visible candidate window
SLOT_COUNT = 3


@dataclass
class Session:
    """
    Curation state, owned by exactly one orchestrator.

    Collections are replaced wholesale on every committed change, never
    edited in place, so a transition that moves nothing leaves every
    collection identical by reference.
    """

    session_id: str
    active_query: str
    visible_text: str = ""

    queue: List[Item] = field(default_factory=list)
    visible: List[Item] = field(default_factory=list)
    kept: List[Item] = field(default_factory=list)  # most recent first
    seen: Set[str] = field(default_factory=set)

    # Paging cursor: the query the queue is currently paging through and its page.
    # Usually equal to active_query; differs after an optimistic-only analyze cycle.
    cursor_query: str = ""
    page: int = 1

    generation: int = 0
    fetch_in_flight: bool = False

    # Status line
    loading: bool = False
    error: Optional[str] = None
    retry_after: Optional[float] = None

    # Incremented on every committed state change
    revision: int = 0

    def __post_init__(self) -> None:
        if not self.visible_text:
            self.visible_text = self.active_query
        if not self.cursor_query:
            self.cursor_query = self.active_query

    def kept_titles(self, limit: int, exclude_id: Optional[str] = None) -> List[str]:
        """Non-empty titles of the most recently kept items, newest first."""
        titles = []
        for item in self.kept:
            if item.id == exclude_id or not item.title.strip():
                continue
            titles.append(item.title)
            if len(titles) >= limit:
                break
        return titles

    def clear_status(self) -> None:
        self.error = None
        self.retry_after = None

    def touch(self) -> None:
        self.revision += 1
