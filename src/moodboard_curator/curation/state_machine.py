"""
Session state machine.

Synchronous transitions over an explicitly passed Session. Each transition
mutates the session and returns the fetch the orchestrator should issue
next (a FetchPlan), or None. No transition performs I/O.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from ..models.items import Item
from ..models.session import Session
from .queue import EnqueueMode, fill_slots
from .scoring import RefinementWeights, refine_query_with


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FetchPlan:
    """A provider fetch requested by a transition."""

    query: str
    page: int
    mode: EnqueueMode
    generation: int


def _take_slot(session: Session, slot: int) -> Item:
    if slot < 0 or slot >= len(session.visible):
        raise IndexError(f"slot {slot} is empty (window holds {len(session.visible)})")
    item = session.visible[slot]
    session.visible = session.visible[:slot] + session.visible[slot + 1 :]
    session.seen = session.seen | {item.id}
    return item


def begin(session: Session) -> FetchPlan:
    """Initial transition: fetch the seed query into an empty window."""
    session.generation += 1
    session.page = 1
    session.cursor_query = session.active_query
    session.loading = True
    session.clear_status()
    session.touch()
    return FetchPlan(session.active_query, 1, EnqueueMode.REPLACE, session.generation)


def accept(
    session: Session,
    slot: int,
    weights: Optional[RefinementWeights] = None,
) -> FetchPlan:
    """
    Keep the item in ``slot`` and refine the active query from it.

    The item moves to the head of ``kept``, the window shrinks, the queue is
    cleared and paging restarts at 1 for the refined query.

    Raises:
        IndexError: If the slot is empty
    """
    item = _take_slot(session, slot)
    session.kept = [item] + session.kept

    refined = refine_query_with(item, session, weights)
    session.active_query = refined
    session.cursor_query = refined
    session.page = 1
    session.queue = []
    session.generation += 1
    session.loading = True
    session.clear_status()
    session.touch()

    logger.info(
        "candidate_accepted",
        session_id=session.session_id,
        item_id=item.id,
        refined_query=refined,
        generation=session.generation,
    )
    return FetchPlan(refined, 1, EnqueueMode.REPLACE, session.generation)


def reject(session: Session, slot: int) -> Item:
    """
    Drop the item in ``slot``. No scoring, no query change.

    Raises:
        IndexError: If the slot is empty
    """
    item = _take_slot(session, slot)
    session.clear_status()
    session.touch()
    logger.info(
        "candidate_rejected",
        session_id=session.session_id,
        item_id=item.id,
        queue_size=len(session.queue),
    )
    return item


def begin_analysis(session: Session, text: str) -> int:
    """
    Start an analyze-and-search cycle for freshly submitted text.

    Clears the queue and the window (shown items stay seen) and restarts
    paging. The submitted text becomes the user's visible text.

    Returns:
        The new generation, owned by this cycle
    """
    session.generation += 1
    session.visible_text = text
    session.page = 1
    session.queue = []
    session.visible = []
    session.loading = True
    session.clear_status()
    session.touch()
    return session.generation


def manual_research(session: Session, text: str) -> FetchPlan:
    """Full reset onto ``text``: queue, window, kept and seen are all cleared."""
    session.generation += 1
    session.visible_text = text
    session.active_query = text
    session.cursor_query = text
    session.page = 1
    session.queue = []
    session.visible = []
    session.kept = []
    session.seen = set()
    session.loading = True
    session.clear_status()
    session.touch()
    logger.info(
        "manual_research",
        session_id=session.session_id,
        query=text,
        generation=session.generation,
    )
    return FetchPlan(text, 1, EnqueueMode.REPLACE, session.generation)


def prefetch_plan(session: Session, threshold: int) -> Optional[FetchPlan]:
    """Low-queue prefetch: next page of the current cursor, never a refinement."""
    if len(session.queue) >= threshold or session.fetch_in_flight:
        return None
    return FetchPlan(
        session.cursor_query, session.page + 1, EnqueueMode.APPEND, session.generation
    )


def after_transition(session: Session, prefetch_threshold: Optional[int] = None) -> Optional[FetchPlan]:
    """
    Post-transition hook, run once per transition.

    Fills slots first, then evaluates the prefetch threshold when one is given.
    """
    fill_slots(session)
    if prefetch_threshold is None:
        return None
    return prefetch_plan(session, prefetch_threshold)
