"""
Candidate queue and slot filling.

The queue is an ordered FIFO of not-yet-shown items, deduplicated by id.
Slot filling moves items from the queue head into the visible window and
marks them seen in the same committed update.
"""

from enum import Enum
from typing import Iterable, List, Set

import structlog

from ..models.items import Item
from ..models.session import SLOT_COUNT, Session


logger = structlog.get_logger(__name__)


class EnqueueMode(str, Enum):
    """How fresh provider results combine with the current queue."""

    REPLACE = "replace"
    APPEND = "append"


def fresh_items(session: Session, items: Iterable[Item]) -> List[Item]:
    """Items not yet seen, deduplicated by id, in arrival order."""
    survivors: List[Item] = []
    ids: Set[str] = set()
    for item in items:
        if item.id in session.seen or item.id in ids:
            continue
        ids.add(item.id)
        survivors.append(item)
    return survivors


def enqueue_fresh(session: Session, items: Iterable[Item], mode: EnqueueMode) -> int:
    """
    Merge freshly fetched items into the queue.

    Items already seen are dropped. In replace mode the queue becomes exactly
    the survivors; in append mode survivors not already queued are appended
    in arrival order.

    Args:
        session: Session to update
        items: Provider results
        mode: EnqueueMode.REPLACE or EnqueueMode.APPEND

    Returns:
        Number of items actually added to the queue
    """
    survivors = fresh_items(session, items)

    if mode is EnqueueMode.REPLACE:
        session.queue = survivors
        session.touch()
        return len(survivors)

    queued = {item.id for item in session.queue}
    added = [item for item in survivors if item.id not in queued]
    if added:
        session.queue = session.queue + added
        session.touch()
    return len(added)


def fill_slots(session: Session) -> int:
    """
    Top the visible window up to SLOT_COUNT from the queue head.

    Items whose id is already seen or visible are discarded. All moves are
    committed in one batch; when nothing leaves the queue the session is not
    touched at all, collection identities included.

    Returns:
        Number of items placed into the window
    """
    if len(session.visible) >= SLOT_COUNT or not session.queue:
        return 0

    queue = list(session.queue)
    visible = list(session.visible)
    seen = set(session.seen)
    visible_ids = {item.id for item in visible}
    placed = 0
    discarded = 0

    while len(visible) < SLOT_COUNT and queue:
        item = queue.pop(0)
        if item.id in seen or item.id in visible_ids:
            discarded += 1
            continue
        visible.append(item)
        visible_ids.add(item.id)
        seen.add(item.id)
        placed += 1

    session.queue = queue
    if placed:
        session.visible = visible
        session.seen = seen
    session.touch()

    if discarded:
        logger.debug(
            "queue_duplicates_discarded",
            session_id=session.session_id,
            discarded=discarded,
        )
    return placed
