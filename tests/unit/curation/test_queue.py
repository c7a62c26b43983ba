"""
Unit tests for the candidate queue and slot filling.

Tests coverage:
- enqueue_fresh: seen filtering, replace vs append, returned counts
- fill_slots: window bound, seen marking, defensive dedup, no-op identity
"""

import pytest

from moodboard_curator.curation.queue import EnqueueMode, enqueue_fresh, fill_slots, fresh_items
from moodboard_curator.models.session import SLOT_COUNT, Session
from tests.fakes import make_item, make_items


@pytest.fixture
def session() -> Session:
    return Session(session_id="q", active_query="rain")


def _ids(items):
    return [item.id for item in items]


# ============================================================================
# Test Class: EnqueueFresh
# ============================================================================


@pytest.mark.unit
class TestEnqueueFresh:
    """Tests for enqueue_fresh."""

    def test_replace_sets_queue_to_survivors(self, session):
        session.queue = make_items("old1", "old2")
        session.seen = {"b"}

        added = enqueue_fresh(session, make_items("a", "b", "c"), EnqueueMode.REPLACE)

        assert added == 2
        assert _ids(session.queue) == ["a", "c"]

    def test_replace_dedups_within_batch(self, session):
        added = enqueue_fresh(session, make_items("a", "a", "b"), EnqueueMode.REPLACE)
        assert added == 2
        assert _ids(session.queue) == ["a", "b"]

    def test_append_skips_queued_and_seen(self, session):
        session.queue = make_items("a", "b")
        session.seen = {"c"}

        added = enqueue_fresh(session, make_items("b", "c", "d", "e"), EnqueueMode.APPEND)

        assert added == 2
        assert _ids(session.queue) == ["a", "b", "d", "e"]

    def test_append_nothing_new_returns_zero_and_keeps_queue(self, session):
        session.queue = make_items("a")
        before = session.queue

        added = enqueue_fresh(session, make_items("a"), EnqueueMode.APPEND)

        assert added == 0
        assert session.queue is before

    def test_identity_is_id_not_fields(self, session):
        session.seen = {"a"}
        drifted = make_item("a", title="Different title now")
        assert enqueue_fresh(session, [drifted], EnqueueMode.APPEND) == 0

    def test_fresh_items_preserves_arrival_order(self, session):
        session.seen = {"b"}
        assert _ids(fresh_items(session, make_items("c", "b", "a"))) == ["c", "a"]


# ============================================================================
# Test Class: FillSlots
# ============================================================================


@pytest.mark.unit
class TestFillSlots:
    """Tests for fill_slots."""

    def test_fills_to_slot_count(self, session):
        session.queue = make_items("a", "b", "c", "d", "e")

        placed = fill_slots(session)

        assert placed == SLOT_COUNT
        assert _ids(session.visible) == ["a", "b", "c"]
        assert _ids(session.queue) == ["d", "e"]
        assert session.seen == {"a", "b", "c"}

    def test_partial_fill_when_queue_short(self, session):
        session.visible = make_items("a")
        session.seen = {"a"}
        session.queue = make_items("b")

        assert fill_slots(session) == 1
        assert _ids(session.visible) == ["a", "b"]
        assert session.queue == []

    def test_discards_seen_and_visible_duplicates(self, session):
        session.visible = make_items("a")
        session.seen = {"a", "x"}
        session.queue = make_items("x", "a", "b", "c")

        assert fill_slots(session) == 2
        assert _ids(session.visible) == ["a", "b", "c"]
        assert session.queue == []

    def test_noop_when_full(self, session):
        session.visible = make_items("a", "b", "c")
        session.queue = make_items("d")
        before = (session.visible, session.queue, session.seen, session.revision)

        assert fill_slots(session) == 0
        assert (session.visible, session.queue, session.seen, session.revision) == before
        assert session.visible is before[0]
        assert session.queue is before[1]
        assert session.seen is before[2]

    def test_noop_when_queue_empty(self, session):
        session.visible = make_items("a")
        before_visible, before_seen, before_revision = session.visible, session.seen, session.revision

        assert fill_slots(session) == 0
        assert session.visible is before_visible
        assert session.seen is before_seen
        assert session.revision == before_revision

    def test_single_batched_update(self, session):
        session.queue = make_items("a", "b", "c")
        revision = session.revision

        fill_slots(session)

        assert session.revision == revision + 1

    def test_window_never_exceeds_slot_count(self, session):
        session.queue = make_items(*[f"i{n}" for n in range(10)])
        for _ in range(4):
            fill_slots(session)
            assert len(session.visible) <= SLOT_COUNT
