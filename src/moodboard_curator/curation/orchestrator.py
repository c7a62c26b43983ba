"""
Curation orchestrator.

Drives the accept / reject / re-query lifecycle of one Session:
1. Applies a state-machine transition (synchronous)
2. Executes the fetch it requested against the image-search provider
3. Runs the post-transition hook (fill slots, then prefetch threshold)

The analyze-and-search cycle races an optimistic fetch of the raw text
against a timeout-bounded enrichment call. Two separate mechanisms keep it
correct:
- a hard timeout that aborts the enrichment call
- a generation check that gates every async result, successes included
"""

import asyncio
import uuid
from typing import List, Optional

import structlog

from ..config import Settings, settings
from ..errors import NO_MATCHES_MESSAGE, CurationError, RateLimited
from ..models.api_models import SessionView
from ..models.items import Item
from ..models.session import Session
from ..providers.enrichment import EnrichmentClient, EnrichmentResult
from ..providers.image_search import ImageSearchProvider
from . import state_machine
from .queue import EnqueueMode, enqueue_fresh, fill_slots, fresh_items
from .scoring import RefinementWeights
from .state_machine import FetchPlan


logger = structlog.get_logger(__name__)


def _normalize_query(query: str) -> str:
    return " ".join(query.lower().split())


class CurationOrchestrator:
    """
    Single owner of a curation Session.

    All mutations happen on the event loop between awaits, so no locks are
    needed: ordering is enforced by ``session.generation`` and the
    ``session.fetch_in_flight`` guard.
    """

    def __init__(
        self,
        session: Session,
        image_search: ImageSearchProvider,
        enrichment: EnrichmentClient,
        weights: Optional[RefinementWeights] = None,
        config: Optional[Settings] = None,
    ):
        self.session = session
        self.image_search = image_search
        self.enrichment = enrichment
        self.config = config or settings
        self.weights = weights or RefinementWeights.from_settings(self.config)

        self.logger = logger.bind(session_id=session.session_id)

    @classmethod
    def create(
        cls,
        image_search: ImageSearchProvider,
        enrichment: EnrichmentClient,
        seed_query: Optional[str] = None,
        **kwargs,
    ) -> "CurationOrchestrator":
        """Build an orchestrator around a fresh session seeded with ``seed_query``."""
        config = kwargs.get("config") or settings
        seed = (seed_query or "").strip() or config.default_seed_query
        session = Session(session_id=uuid.uuid4().hex, active_query=seed)
        return cls(session, image_search, enrichment, **kwargs)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Issue the seed fetch into an empty window."""
        plan = state_machine.begin(self.session)
        try:
            await self._execute(plan)
        finally:
            self._finish_cycle(plan.generation)

    async def accept(self, slot: int) -> Item:
        """
        Keep the candidate in ``slot`` and fetch candidates for the refined query.

        Raises:
            IndexError: If the slot is empty
        """
        plan = state_machine.accept(self.session, slot, self.weights)
        item = self.session.kept[0]
        try:
            await self._execute(plan)
        finally:
            self._finish_cycle(plan.generation)
        return item

    async def reject(self, slot: int) -> Item:
        """
        Drop the candidate in ``slot``; prefetch the next page when the queue runs low.

        Raises:
            IndexError: If the slot is empty
        """
        item = state_machine.reject(self.session, slot)
        plan = state_machine.after_transition(self.session, self.config.low_queue_threshold)
        if plan is not None:
            self.logger.debug("low_queue_prefetch", page=plan.page, queue_size=len(self.session.queue))
            await self._execute(plan)
        return item

    async def manual_research(self, text: str) -> None:
        """
        Full reset onto ``text``.

        Raises:
            PermissionError: If manual research is disabled
        """
        if not self.config.enable_manual_research:
            raise PermissionError("manual research is disabled")
        plan = state_machine.manual_research(self.session, text.strip())
        try:
            await self._execute(plan)
        finally:
            self._finish_cycle(plan.generation)

    async def analyze_and_search(self, text: str) -> None:
        """
        Optimistic fetch of the raw text, raced against enrichment.

        The optimistic results stand unless a still-current enrichment yields
        a refined query whose fetch has fresh items. Enrichment timeouts and
        failures are absorbed silently.
        """
        text = text.strip()
        my_gen = state_machine.begin_analysis(self.session, text)
        self.logger.info("analysis_started", text=text, generation=my_gen)

        enrichment_task = asyncio.create_task(self._enrich(text))
        try:
            optimistic_count = await self._execute(
                FetchPlan(text, 1, EnqueueMode.REPLACE, my_gen)
            )
            result = await enrichment_task
            if self._is_stale(my_gen, "enrichment"):
                return
            await self._apply_enrichment(text, result, optimistic_count, my_gen)
        finally:
            if not enrichment_task.done():
                enrichment_task.cancel()
            self._finish_cycle(my_gen)

    def snapshot(self) -> SessionView:
        """Render-ready view of the session."""
        return SessionView.from_session(self.session)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_stale(self, generation: int, source: str) -> bool:
        if generation == self.session.generation:
            return False
        self.logger.info(
            "stale_result_discarded",
            source=source,
            result_generation=generation,
            current_generation=self.session.generation,
        )
        return True

    def _finish_cycle(self, generation: int) -> None:
        """Clear the loading indicator, unless a newer cycle owns it."""
        if generation == self.session.generation and self.session.loading:
            self.session.loading = False
            self.session.touch()

    def _record_error(self, error: CurationError) -> None:
        self.session.error = error.user_message()
        self.session.retry_after = error.retry_after if isinstance(error, RateLimited) else None
        self.session.touch()

    async def _fetch(self, query: str, page: int, generation: int) -> Optional[List[Item]]:
        """
        One guarded provider call.

        Returns None when skipped (another fetch in flight), failed (error
        recorded on the session) or stale (a newer cycle started meanwhile).
        """
        if self.session.fetch_in_flight:
            self.logger.debug("fetch_skipped_in_flight", query=query, page=page)
            return None

        self.session.fetch_in_flight = True
        self.logger.debug("fetch_started", query=query, page=page, generation=generation)
        try:
            items = await self.image_search.search(query, page)
        except CurationError as e:
            self.logger.warning(
                "fetch_failed",
                query=query,
                page=page,
                error=str(e),
                error_type=type(e).__name__,
            )
            if not self._is_stale(generation, "fetch_error"):
                self._record_error(e)
            return None
        finally:
            self.session.fetch_in_flight = False

        if self._is_stale(generation, "fetch"):
            return None
        return items

    async def _execute(self, plan: FetchPlan) -> Optional[int]:
        """
        Run a FetchPlan and merge its results.

        Returns:
            Count of fresh items queued, or None if the fetch did not land
        """
        items = await self._fetch(plan.query, plan.page, plan.generation)
        if items is None:
            return None

        added = enqueue_fresh(self.session, items, plan.mode)
        self.session.page = plan.page
        self.session.cursor_query = plan.query
        state_machine.after_transition(self.session)

        self.logger.info(
            "fetch_completed",
            query=plan.query,
            page=plan.page,
            mode=plan.mode.value,
            received=len(items),
            added=added,
            visible=len(self.session.visible),
            queue_size=len(self.session.queue),
        )
        return added

    async def _enrich(self, text: str) -> Optional[EnrichmentResult]:
        """Enrichment bounded by a hard timeout. Failures resolve to None."""
        kept_titles = self.session.kept_titles(self.config.enrichment_max_kept_titles)
        timeout = self.config.enrichment_timeout_seconds
        try:
            return await asyncio.wait_for(
                self.enrichment.enrich(text, kept_titles), timeout=timeout
            )
        except asyncio.TimeoutError:
            self.logger.info("enrichment_timed_out", timeout_seconds=timeout)
        except CurationError as e:
            self.logger.info(
                "enrichment_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
        return None

    async def _apply_enrichment(
        self,
        text: str,
        result: Optional[EnrichmentResult],
        optimistic_count: Optional[int],
        generation: int,
    ) -> None:
        """
        Commit a refined query when its fetch has fresh items.

        ``optimistic_count`` is None when the optimistic fetch did not land
        (failed or skipped); only a landed, empty optimistic fetch counts
        towards the no-matches message. An error already on the status line
        is never replaced.
        """
        refined = result.refined_query.strip() if result is not None else ""
        if not refined:
            return

        if self.session.retry_after is not None:
            # Rate limited this cycle: no further provider calls
            return

        if _normalize_query(refined) == _normalize_query(text):
            if optimistic_count is not None:
                # Same query as the optimistic fetch: its results already stand.
                self.session.active_query = refined
                if optimistic_count == 0 and self.session.error is None:
                    self.session.error = NO_MATCHES_MESSAGE
                self.session.touch()
                return
            if self.session.error is not None:
                return
            # Optimistic fetch was skipped by the in-flight guard: fetch it now

        items = await self._fetch(refined, 1, generation)
        if items is None:
            return

        fresh = fresh_items(self.session, items)
        if fresh:
            self.session.visible = []
            enqueue_fresh(self.session, fresh, EnqueueMode.REPLACE)
            self.session.page = 1
            self.session.active_query = refined
            self.session.cursor_query = refined
            fill_slots(self.session)
            self.logger.info("refined_results_committed", refined_query=refined, fresh=len(fresh))
        elif optimistic_count == 0 and self.session.error is None:
            self.session.error = NO_MATCHES_MESSAGE
            self.session.touch()
            self.logger.info("no_matches", text=text, refined_query=refined)
