"""Incremental-fetch controller for the store listing.

This turns a changing filter selection into a paginated, deduplicated query
stream against the store collection and keeps the location bar in step:

- start/close lifecycle (mount/unmount of the listing view)
- filter changes from the filter panel, the category selector and location
  navigation all funnel into one reset-and-refetch path
- scroll advances from the `ScrollTrigger` load the next page
- every fetch is tagged with the generation of the query it was issued for;
  results for superseded generations are dropped on arrival

Notes:
- Cancellation on reset is advisory: a superseded fetch keeps running and its
  result is ignored. Only `close()` cancels outstanding fetches.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from time import perf_counter
from typing import Protocol

from ..api.filter_panel import FilterPanel
from ..api.query_builder import CATEGORY_PARAM, CanonicalQuery, QueryBuilder
from ..config import ListingConfig
from ..core.exceptions import FetchError, StoresError
from ..models.page_state import PageState
from ..models.selection import FilterSelection
from ..models.store import Store
from ..runtime.fetcher import PageResult
from ..runtime.location import InMemoryLocation, Location
from ..runtime.scroll import ScrollTrigger
from ..runtime.telemetry import (
    log_listing_reset,
    log_page_fetch_completed,
    log_page_fetch_error,
    log_page_fetch_started,
    log_stale_page_discarded,
)

logger = logging.getLogger(__name__)


class PageSource(Protocol):
    """What the controller needs from a page fetcher."""

    async def fetch(self, query: CanonicalQuery, page: int) -> PageResult: ...


class ListController:
    """Owns the listing's pagination state and drives page fetches."""

    def __init__(
        self,
        fetcher: PageSource,
        *,
        config: ListingConfig | None = None,
        builder: QueryBuilder | None = None,
        location: Location | None = None,
        panel: FilterPanel | None = None,
        category: str | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            fetcher: Page source (normally a PageFetcher)
            config: Listing configuration (trigger timings, recency window)
            builder: Query builder; defaults to one on the wall clock
            location: Location to seed from and reflect into
            panel: Filter-input source to subscribe to
            category: Category preselected by the category selector
        """
        self._config = config or ListingConfig()
        self._fetcher = fetcher
        self._builder = builder or QueryBuilder(
            discontinued_window_days=self._config.discontinued_window_days,
            timestamp_resolution=self._config.timestamp_resolution,
        )
        self._location: Location = location or InMemoryLocation()
        self._panel = panel or FilterPanel()
        self._initial_category = category

        self._state = PageState(active_query=CanonicalQuery())
        self._selection = FilterSelection()
        self._generation = 0
        self._fetches: set[asyncio.Task] = set()

        self._trigger = ScrollTrigger(
            is_loading=lambda: self._state.loading,
            has_more=lambda: self._state.has_more,
            threshold=self._config.visibility_threshold,
            root_margin_px=self._config.root_margin_px,
            settle_delay=self._config.settle_delay,
        )
        self._scheduler_task: asyncio.Task | None = None
        self._unsubscribers: list[Callable[[], None]] = []
        self._started = False
        self._closed = False

    # ----------------------
    # Read-only views
    # ----------------------
    @property
    def state(self) -> PageState:
        return self._state

    @property
    def items(self) -> list[Store]:
        return self._state.items

    @property
    def selection(self) -> FilterSelection:
        return self._selection

    @property
    def active_query(self) -> CanonicalQuery:
        return self._state.active_query

    @property
    def trigger(self) -> ScrollTrigger:
        return self._trigger

    @property
    def panel(self) -> FilterPanel:
        return self._panel

    @property
    def location(self) -> Location:
        return self._location

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_running(self) -> bool:
        return self._started and not self._closed

    # ----------------------
    # Lifecycle
    # ----------------------
    async def start(self) -> None:
        """Mount: seed from the location and load page 1."""
        if self._started:
            return
        if self._closed:
            raise StoresError("ListController is closed")
        self._started = True

        query, selection = self._builder.parse(self._location.search)
        if self._initial_category:
            selection = selection.with_category(self._initial_category)

        if not query:
            # Nothing to seed from: reflect the default selection
            query = self._builder.build(selection)
        elif self._initial_category:
            query = query.with_param(CATEGORY_PARAM, self._initial_category)
        if query.to_query_string() != self._location.search:
            self._location.replace(query.to_query_string())

        self._selection = selection
        self._panel.adopt(selection)
        self._unsubscribers.append(self._panel.on_change(self.apply_filters))
        self._unsubscribers.append(self._location.subscribe(self.navigate))
        self._scheduler_task = asyncio.create_task(self._scheduler_loop())

        self._reset(query, reason="mount")

    async def close(self) -> None:
        """Unmount: stop observing and discard anything still in flight."""
        if self._closed:
            return
        self._closed = True
        self._trigger.close()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

        tasks = list(self._fetches)
        if self._scheduler_task is not None:
            tasks.append(self._scheduler_task)
        for task in tasks:
            if not task.done():
                task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._fetches.clear()
        self._scheduler_task = None

    async def wait_idle(self) -> None:
        """Wait until no fetch is outstanding."""
        while True:
            pending = [task for task in self._fetches if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    async def __aenter__(self) -> ListController:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ----------------------
    # Inputs
    # ----------------------
    def apply_filters(self, selection: FilterSelection) -> asyncio.Task | None:
        """User changed a filter: reflect it into the location and reload.

        Returns:
            The page-1 fetch task, or None when nothing changed
        """
        if not self.is_running:
            return None
        if selection == self._selection:
            self._panel.adopt(selection)
            return None
        query = self._builder.build(selection)
        self._selection = selection
        self._panel.adopt(selection)
        self._location.replace(query.to_query_string())
        if query == self._state.active_query:
            return None
        return self._reset(query, reason="filters")

    def set_category(self, category: str | None) -> asyncio.Task | None:
        """Category selector changed; the name filter is left as is."""
        return self.apply_filters(self._selection.with_category(category))

    def navigate(self, search: str) -> asyncio.Task | None:
        """Location changed externally (back/forward, followed link)."""
        if not self.is_running:
            return None
        query = CanonicalQuery.parse(search).filter_portion()
        if query == self._state.active_query:
            return None
        self._panel.sync(query)
        self._selection = self._panel.selection
        return self._reset(query, reason="navigation")

    def load_next_page(self) -> asyncio.Task | None:
        """Advance to the next page if allowed.

        Returns:
            The fetch task, or None when loading, exhausted or in error
        """
        if not self.is_running:
            return None
        state = self._state
        if state.loading or not state.has_more or state.error is not None:
            return None
        return self._spawn_fetch(state.page_number + 1)

    def retry(self) -> asyncio.Task | None:
        """Explicit retry: reload the active query from page 1."""
        if not self.is_running:
            return None
        return self._reset(self._state.active_query, reason="retry")

    # ----------------------
    # Internals
    # ----------------------
    def _reset(self, query: CanonicalQuery, *, reason: str) -> asyncio.Task:
        self._generation += 1
        self._trigger.detach()
        self._state.reset(query)
        log_listing_reset(generation=self._generation, query=str(query), reason=reason)
        return self._spawn_fetch(1)

    def _spawn_fetch(self, page: int) -> asyncio.Task:
        query = self._state.active_query
        generation = self._generation
        self._state.begin()
        task = asyncio.get_running_loop().create_task(self._run_fetch(page, query, generation))
        self._fetches.add(task)
        task.add_done_callback(self._fetches.discard)
        return task

    def _is_stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    async def _run_fetch(self, page: int, query: CanonicalQuery, generation: int) -> None:
        log_page_fetch_started(page=page, generation=generation, query=str(query))
        started = perf_counter()
        try:
            result = await self._fetcher.fetch(query, page)
        except FetchError as e:
            self._fail_page(page, generation, e, str(e))
            return
        except Exception as e:
            # Any other page-source failure ends the load the same way
            logger.exception(
                "page_fetch_unexpected_error", extra={"page": page, "generation": generation}
            )
            self._fail_page(
                page, generation, e, f"Failed to fetch stores: {str(e) or type(e).__name__}"
            )
            return

        if self._is_stale(generation):
            log_stale_page_discarded(
                page=page, generation=generation, current_generation=self._generation
            )
            return

        added = self._state.apply_page(page, result.stores, result.has_more)
        log_page_fetch_completed(
            page=page,
            generation=generation,
            rows_received=len(result.stores),
            rows_added=added,
            has_more=result.has_more,
            latency_ms=(perf_counter() - started) * 1000.0,
        )
        self._reattach_trigger()

    def _fail_page(self, page: int, generation: int, error: Exception, message: str) -> None:
        if self._is_stale(generation):
            log_stale_page_discarded(
                page=page, generation=generation, current_generation=self._generation
            )
            return
        log_page_fetch_error(
            page=page,
            generation=generation,
            error_type=type(error).__name__,
            error_message=message,
        )
        self._state.fail(page, message)
        self._trigger.detach()

    def _reattach_trigger(self) -> None:
        last = self._state.last_item
        if last is not None and self._state.has_more:
            self._trigger.attach(last.id)
        else:
            self._trigger.detach()

    async def _scheduler_loop(self) -> None:
        while True:
            token = await self._trigger.next_advance()
            if token is None:
                return
            if token.attach_count != self._trigger.attach_count:
                # Sentinel was replaced after the token was emitted
                continue
            if self.load_next_page() is None:
                logger.debug("scroll_advance_ignored", extra={"target": repr(token.target)})
