"""Scroll-triggered page advancement.

The view reports how much of the sentinel element (the last rendered store)
is visible; the trigger turns qualifying reports into "advance" tokens on an
asyncio queue that the list controller's scheduler loop consumes.

Architecture:
    - One observed target at a time. `attach` always detaches first, so a
      settle scheduled for an earlier sentinel can never fire.
    - Edge-debounced: a qualifying report starts a settle timer; further
      reports are ignored until it fires, and it emits at most one token.
    - Gated on the controller's state through read-only callables
      (`is_loading`, `has_more`), checked both when the report arrives and
      again after the settle delay.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Hashable
from dataclasses import dataclass

from ..config import ROOT_MARGIN_PX, SETTLE_DELAY, VISIBILITY_THRESHOLD
from .telemetry import log_scroll_advance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VisibilityEntry:
    """Visibility report for an observed element.

    Attributes:
        target: Identifier of the element (the store id of the sentinel)
        ratio: Fraction of the element inside the margin-expanded viewport
    """

    target: Hashable
    ratio: float


@dataclass(frozen=True)
class AdvanceToken:
    """Request to load the next page, emitted for one sentinel."""

    target: Hashable
    attach_count: int


def visible_ratio(
    top: float,
    bottom: float,
    viewport_top: float,
    viewport_bottom: float,
    margin: float = 0.0,
) -> float:
    """Fraction of [top, bottom] inside the viewport expanded by `margin` on each side."""
    height = bottom - top
    if height <= 0:
        return 0.0
    overlap = min(bottom, viewport_bottom + margin) - max(top, viewport_top - margin)
    return max(0.0, min(1.0, overlap / height))


class ScrollTrigger:
    """Visibility observer for the sentinel element."""

    def __init__(
        self,
        *,
        is_loading: Callable[[], bool],
        has_more: Callable[[], bool],
        threshold: float = VISIBILITY_THRESHOLD,
        root_margin_px: float = ROOT_MARGIN_PX,
        settle_delay: float = SETTLE_DELAY,
    ) -> None:
        """Initialize the trigger.

        Args:
            is_loading: Returns True while a fetch is outstanding
            has_more: Returns False once the last page has been loaded
            threshold: Minimum visible ratio that counts as "reached"
            root_margin_px: Viewport expansion used by `observe_geometry`
            settle_delay: Seconds to wait before emitting
        """
        self._is_loading = is_loading
        self._has_more = has_more
        self._threshold = threshold
        self._root_margin = root_margin_px
        self._settle_delay = settle_delay

        self._target: Hashable | None = None
        self._attach_count = 0
        self._pending: asyncio.Task | None = None
        self._events: asyncio.Queue[AdvanceToken | None] = asyncio.Queue()
        self._closed = False

    @property
    def target(self) -> Hashable | None:
        return self._target

    @property
    def attach_count(self) -> int:
        return self._attach_count

    @property
    def is_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    # ----------------------
    # Observation
    # ----------------------
    def attach(self, target: Hashable) -> None:
        """Observe `target`, replacing the previous sentinel."""
        if self._closed:
            return
        self.detach()
        self._target = target
        self._attach_count += 1

    def detach(self) -> None:
        """Stop observing and drop any pending settle."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        self._target = None

    def observe(self, entry: VisibilityEntry) -> bool:
        """Handle a visibility report.

        Must be called from within a running event loop.

        Returns:
            True if a settle was started for this report
        """
        if self._closed or self._target is None or entry.target != self._target:
            return False
        if entry.ratio < self._threshold:
            return False
        if self.is_pending or not self._can_advance():
            return False

        self._pending = asyncio.get_running_loop().create_task(
            self._settle(self._target, self._attach_count)
        )
        return True

    def observe_geometry(
        self,
        target: Hashable,
        *,
        top: float,
        bottom: float,
        viewport_top: float,
        viewport_bottom: float,
    ) -> bool:
        """Report element/viewport geometry; the root margin is applied here."""
        ratio = visible_ratio(top, bottom, viewport_top, viewport_bottom, self._root_margin)
        return self.observe(VisibilityEntry(target=target, ratio=ratio))

    # ----------------------
    # Channel
    # ----------------------
    async def next_advance(self) -> AdvanceToken | None:
        """Wait for the next advance token; None once the trigger is closed."""
        if self._closed and self._events.empty():
            return None
        return await self._events.get()

    def close(self) -> None:
        """Detach and end the advance channel."""
        if self._closed:
            return
        self.detach()
        self._closed = True
        self._events.put_nowait(None)

    def _can_advance(self) -> bool:
        return self._has_more() and not self._is_loading()

    async def _settle(self, target: Hashable, attach_count: int) -> None:
        try:
            await asyncio.sleep(self._settle_delay)
            if self._closed or attach_count != self._attach_count or not self._can_advance():
                logger.debug("scroll_advance_suppressed", extra={"target": repr(target)})
                return
            self._events.put_nowait(AdvanceToken(target=target, attach_count=attach_count))
            log_scroll_advance(target=target, attach_count=attach_count)
        finally:
            if self._pending is asyncio.current_task():
                self._pending = None
