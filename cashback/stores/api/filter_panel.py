"""Filter-input source.

`FilterPanel` holds the selection behind the filter widgets (alphabet index,
search box, cashback checkbox, sort and status dropdowns) and notifies its
listeners with the complete new selection on every user change. The list
controller subscribes to it; views drive it from widget events.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.enums import ALPHABET_LABELS, SortBy, StoreStatus
from ..models.selection import FilterSelection
from .query_builder import CanonicalQuery, selection_from_query

logger = logging.getLogger(__name__)

SelectionListener = Callable[[FilterSelection], object]


class FilterPanel:
    """Selection state behind the filter widgets."""

    def __init__(self, selection: FilterSelection | None = None) -> None:
        self._selection = selection or FilterSelection()
        self._listeners: list[SelectionListener] = []

    @property
    def selection(self) -> FilterSelection:
        return self._selection

    @property
    def selected_letter(self) -> str:
        return self._selection.selected_letter

    @property
    def search_text(self) -> str:
        return self._selection.search_text

    def on_change(self, listener: SelectionListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # ----------------------
    # User interactions
    # ----------------------
    def select_letter(self, label: str) -> FilterSelection:
        if label not in ALPHABET_LABELS:
            raise ValueError(f"Unknown alphabet label '{label}'")
        return self._update(self._selection.with_letter(label))

    def search(self, text: str) -> FilterSelection:
        return self._update(self._selection.with_search(text))

    def set_cashback_only(self, enabled: bool) -> FilterSelection:
        return self._update(self._selection.with_flags(cashback_only=enabled))

    def set_promoted_only(self, enabled: bool) -> FilterSelection:
        return self._update(self._selection.with_flags(promoted_only=enabled))

    def set_sharable_only(self, enabled: bool) -> FilterSelection:
        return self._update(self._selection.with_flags(sharable_only=enabled))

    def set_status(self, status: StoreStatus | str) -> FilterSelection:
        return self._update(self._selection.with_status(status))

    def set_sort(self, sort_by: SortBy | str) -> FilterSelection:
        return self._update(self._selection.with_sort(sort_by))

    # ----------------------
    # Location sync
    # ----------------------
    def sync(self, query: CanonicalQuery) -> None:
        """Adopt the selection encoded in `query` without notifying listeners."""
        self.adopt(selection_from_query(query))

    def adopt(self, selection: FilterSelection) -> None:
        self._selection = selection

    def _update(self, selection: FilterSelection) -> FilterSelection:
        self._selection = selection
        logger.debug("filter_selection_changed", extra={"selection": repr(selection)})
        for listener in list(self._listeners):
            listener(selection)
        return selection
