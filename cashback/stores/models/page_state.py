"""Pagination state owned by the list controller."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .store import Store

if TYPE_CHECKING:
    from ..api.query_builder import CanonicalQuery


@dataclass
class PageState:
    """Mutable listing state.

    Only `ListController` mutates this object; the scroll trigger and the view
    read `loading`, `has_more`, `items` and `error`.

    Attributes:
        items: Loaded stores, unique by id, in first-seen order
        page_number: Last successfully applied page (1 before any load)
        has_more: False once a short page has been applied
        loading: True while the current query's fetch is outstanding
        error: Message of the last failed fetch, cleared on reset
        active_query: Filter portion of the query the items belong to
    """

    active_query: CanonicalQuery
    items: list[Store] = field(default_factory=list)
    page_number: int = 1
    has_more: bool = True
    loading: bool = False
    error: str | None = None

    @property
    def item_ids(self) -> list[int | str]:
        return [store.id for store in self.items]

    @property
    def last_item(self) -> Store | None:
        return self.items[-1] if self.items else None

    def reset(self, query: CanonicalQuery) -> None:
        """Forget loaded pages and adopt a new active query."""
        self.active_query = query
        self.items = []
        self.page_number = 1
        self.has_more = True
        self.loading = False
        self.error = None

    def begin(self) -> None:
        self.loading = True

    def apply_page(self, page: int, stores: Iterable[Store], has_more: bool) -> int:
        """Apply a successfully fetched page.

        Page 1 replaces the items; later pages are appended, skipping ids
        that are already present.

        Returns:
            Number of stores actually added
        """
        base = [] if page == 1 else self.items
        seen = {store.id for store in base}
        merged = list(base)
        for store in stores:
            if store.id in seen:
                continue
            seen.add(store.id)
            merged.append(store)

        added = len(merged) - len(base)
        self.items = merged
        self.page_number = page
        self.has_more = has_more
        self.loading = False
        self.error = None
        return added

    def fail(self, page: int, message: str) -> None:
        """Record a failed fetch; later-page failures keep loaded items."""
        if page == 1:
            self.items = []
        self.loading = False
        self.error = message
