"""Location (URL search string) reflection.

The location is a projection of the controller's filter state: the
controller writes it with replace semantics on user-driven changes and reads
it once at startup. Navigation that changes it externally (back/forward,
followed links) is delivered to subscribers, mirroring `popstate`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

NavigationListener = Callable[[str], object]


class Location(Protocol):
    """Protocol for the browsing-history location the listing reflects into."""

    @property
    def search(self) -> str:
        """Current search string, without the leading "?"."""
        ...

    def replace(self, search: str) -> None:
        """Overwrite the current entry; does not notify subscribers."""
        ...

    def subscribe(self, listener: NavigationListener) -> Callable[[], None]:
        """Register for external navigation; returns an unsubscribe callable."""
        ...


class InMemoryLocation:
    """History stack kept in memory.

    `push`, `back` and `forward` simulate navigation the listing did not
    cause and notify subscribers; `replace` rewrites the current entry
    silently, like `history.replaceState`.
    """

    def __init__(self, search: str = "") -> None:
        self._entries: list[str] = [search.lstrip("?")]
        self._index = 0
        self._listeners: list[NavigationListener] = []

    @property
    def search(self) -> str:
        return self._entries[self._index]

    @property
    def history_length(self) -> int:
        return len(self._entries)

    def replace(self, search: str) -> None:
        self._entries[self._index] = search.lstrip("?")

    def push(self, search: str) -> None:
        # A new entry truncates any forward history
        del self._entries[self._index + 1 :]
        self._entries.append(search.lstrip("?"))
        self._index += 1
        self._notify()

    def back(self) -> bool:
        if self._index == 0:
            return False
        self._index -= 1
        self._notify()
        return True

    def forward(self) -> bool:
        if self._index >= len(self._entries) - 1:
            return False
        self._index += 1
        self._notify()
        return True

    def subscribe(self, listener: NavigationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.search)
