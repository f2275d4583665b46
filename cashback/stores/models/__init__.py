"""Data models for the store listing.

Architecture:
    `Store` is a Pydantic v2 model decoded from the collection endpoint and
    frozen so loaded pages cannot be modified in place. Selections are frozen
    dataclasses (pure value objects, never decoded from JSON). `PageState` is
    the only mutable model and belongs to the list controller.
"""

from .page_state import PageState
from .selection import DIGIT_ANCHOR, Anchor, FilterSelection, NameFilter, Substring
from .store import Store

__all__ = [
    "Anchor",
    "DIGIT_ANCHOR",
    "FilterSelection",
    "NameFilter",
    "PageState",
    "Store",
    "Substring",
]
