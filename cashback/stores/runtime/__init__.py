"""Runtime collaborators of the list controller."""

from .fetcher import PageFetcher, PageResult
from .location import InMemoryLocation, Location
from .scroll import AdvanceToken, ScrollTrigger, VisibilityEntry, visible_ratio

__all__ = [
    "AdvanceToken",
    "InMemoryLocation",
    "Location",
    "PageFetcher",
    "PageResult",
    "ScrollTrigger",
    "VisibilityEntry",
    "visible_ratio",
]
