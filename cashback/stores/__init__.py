"""Cashback Stores - incremental, filterable store listing client."""

from .config import ListingConfig
from .core import (
    ALPHABET_LABELS,
    AmountType,
    ConfigError,
    DecodeError,
    FetchError,
    RateType,
    SortBy,
    StoresError,
    StoreStatus,
    TransportError,
)
from .models import Anchor, FilterSelection, NameFilter, PageState, Store, Substring
from .api import CanonicalQuery, FilterPanel, QueryBuilder, build_query, selection_from_query
from .utils import HTTPClient
from .runtime import (
    AdvanceToken,
    InMemoryLocation,
    Location,
    PageFetcher,
    PageResult,
    ScrollTrigger,
    VisibilityEntry,
    visible_ratio,
)
from .clients import ListController

__version__ = "0.1.0"

__all__ = [
    # Config
    "ListingConfig",
    # Enums
    "ALPHABET_LABELS",
    "AmountType",
    "RateType",
    "SortBy",
    "StoreStatus",
    # Exceptions
    "StoresError",
    "FetchError",
    "TransportError",
    "DecodeError",
    "ConfigError",
    # Models
    "Anchor",
    "FilterSelection",
    "NameFilter",
    "PageState",
    "Store",
    "Substring",
    # Query construction
    "CanonicalQuery",
    "FilterPanel",
    "QueryBuilder",
    "build_query",
    "selection_from_query",
    # Runtime
    "AdvanceToken",
    "HTTPClient",
    "InMemoryLocation",
    "Location",
    "PageFetcher",
    "PageResult",
    "ScrollTrigger",
    "VisibilityEntry",
    "visible_ratio",
    # Controller
    "ListController",
]
