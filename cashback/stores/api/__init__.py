"""Query construction and the filter-input source."""

from .filter_panel import FilterPanel
from .query_builder import (
    CanonicalQuery,
    QueryBuilder,
    build_query,
    floor_timestamp,
    format_timestamp,
    selection_from_query,
)

__all__ = [
    "CanonicalQuery",
    "FilterPanel",
    "QueryBuilder",
    "build_query",
    "floor_timestamp",
    "format_timestamp",
    "selection_from_query",
]
