"""Core enumerations shared by the query builder, models and filter panel.

Architecture:
    String enums so values round-trip through query strings and JSON bodies
    without custom encoders. The wire values match the collection endpoint's
    column values (`rate_type`, `amount_type`) and the filter panel's option
    values (`status`, `sort_by`).

Key Types:
    - StoreStatus: Publication window a store listing is filtered by
    - SortBy: Ordering applied to the collection
    - RateType / AmountType: How a store's cashback offer is expressed
"""

from __future__ import annotations

from enum import Enum
from string import ascii_uppercase


class StoreStatus(str, Enum):
    """Status filter offered by the listing."""

    ACTIVE = "active"
    COMING_SOON = "coming_soon"
    DISCONTINUED = "discontinued"


class SortBy(str, Enum):
    """Sort order offered by the listing."""

    ALPHABETICAL = "alphabetical"
    POPULARITY = "popularity"
    CASHBACK = "cashback"


class RateType(str, Enum):
    """Whether the cashback amount is a ceiling or a fixed rate."""

    UPTO = "upto"
    FLAT = "flat"


class AmountType(str, Enum):
    """Unit of the cashback amount."""

    FIXED = "fixed"
    PERCENT = "percent"


# Alphabet index labels, in display order
ALL_LABEL = "All"
DIGIT_LABEL = "0-9"
ALPHABET_LABELS: tuple[str, ...] = (ALL_LABEL, DIGIT_LABEL, *ascii_uppercase)
