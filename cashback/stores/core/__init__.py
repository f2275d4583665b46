"""Core components."""

from .enums import (
    ALL_LABEL,
    ALPHABET_LABELS,
    DIGIT_LABEL,
    AmountType,
    RateType,
    SortBy,
    StoreStatus,
)
from .exceptions import (
    ConfigError,
    DecodeError,
    FetchError,
    StoresError,
    TransportError,
)

__all__ = [
    "ALL_LABEL",
    "ALPHABET_LABELS",
    "DIGIT_LABEL",
    "AmountType",
    "RateType",
    "SortBy",
    "StoreStatus",
    "StoresError",
    "FetchError",
    "TransportError",
    "DecodeError",
    "ConfigError",
]
