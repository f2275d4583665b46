"""Canonical query construction for the store collection.

This module maps a `FilterSelection` onto the ordered query parameters the
collection endpoint understands, and back again when a selection has to be
seeded from a location string.

Architecture:
    - `build_query` is a pure function of (selection, now). Parameter order is
      fixed, so the resulting `CanonicalQuery` can be compared for equality
      and written to the location bar verbatim.
    - `QueryBuilder` binds `build_query` to a clock and the recency window;
      the list controller owns one and tests inject a frozen clock.
    - `selection_from_query` is the inverse used on startup and on
      back/forward navigation.

Parameter order:
    name_like, cashback_enabled, is_promoted, is_sharable, status bounds,
    _sort, _order, cats. Pagination (`_page`, `_limit`) is appended last by
    the page fetcher and is never part of the filter portion.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qsl, urlencode

from ..config import DISCONTINUED_WINDOW_DAYS, TIMESTAMP_RESOLUTION
from ..core.enums import SortBy, StoreStatus
from ..models.selection import DIGIT_ANCHOR, Anchor, FilterSelection, NameFilter, Substring

NAME_PARAM = "name_like"
CATEGORY_PARAM = "cats"
PAGE_PARAM = "_page"
LIMIT_PARAM = "_limit"
PAGINATION_PARAMS = frozenset({PAGE_PARAM, LIMIT_PARAM})

FLAG_PARAMS = {
    "cashback_only": "cashback_enabled",
    "promoted_only": "is_promoted",
    "sharable_only": "is_sharable",
}

DIGIT_PATTERN = "^[0-9]"
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_SORT_PARAMS: dict[SortBy, tuple[str, str]] = {
    SortBy.ALPHABETICAL: ("name", "asc"),
    SortBy.POPULARITY: ("clicks", "desc"),
    # Groups fixed and percent offers before ranking by amount
    SortBy.CASHBACK: ("amount_type,cashback_amount", "asc,desc"),
}


@dataclass(frozen=True)
class CanonicalQuery:
    """Ordered, immutable set of query parameters."""

    pairs: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> CanonicalQuery:
        return cls(tuple((str(name), str(value)) for name, value in pairs))

    @classmethod
    def parse(cls, search: str) -> CanonicalQuery:
        """Parse a location search string ("?a=1&b=2" or "a=1&b=2")."""
        return cls.from_pairs(parse_qsl(search.lstrip("?"), keep_blank_values=True))

    def to_query_string(self) -> str:
        return urlencode(self.pairs)

    def get(self, name: str, default: str | None = None) -> str | None:
        for key, value in self.pairs:
            if key == name:
                return value
        return default

    def names(self) -> list[str]:
        return [name for name, _ in self.pairs]

    def with_param(self, name: str, value: str) -> CanonicalQuery:
        """Replace `name` in place, or append it when absent."""
        if name not in self:
            return CanonicalQuery((*self.pairs, (name, str(value))))
        return CanonicalQuery(
            tuple((key, str(value)) if key == name else (key, v) for key, v in self.pairs)
        )

    def without(self, *names: str) -> CanonicalQuery:
        return CanonicalQuery(tuple(pair for pair in self.pairs if pair[0] not in names))

    def filter_portion(self) -> CanonicalQuery:
        return self.without(*PAGINATION_PARAMS)

    def with_page(self, page: int, limit: int) -> CanonicalQuery:
        if page < 1:
            raise ValueError("page must be >= 1")
        base = self.filter_portion()
        return CanonicalQuery((*base.pairs, (PAGE_PARAM, str(page)), (LIMIT_PARAM, str(limit))))

    def __contains__(self, name: object) -> bool:
        return any(key == name for key, _ in self.pairs)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def __str__(self) -> str:
        return self.to_query_string()


def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. 2024-05-01T10:00:00.000Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def floor_timestamp(moment: datetime, resolution: timedelta) -> datetime:
    """Floor `moment` to a multiple of `resolution` since the Unix epoch."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    if resolution <= timedelta(0):
        return moment
    return moment - (moment - _EPOCH) % resolution


def encode_name_filter(name_filter: NameFilter) -> str | None:
    if name_filter is None:
        return None
    if isinstance(name_filter, Anchor):
        return DIGIT_PATTERN if name_filter.is_digit else f"^{name_filter.letter}"
    return name_filter.text or None


def decode_name_filter(value: str | None) -> NameFilter:
    if not value:
        return None
    if value == DIGIT_PATTERN:
        return Anchor(DIGIT_ANCHOR)
    if len(value) == 2 and value[0] == "^" and value[1].isalpha():
        return Anchor(value[1])
    return Substring(value)


def build_query(
    selection: FilterSelection,
    *,
    now: datetime,
    discontinued_window: timedelta = timedelta(days=DISCONTINUED_WINDOW_DAYS),
) -> CanonicalQuery:
    """Map a selection to its canonical filter/sort parameters.

    Args:
        selection: Filter/sort choice
        now: Instant the status bounds are relative to
        discontinued_window: Width of the "discontinued" recency window

    Returns:
        CanonicalQuery without pagination parameters
    """
    pairs: list[tuple[str, str]] = []

    name_value = encode_name_filter(selection.name_filter)
    if name_value:
        pairs.append((NAME_PARAM, name_value))

    # Flags are only ever sent when set
    for attr, param in FLAG_PARAMS.items():
        if getattr(selection, attr):
            pairs.append((param, "1"))

    stamp = format_timestamp(now)
    if selection.status == StoreStatus.ACTIVE:
        pairs.append(("published_at_lte", stamp))
    elif selection.status == StoreStatus.COMING_SOON:
        pairs.append(("published_at_gte", stamp))
    elif selection.status == StoreStatus.DISCONTINUED:
        pairs.append(("updated_at_gte", format_timestamp(now - discontinued_window)))
        pairs.append(("updated_at_lte", stamp))

    sort_field, order = _SORT_PARAMS[selection.sort_by]
    pairs.append(("_sort", sort_field))
    pairs.append(("_order", order))

    if selection.category:
        pairs.append((CATEGORY_PARAM, selection.category))

    return CanonicalQuery(tuple(pairs))


def selection_from_query(query: CanonicalQuery) -> FilterSelection:
    """Recover the selection a query was built from.

    Unknown parameters are ignored and missing ones fall back to the
    selection defaults, so any location string yields a valid selection.
    """
    flags = {attr: query.get(param) == "1" for attr, param in FLAG_PARAMS.items()}

    if "published_at_gte" in query:
        status = StoreStatus.COMING_SOON
    elif "updated_at_gte" in query or "updated_at_lte" in query:
        status = StoreStatus.DISCONTINUED
    else:
        status = StoreStatus.ACTIVE

    sort_field = query.get("_sort") or ""
    if sort_field == "clicks":
        sort_by = SortBy.POPULARITY
    elif "cashback" in sort_field:
        sort_by = SortBy.CASHBACK
    else:
        sort_by = SortBy.ALPHABETICAL

    return FilterSelection(
        name_filter=decode_name_filter(query.get(NAME_PARAM)),
        status=status,
        sort_by=sort_by,
        category=query.get(CATEGORY_PARAM) or None,
        **flags,
    )


class QueryBuilder:
    """Builds canonical queries relative to an injectable clock.

    The clock is floored to `timestamp_resolution` seconds before it is
    stamped into the status bounds, so building the same selection twice
    within one resolution step yields the same query.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        *,
        discontinued_window_days: int = DISCONTINUED_WINDOW_DAYS,
        timestamp_resolution: float = TIMESTAMP_RESOLUTION,
    ) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))
        self._window = timedelta(days=discontinued_window_days)
        self._resolution = timedelta(seconds=timestamp_resolution)

    def now(self) -> datetime:
        """Build instant: the clock floored to the timestamp resolution."""
        return floor_timestamp(self._clock(), self._resolution)

    def build(self, selection: FilterSelection) -> CanonicalQuery:
        return build_query(selection, now=self.now(), discontinued_window=self._window)

    def parse(self, search: str) -> tuple[CanonicalQuery, FilterSelection]:
        """Split a location string into its filter query and selection."""
        query = CanonicalQuery.parse(search).filter_portion()
        return query, selection_from_query(query)
