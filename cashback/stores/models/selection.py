"""Filter selection value objects.

Architecture:
    The search box and the alphabet index are two views of the same
    `name_like` filter, so the selection stores a single tagged variant
    (`Anchor | Substring | None`) instead of two fields kept in sync by
    convention. Every `with_*` method returns a new selection; the value
    itself is frozen and hashable.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from ..core.enums import ALL_LABEL, DIGIT_LABEL, SortBy, StoreStatus

DIGIT_ANCHOR = DIGIT_LABEL


@dataclass(frozen=True)
class Anchor:
    """Names starting with `letter` (or any digit when letter is "0-9")."""

    letter: str

    def __post_init__(self) -> None:
        if self.letter == DIGIT_ANCHOR:
            return
        if len(self.letter) != 1 or not self.letter.isalpha():
            raise ValueError(f"Anchor must be a single letter or '{DIGIT_ANCHOR}', got '{self.letter}'")
        object.__setattr__(self, "letter", self.letter.upper())

    @property
    def is_digit(self) -> bool:
        return self.letter == DIGIT_ANCHOR


@dataclass(frozen=True)
class Substring:
    """Names containing free-text `text`."""

    text: str


NameFilter = Anchor | Substring | None


@dataclass(frozen=True)
class FilterSelection:
    """Structured filter/sort choice made in the filter panel."""

    name_filter: NameFilter = None
    cashback_only: bool = False
    promoted_only: bool = False
    sharable_only: bool = False
    status: StoreStatus = StoreStatus.ACTIVE
    sort_by: SortBy = SortBy.ALPHABETICAL
    category: str | None = None

    # ----------------------
    # Views of the name filter
    # ----------------------
    @property
    def selected_letter(self) -> str:
        """Alphabet label to highlight: "All", "0-9", a letter, or "" while searching."""
        if self.name_filter is None:
            return ALL_LABEL
        if isinstance(self.name_filter, Anchor):
            return DIGIT_LABEL if self.name_filter.is_digit else self.name_filter.letter
        return ""

    @property
    def search_text(self) -> str:
        if isinstance(self.name_filter, Substring):
            return self.name_filter.text
        return ""

    # ----------------------
    # Derivations
    # ----------------------
    def with_letter(self, label: str) -> FilterSelection:
        """Select an alphabet label; clears any search text."""
        if label == ALL_LABEL:
            return replace(self, name_filter=None)
        return replace(self, name_filter=Anchor(label))

    def with_search(self, text: str) -> FilterSelection:
        """Search by free text; clears any letter selection."""
        return replace(self, name_filter=Substring(text) if text else None)

    def with_flags(
        self,
        *,
        cashback_only: bool | None = None,
        promoted_only: bool | None = None,
        sharable_only: bool | None = None,
    ) -> FilterSelection:
        return replace(
            self,
            cashback_only=self.cashback_only if cashback_only is None else cashback_only,
            promoted_only=self.promoted_only if promoted_only is None else promoted_only,
            sharable_only=self.sharable_only if sharable_only is None else sharable_only,
        )

    def with_status(self, status: StoreStatus | str) -> FilterSelection:
        return replace(self, status=StoreStatus(status))

    def with_sort(self, sort_by: SortBy | str) -> FilterSelection:
        return replace(self, sort_by=SortBy(sort_by))

    def with_category(self, category: str | None) -> FilterSelection:
        return replace(self, category=category or None)
