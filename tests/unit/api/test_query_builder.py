"""Unit tests for canonical query construction."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from cashback.stores.api.query_builder import (
    CanonicalQuery,
    QueryBuilder,
    build_query,
    floor_timestamp,
    format_timestamp,
    selection_from_query,
)
from cashback.stores.core import SortBy, StoreStatus
from cashback.stores.models import Anchor, FilterSelection, Substring

NOW = datetime(2024, 5, 1, 12, 30, 0, tzinfo=UTC)


def frozen_clock() -> datetime:
    return NOW


class TestCanonicalQuery:
    """Test CanonicalQuery helpers."""

    def test_parse_keeps_order_and_strips_question_mark(self):
        query = CanonicalQuery.parse("?b=2&a=1&b=3")
        assert query.pairs == (("b", "2"), ("a", "1"), ("b", "3"))

    def test_round_trip_through_query_string(self):
        query = CanonicalQuery.from_pairs([("name_like", "^[0-9]"), ("_sort", "name")])
        assert CanonicalQuery.parse(query.to_query_string()) == query

    def test_with_page_appends_pagination_last(self):
        query = CanonicalQuery.from_pairs([("_sort", "name")]).with_page(3, 20)
        assert query.names() == ["_sort", "_page", "_limit"]
        assert query.get("_page") == "3"
        assert query.get("_limit") == "20"

    def test_with_page_replaces_existing_pagination(self):
        query = CanonicalQuery.parse("_page=9&_sort=name&_limit=5").with_page(2, 20)
        assert query.pairs == (("_sort", "name"), ("_page", "2"), ("_limit", "20"))

    def test_with_page_rejects_page_zero(self):
        with pytest.raises(ValueError):
            CanonicalQuery().with_page(0, 20)

    def test_filter_portion_drops_pagination(self):
        query = CanonicalQuery.parse("cats=7&_page=2&_limit=20")
        assert query.filter_portion() == CanonicalQuery.parse("cats=7")

    def test_with_param_replaces_in_place(self):
        query = CanonicalQuery.parse("a=1&cats=2&b=3").with_param("cats", "5")
        assert query.to_query_string() == "a=1&cats=5&b=3"

    def test_with_param_appends_when_missing(self):
        query = CanonicalQuery.parse("a=1").with_param("cats", "5")
        assert query.names() == ["a", "cats"]

    def test_contains_and_len(self):
        query = CanonicalQuery.parse("a=1&b=2")
        assert "a" in query
        assert "c" not in query
        assert len(query) == 2


class TestBuildQuery:
    """Test build_query parameter emission."""

    def test_default_selection(self):
        query = build_query(FilterSelection(), now=NOW)
        assert query.pairs == (
            ("published_at_lte", "2024-05-01T12:30:00.000Z"),
            ("_sort", "name"),
            ("_order", "asc"),
        )

    def test_deterministic_for_same_input(self):
        selection = FilterSelection(
            name_filter=Substring("shoe"),
            cashback_only=True,
            sort_by=SortBy.CASHBACK,
            category="12",
        )
        first = build_query(selection, now=NOW)
        second = build_query(selection, now=NOW)
        assert first == second
        assert first.to_query_string() == second.to_query_string()

    def test_letter_anchor(self):
        query = build_query(FilterSelection(name_filter=Anchor("b")), now=NOW)
        assert query.get("name_like") == "^B"
        assert query.names()[0] == "name_like"

    def test_digit_anchor(self):
        query = build_query(FilterSelection(name_filter=Anchor("0-9")), now=NOW)
        assert query.get("name_like") == "^[0-9]"

    def test_free_text(self):
        query = build_query(FilterSelection(name_filter=Substring("mart")), now=NOW)
        assert query.get("name_like") == "mart"

    def test_all_and_empty_text_omit_name_filter(self):
        assert "name_like" not in build_query(FilterSelection(), now=NOW)
        assert "name_like" not in build_query(FilterSelection(name_filter=Substring("")), now=NOW)

    def test_flags_only_emitted_when_true(self):
        query = build_query(
            FilterSelection(cashback_only=True, promoted_only=False, sharable_only=True), now=NOW
        )
        assert query.get("cashback_enabled") == "1"
        assert query.get("is_sharable") == "1"
        assert "is_promoted" not in query
        assert all(value != "0" for _, value in query)

    def test_coming_soon(self):
        query = build_query(FilterSelection(status=StoreStatus.COMING_SOON), now=NOW)
        assert query.get("published_at_gte") == "2024-05-01T12:30:00.000Z"
        assert "published_at_lte" not in query

    def test_discontinued_window_is_seven_days(self):
        query = build_query(FilterSelection(status=StoreStatus.DISCONTINUED), now=NOW)
        date_params = [(k, v) for k, v in query if k.startswith(("updated_at", "published_at"))]
        assert [k for k, _ in date_params] == ["updated_at_gte", "updated_at_lte"]

        lower = datetime.fromisoformat(query.get("updated_at_gte").replace("Z", "+00:00"))
        upper = datetime.fromisoformat(query.get("updated_at_lte").replace("Z", "+00:00"))
        assert upper == NOW
        assert upper - lower == timedelta(days=7)

    def test_popularity_sort(self):
        query = build_query(FilterSelection(sort_by=SortBy.POPULARITY), now=NOW)
        assert query.get("_sort") == "clicks"
        assert query.get("_order") == "desc"

    def test_cashback_sort_is_compound(self):
        query = build_query(FilterSelection(sort_by=SortBy.CASHBACK), now=NOW)
        assert query.get("_sort") == "amount_type,cashback_amount"
        assert query.get("_order") == "asc,desc"

    def test_parameter_order(self):
        selection = FilterSelection(
            name_filter=Anchor("A"),
            cashback_only=True,
            promoted_only=True,
            sharable_only=True,
            status=StoreStatus.DISCONTINUED,
            sort_by=SortBy.POPULARITY,
            category="3",
        )
        assert build_query(selection, now=NOW).names() == [
            "name_like",
            "cashback_enabled",
            "is_promoted",
            "is_sharable",
            "updated_at_gte",
            "updated_at_lte",
            "_sort",
            "_order",
            "cats",
        ]

    def test_naive_now_treated_as_utc(self):
        assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05.000Z"


class TestSelectionFromQuery:
    """Test recovering selections from queries."""

    @pytest.mark.parametrize(
        "selection",
        [
            FilterSelection(),
            FilterSelection(name_filter=Anchor("Q"), cashback_only=True),
            FilterSelection(name_filter=Anchor("0-9"), status=StoreStatus.COMING_SOON),
            FilterSelection(name_filter=Substring("book"), sort_by=SortBy.CASHBACK),
            FilterSelection(
                promoted_only=True,
                sharable_only=True,
                status=StoreStatus.DISCONTINUED,
                sort_by=SortBy.POPULARITY,
                category="42",
            ),
        ],
    )
    def test_inverse_of_build(self, selection):
        assert selection_from_query(build_query(selection, now=NOW)) == selection

    def test_empty_query_yields_defaults(self):
        assert selection_from_query(CanonicalQuery()) == FilterSelection()

    def test_unknown_params_ignored(self):
        selection = selection_from_query(CanonicalQuery.parse("foo=bar&cashback_enabled=0"))
        assert selection == FilterSelection()


class TestQueryBuilder:
    """Test the clock-bound builder."""

    def test_build_uses_clock(self):
        builder = QueryBuilder(clock=frozen_clock)
        assert builder.build(FilterSelection()).get("published_at_lte") == format_timestamp(NOW)

    def test_custom_window(self):
        builder = QueryBuilder(clock=frozen_clock, discontinued_window_days=30)
        query = builder.build(FilterSelection(status=StoreStatus.DISCONTINUED))
        assert query.get("updated_at_gte") == format_timestamp(NOW - timedelta(days=30))

    def test_parse_strips_pagination(self):
        builder = QueryBuilder(clock=frozen_clock)
        query, selection = builder.parse("?name_like=%5EC&_page=4&_limit=20")
        assert query == CanonicalQuery.parse("name_like=^C")
        assert selection.name_filter == Anchor("C")

    def test_default_clock_is_now_floored_to_the_minute(self):
        before = datetime.now(UTC)
        query = QueryBuilder().build(FilterSelection())
        after = datetime.now(UTC)
        stamp = datetime.fromisoformat(query.get("published_at_lte").replace("Z", "+00:00"))
        assert stamp.second == 0
        assert stamp.microsecond == 0
        assert before - timedelta(minutes=1) < stamp <= after

    def test_wall_clock_builds_are_identical(self):
        builder = QueryBuilder()
        for selection in (
            FilterSelection(),
            FilterSelection(status=StoreStatus.DISCONTINUED, cashback_only=True),
            FilterSelection(status=StoreStatus.COMING_SOON, name_filter=Anchor("R")),
        ):
            first = builder.build(selection)
            second = builder.build(selection)
            assert first.to_query_string() == second.to_query_string()

    def test_advancing_clock_within_resolution_is_stable(self):
        ticks = iter(NOW + timedelta(milliseconds=5 * i) for i in range(100))
        builder = QueryBuilder(clock=lambda: next(ticks))
        queries = {builder.build(FilterSelection()).to_query_string() for _ in range(10)}
        assert len(queries) == 1

    def test_zero_resolution_keeps_milliseconds(self):
        moment = NOW + timedelta(milliseconds=446)
        builder = QueryBuilder(clock=lambda: moment, timestamp_resolution=0)
        assert builder.build(FilterSelection()).get("published_at_lte") == format_timestamp(moment)


class TestFloorTimestamp:
    """Test floor_timestamp."""

    def test_floors_to_minute(self):
        moment = datetime(2024, 5, 1, 12, 30, 59, 999000, tzinfo=UTC)
        assert floor_timestamp(moment, timedelta(minutes=1)) == datetime(
            2024, 5, 1, 12, 30, tzinfo=UTC
        )

    def test_exact_boundary_unchanged(self):
        assert floor_timestamp(NOW, timedelta(minutes=1)) == NOW

    def test_naive_treated_as_utc(self):
        floored = floor_timestamp(datetime(2024, 1, 1, 0, 0, 30), timedelta(minutes=1))
        assert floored == datetime(2024, 1, 1, tzinfo=UTC)
