"""Integration tests against a live store collection endpoint."""

import os

import pytest

from cashback.stores import (
    FilterSelection,
    InMemoryLocation,
    ListController,
    PageFetcher,
    QueryBuilder,
    SortBy,
)

pytestmark = pytest.mark.skipif(
    os.environ.get("RUN_CASHBACK_STORES_LIVE_TESTS") != "1",
    reason="Requires a running store endpoint",
)


class TestLiveListing:
    """Test fetching real pages."""

    @pytest.mark.asyncio
    async def test_first_page(self, live_config):
        """Test the default query returns at most one page of stores."""
        query = QueryBuilder().build(FilterSelection())
        async with PageFetcher(live_config) as fetcher:
            result = await fetcher.fetch(query, 1)

        assert len(result) <= live_config.page_size
        assert result.has_more == (len(result) == live_config.page_size)
        for store in result.stores:
            assert store.name

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sort_by", list(SortBy))
    async def test_every_sort_accepted(self, live_config, sort_by):
        """Test each sort order is accepted by the endpoint."""
        query = QueryBuilder().build(FilterSelection(sort_by=sort_by))
        async with PageFetcher(live_config) as fetcher:
            result = await fetcher.fetch(query, 1)
        assert result.page == 1

    @pytest.mark.asyncio
    async def test_controller_loads_two_pages_without_duplicates(self, live_config):
        """Test the controller keeps ids unique across pages."""
        async with PageFetcher(live_config) as fetcher:
            async with ListController(
                fetcher, config=live_config, location=InMemoryLocation()
            ) as controller:
                await controller.wait_idle()
                if controller.state.has_more:
                    controller.load_next_page()
                    await controller.wait_idle()

                ids = controller.state.item_ids
                assert len(ids) == len(set(ids))
                assert controller.state.error is None
