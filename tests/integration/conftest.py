"""Shared fixtures for integration tests."""

import os

import pytest

from cashback.stores.config import ListingConfig

# Skip all integration tests unless RUN_CASHBACK_STORES_LIVE_TESTS=1
pytestmark = pytest.mark.skipif(
    os.environ.get("RUN_CASHBACK_STORES_LIVE_TESTS") != "1",
    reason="Requires a running store endpoint. Set RUN_CASHBACK_STORES_LIVE_TESTS=1 to run",
)


@pytest.fixture
def live_config() -> ListingConfig:
    """Endpoint settings from CASHBACK_STORES_* with the artificial delay removed."""
    config = ListingConfig.from_env()
    return ListingConfig(
        base_url=config.base_url,
        resource=config.resource,
        page_size=config.page_size,
        loading_delay=0,
        settle_delay=0,
        timeout=config.timeout,
    )
