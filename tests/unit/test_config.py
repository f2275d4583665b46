"""Unit tests for ListingConfig."""

import pytest

from cashback.stores.config import ListingConfig
from cashback.stores.core import ConfigError


class TestListingConfig:
    """Test ListingConfig defaults and validation."""

    def test_defaults(self):
        config = ListingConfig()
        assert config.page_size == 20
        assert config.loading_delay == 1.0
        assert config.settle_delay == 0.1
        assert config.visibility_threshold == 0.5
        assert config.root_margin_px == 100
        assert config.timestamp_resolution == 60.0
        assert config.collection_url == "http://localhost:3001/stores"

    def test_collection_url_strips_trailing_slash(self):
        config = ListingConfig(base_url="https://api.example.com/", resource="/v1/stores")
        assert config.collection_url == "https://api.example.com/v1/stores"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"base_url": "localhost:3001"},
            {"resource": "stores"},
            {"page_size": 0},
            {"loading_delay": -1},
            {"settle_delay": -0.5},
            {"visibility_threshold": 0},
            {"visibility_threshold": 1.5},
            {"root_margin_px": -1},
            {"timeout": 0},
            {"discontinued_window_days": 0},
            {"timestamp_resolution": -1},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ConfigError):
            ListingConfig(**kwargs)


class TestListingConfigFromEnv:
    """Test environment overrides."""

    def test_empty_environment_uses_defaults(self):
        assert ListingConfig.from_env({}) == ListingConfig()

    def test_overrides_are_typed(self):
        config = ListingConfig.from_env(
            {
                "CASHBACK_STORES_BASE_URL": "http://stores.internal:8080",
                "CASHBACK_STORES_PAGE_SIZE": "50",
                "CASHBACK_STORES_LOADING_DELAY": "0",
                "CASHBACK_STORES_SETTLE_DELAY": "",
            }
        )
        assert config.base_url == "http://stores.internal:8080"
        assert config.page_size == 50
        assert config.loading_delay == 0.0
        assert config.settle_delay == 0.1

    def test_unparseable_value(self):
        with pytest.raises(ConfigError, match="page_size"):
            ListingConfig.from_env({"CASHBACK_STORES_PAGE_SIZE": "twenty"})

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("CASHBACK_STORES_ROOT_MARGIN_PX", "0")
        assert ListingConfig.from_env().root_margin_px == 0
