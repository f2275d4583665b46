"""Listing configuration.

Centralizes the endpoint location, page size and the timing knobs used by the
fetcher and the scroll trigger so tests can run with zero delays.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from .core.exceptions import ConfigError

DEFAULT_BASE_URL = "http://localhost:3001"
DEFAULT_RESOURCE = "/stores"
STORES_PER_PAGE = 20
LOADING_DELAY = 1.0  # seconds, artificial minimum round-trip before each fetch
SETTLE_DELAY = 0.1  # seconds, coalesces scroll jitter into one advance
VISIBILITY_THRESHOLD = 0.5
ROOT_MARGIN_PX = 100
DISCONTINUED_WINDOW_DAYS = 7
TIMESTAMP_RESOLUTION = 60.0  # seconds, status bounds are floored to this step

ENV_PREFIX = "CASHBACK_STORES_"


@dataclass(frozen=True)
class ListingConfig:
    """Settings for one listing view.

    Attributes:
        base_url: Scheme and host of the collection endpoint
        resource: Path of the store collection
        page_size: Records requested per page (`_limit`)
        loading_delay: Seconds to wait before each request
        settle_delay: Seconds the scroll trigger waits before emitting
        visibility_threshold: Fraction of the sentinel that must be visible
        root_margin_px: Pixels the viewport is expanded by for the sentinel
        timeout: Total HTTP timeout in seconds
        discontinued_window_days: Width of the "discontinued" recency window
        timestamp_resolution: Seconds the status bounds are floored to (0 disables)
    """

    base_url: str = DEFAULT_BASE_URL
    resource: str = DEFAULT_RESOURCE
    page_size: int = STORES_PER_PAGE
    loading_delay: float = LOADING_DELAY
    settle_delay: float = SETTLE_DELAY
    visibility_threshold: float = VISIBILITY_THRESHOLD
    root_margin_px: int = ROOT_MARGIN_PX
    timeout: float = 30.0
    discontinued_window_days: int = DISCONTINUED_WINDOW_DAYS
    timestamp_resolution: float = TIMESTAMP_RESOLUTION

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigError(f"base_url must be an http(s) URL, got '{self.base_url}'")
        if not self.resource.startswith("/"):
            raise ConfigError(f"resource must start with '/', got '{self.resource}'")
        if self.page_size < 1:
            raise ConfigError("page_size must be >= 1")
        if self.loading_delay < 0 or self.settle_delay < 0:
            raise ConfigError("delays cannot be negative")
        if not 0.0 < self.visibility_threshold <= 1.0:
            raise ConfigError("visibility_threshold must be in (0, 1]")
        if self.root_margin_px < 0:
            raise ConfigError("root_margin_px cannot be negative")
        if self.timeout <= 0:
            raise ConfigError("timeout must be positive")
        if self.discontinued_window_days < 1:
            raise ConfigError("discontinued_window_days must be >= 1")
        if self.timestamp_resolution < 0:
            raise ConfigError("timestamp_resolution cannot be negative")

    @property
    def collection_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.resource}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ListingConfig:
        """Build a config from `CASHBACK_STORES_*` environment variables.

        Unset variables keep their defaults. Values are converted with the
        type of the field's default.
        """
        environ = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        for field in fields(cls):
            raw = environ.get(f"{ENV_PREFIX}{field.name.upper()}")
            if raw is None or raw == "":
                continue
            try:
                overrides[field.name] = type(field.default)(raw)
            except ValueError as e:
                raise ConfigError(f"Invalid value for {field.name}: {raw!r}") from e
        return cls(**overrides)
