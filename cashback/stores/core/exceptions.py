"""Custom exception hierarchy."""

from __future__ import annotations


class StoresError(Exception):
    """Base exception for all library errors."""

    pass


class FetchError(StoresError):
    """A page of stores could not be loaded.

    This is the only error the list controller surfaces to the view; its
    message is shown to the user as-is.
    """

    def __init__(self, message: str, page: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.page = page


class TransportError(FetchError):
    """Non-success response or network failure."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        page: int | None = None,
    ) -> None:
        super().__init__(message, page=page)
        self.status_code = status_code


class DecodeError(FetchError):
    """Response body could not be parsed as a sequence of stores."""

    pass


class ConfigError(StoresError, ValueError):
    """Invalid listing configuration."""

    pass
