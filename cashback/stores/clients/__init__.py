"""High-level clients."""

from .list_controller import ListController, PageSource

__all__ = ["ListController", "PageSource"]
