"""Utility functions for the invoice dashboard."""

from .pagination import build_pagination_links, generate_pagination
from .query_state import QueryState
from .search_sync import SearchSynchronizer

__all__ = [
    "QueryState",
    "SearchSynchronizer",
    "build_pagination_links",
    "generate_pagination",
]
