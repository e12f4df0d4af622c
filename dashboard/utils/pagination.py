"""Helpers for handling paginated views."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Union

from dashboard.utils.query_state import QueryState

ELLIPSIS = "..."

PageEntry = Union[int, str]


def generate_pagination(current_page: int, total_pages: int) -> List[PageEntry]:
    """Return the page numbers to show in the pager.

    Up to seven pages are listed in full. Beyond that the first and last
    pages stay visible and :data:`ELLIPSIS` marks the gaps around the
    current page.

    Parameters
    ----------
    current_page:
        The page being displayed.
    total_pages:
        Number of pages in the result set.

    Returns
    -------
    list
        Page numbers interleaved with :data:`ELLIPSIS` markers.
    """

    if total_pages <= 7:
        return list(range(1, total_pages + 1))
    if current_page <= 3:
        return [1, 2, 3, ELLIPSIS, total_pages - 1, total_pages]
    if current_page >= total_pages - 2:
        return [1, 2, ELLIPSIS, total_pages - 2, total_pages - 1, total_pages]
    return [
        1,
        ELLIPSIS,
        current_page - 1,
        current_page,
        current_page + 1,
        ELLIPSIS,
        total_pages,
    ]


def build_pagination_links(
    state: QueryState,
    total_pages: int,
    path: str,
    params: Mapping[str, Any] | None = None,
) -> List[Dict[str, Any]]:
    """Assemble pager entries with a URL for every page number.

    The current ``query`` and any unrelated ``params`` are kept in each
    link; only ``page`` changes.
    """

    links: List[Dict[str, Any]] = []
    for entry in generate_pagination(state.page, total_pages):
        if entry == ELLIPSIS:
            links.append({"page": None, "url": None, "current": False})
            continue
        links.append(
            {
                "page": entry,
                "url": state.with_page(entry).to_url(path, params),
                "current": entry == state.page,
            }
        )
    return links
