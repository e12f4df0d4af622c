"""Canonical list-view query state carried in the address bar."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import urlencode

from werkzeug.datastructures import MultiDict

QUERY_PARAM = "query"
PAGE_PARAM = "page"


@dataclass(frozen=True)
class QueryState:
    """Filter text and page number of a list view.

    The state is derived from the request arguments on every request and is
    never stored server side.
    """

    query: str = ""
    page: int = 1

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "QueryState":
        """Parse ``args``; a missing query is ``""`` and a bad page is ``1``."""

        query = args.get(QUERY_PARAM) or ""
        try:
            page = int(args.get(PAGE_PARAM))
        except (TypeError, ValueError):
            page = 1
        return cls(query=str(query), page=page if page >= 1 else 1)

    def with_query(self, text: str | None) -> "QueryState":
        """Return a state filtered by ``text``, back on the first page."""

        return replace(self, query=text or "", page=1)

    def with_page(self, page: int) -> "QueryState":
        return replace(self, page=max(int(page), 1))

    def apply_to(
        self, params: Mapping[str, Any] | MultiDict | None = None
    ) -> MultiDict:
        """Return a copy of ``params`` updated with this state.

        Unrelated parameters are kept. An empty query removes the ``query``
        key rather than leaving it blank.
        """

        merged = MultiDict(params or {})
        merged[PAGE_PARAM] = str(self.page)
        if self.query:
            merged[QUERY_PARAM] = self.query
        else:
            merged.pop(QUERY_PARAM, None)
        return merged

    def to_url(
        self, path: str, params: Mapping[str, Any] | MultiDict | None = None
    ) -> str:
        encoded = urlencode(list(self.apply_to(params).items(multi=True)))
        return f"{path}?{encoded}" if encoded else path
