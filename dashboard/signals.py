"""Invalidation signal for cached list views.

Mutations send :data:`view_stale` with the endpoint name of the view whose
data changed. Receivers drop cached renders of that view and tell connected
browsers to refetch. Sending never waits for a receiver to finish its work.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Any, Dict, Tuple

from blinker import Namespace
from flask import Flask, current_app

INVOICE_LIST_VIEW = "invoice.view_invoices"
DEFAULT_CACHE_SIZE = 256

_signals = Namespace()

view_stale = _signals.signal("view-stale")


class ListViewCache:
    """Thread-safe store of computed list payloads keyed by view and state.

    At most ``max_entries`` payloads are kept; the least recently used one
    is evicted first. A payload computed while its view was invalidated is
    returned to the caller but not stored.
    """

    def __init__(self, max_entries: int = DEFAULT_CACHE_SIZE) -> None:
        self.max_entries = max(int(max_entries), 1)
        self._entries: "OrderedDict[Tuple[str, Hashable], Any]" = OrderedDict()
        self._generations: Dict[str, int] = {}
        self._lock = threading.Lock()

    def get_or_compute(
        self, view: str, key: Hashable, compute: Callable[[], Any]
    ) -> Any:
        entry = (view, key)
        with self._lock:
            if entry in self._entries:
                self._entries.move_to_end(entry)
                return self._entries[entry]
            generation = self._generations.get(view, 0)
        value = compute()
        with self._lock:
            if self._generations.get(view, 0) == generation:
                self._entries[entry] = value
                self._entries.move_to_end(entry)
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)
        return value

    def invalidate(self, view: str) -> int:
        """Drop every cached entry for ``view`` and return how many were removed."""

        with self._lock:
            self._generations[view] = self._generations.get(view, 0) + 1
            stale = [entry for entry in self._entries if entry[0] == view]
            for entry in stale:
                del self._entries[entry]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def get_list_view_cache(app: Flask | None = None) -> ListViewCache:
    app = app or current_app._get_current_object()
    cache = app.extensions.get("list_view_cache")
    if cache is None:
        cache = app.extensions["list_view_cache"] = ListViewCache(
            app.config.get("LIST_VIEW_CACHE_SIZE", DEFAULT_CACHE_SIZE)
        )
    return cache


def init_view_invalidation(app: Flask, socketio) -> None:
    """Connect the cache and the browser broadcast to :data:`view_stale`."""

    cache = get_list_view_cache(app)

    def _drop_cached_views(sender, view: str, **extra):
        cache.invalidate(view)

    def _broadcast(sender, view: str, **extra):
        if socketio is not None:
            socketio.emit("view_stale", {"view": view})

    # Receivers are filtered by sender so apps created side by side (tests)
    # do not clear each other's caches. Blinker holds them weakly; the app
    # keeps them alive.
    receivers = (_drop_cached_views, _broadcast)
    app.extensions["view_stale_receivers"] = receivers
    for receiver in receivers:
        view_stale.connect(receiver, sender=app)


def mark_view_stale(view: str) -> None:
    """Send :data:`view_stale` for ``view`` from the current app.

    A failing receiver is logged; the mutation that triggered the signal has
    already been committed.
    """

    app = current_app._get_current_object()
    try:
        view_stale.send(app, view=view)
    except Exception:
        app.logger.warning("Invalidation of %s did not complete", view, exc_info=True)
