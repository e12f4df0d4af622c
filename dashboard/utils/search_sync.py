"""Keep a list view's address in sync with its search box."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import Any, Optional

from werkzeug.datastructures import MultiDict

from dashboard.utils.query_state import QueryState

DEFAULT_WAIT = 0.3


class SearchSynchronizer:
    """Debounce search input and navigate to the matching address.

    Each keystroke cancels the pending timer and starts a new one, so only
    the last value typed within ``wait`` seconds is navigated to. Page
    changes navigate straight away and keep the current query.

    ``navigate`` receives the new URL and should replace the current history
    entry instead of pushing a new one. It runs outside the internal lock
    and may call back into the synchronizer from any thread.
    """

    def __init__(
        self,
        navigate: Callable[[str], Any],
        path: str,
        params: Mapping[str, Any] | MultiDict | None = None,
        wait: float = DEFAULT_WAIT,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self.navigate = navigate
        self.path = path
        self.wait = wait
        self.timer_factory = timer_factory
        self._params = MultiDict(params or {})
        self._lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self._pending_term: Optional[str] = None
        # Bumped on every schedule/cancel so a timer that already started
        # running when it was superseded does nothing.
        self._generation = 0

    @property
    def state(self) -> QueryState:
        with self._lock:
            return QueryState.from_args(self._params)

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    # ------------------------------------------------------------------
    def on_input(self, term: str) -> None:
        """Schedule a search for ``term`` after the quiet period."""

        with self._lock:
            self._cancel_unlocked()
            self._pending_term = term
            self._timer = self.timer_factory(
                self.wait, self._on_timer, args=(self._generation,)
            )
            self._timer.daemon = True
            self._timer.start()

    def select_page(self, page: int) -> str:
        """Navigate to ``page`` of the current results immediately."""

        with self._lock:
            state = QueryState.from_args(self._params).with_page(page)
            url = self._replace_unlocked(state)
        self.navigate(url)
        return url

    def flush(self) -> Optional[str]:
        """Run a pending search now instead of waiting for the timer."""

        with self._lock:
            if self._timer is None:
                return None
            term = self._pending_term
            self._cancel_unlocked()
            url = self._search_unlocked(term)
        self.navigate(url)
        return url

    def cancel(self) -> None:
        with self._lock:
            self._cancel_unlocked()

    # ------------------------------------------------------------------
    def _cancel_unlocked(self) -> None:
        self._generation += 1
        if self._timer:
            self._timer.cancel()
            self._timer = None
        self._pending_term = None

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            term = self._pending_term
            self._timer = None
            self._pending_term = None
            url = self._search_unlocked(term)
        self.navigate(url)

    def _search_unlocked(self, term: Optional[str]) -> str:
        state = QueryState.from_args(self._params).with_query(term)
        return self._replace_unlocked(state)

    def _replace_unlocked(self, state: QueryState) -> str:
        """Record ``state`` and return its URL; the caller navigates."""

        self._params = state.apply_to(self._params)
        return state.to_url(self.path, self._params)
