"""Utility helpers shared across the test-suite."""

from __future__ import annotations

import threading
from typing import Any, Callable, List, Optional


def login(client, email: str, password: str):
    """Helper to login a user in tests."""

    return client.post(
        "/auth/login",
        data={"email": email, "password": password},
    )


class FakeTimer:
    """Stand-in for :class:`threading.Timer` that fires only when told to.

    Every instance is recorded in ``FakeTimer.created`` so a test can play
    back a burst of keystrokes and decide when time has passed.
    """

    created: List["FakeTimer"] = []

    def __init__(
        self,
        interval: float,
        function: Callable[..., Any],
        args: Optional[tuple] = None,
        kwargs: Optional[dict] = None,
    ) -> None:
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        """Run the callback as a real timer would, unless cancelled."""

        if self.started and not self.cancelled:
            self.function(*self.args, **self.kwargs)


def wait_for(event: threading.Event, timeout: float = 2.0) -> bool:
    return event.wait(timeout)
