"""Cooperative cancellation for import runs."""

from __future__ import annotations

import threading
import time
from typing import Callable


class CancelToken:
    """Set once by a signal handler or deadline; observed between store operations.

    Callbacks registered with ``on_cancel`` run in the thread that cancels,
    which lets a store abort the query it is currently blocked on.
    """

    def __init__(self, *, deadline_seconds: float | None = None) -> None:
        self._event = threading.Event()
        self._callbacks: list[Callable[[], None]] = []
        self._lock = threading.RLock()
        self.reason: str | None = None
        self._deadline = time.monotonic() + deadline_seconds if deadline_seconds else None
        self._timer: threading.Timer | None = None

    @property
    def cancelled(self) -> bool:
        if not self._event.is_set() and self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel("deadline exceeded")
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        with self._lock:
            if self._event.is_set():
                return
            self.reason = reason
            self._event.set()
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self._callbacks.append(callback)

    def remaining_seconds(self) -> float | None:
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def arm(self) -> None:
        """Start a timer that cancels when the deadline passes, even mid-statement."""
        remaining = self.remaining_seconds()
        if remaining is None or self._timer is not None:
            return
        self._timer = threading.Timer(remaining, self.cancel, args=("deadline exceeded",))
        self._timer.daemon = True
        self._timer.start()

    def disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
