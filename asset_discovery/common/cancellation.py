"""Caller-supplied cancellation and deadline signal."""

from __future__ import annotations

import threading
import time
from concurrent import futures
from typing import Callable

from asset_discovery.common.errors import FetchCancelled

POLL_SECONDS = 0.05


class Cancellation:
    """A cancel flag plus an optional monotonic deadline.

    ``wait`` and ``wait_for`` are the only blocking calls; both give up as soon as
    ``cancel`` is called or the deadline passes.
    """

    def __init__(self, deadline_seconds: float | None = None) -> None:
        self._event = threading.Event()
        self.deadline = time.monotonic() + deadline_seconds if deadline_seconds is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def deadline_exceeded(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.deadline_exceeded

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise FetchCancelled("discovery cancelled by caller")
        if self.deadline_exceeded:
            raise FetchCancelled("discovery deadline exceeded", deadline_exceeded=True)

    def wait(self, seconds: float) -> None:
        self.raise_if_cancelled()
        remaining = self.remaining()
        timeout = seconds if remaining is None else min(seconds, remaining)
        self._event.wait(timeout)
        self.raise_if_cancelled()

    def wait_for(self, future: futures.Future, on_cancel: Callable[[], None] | None = None) -> None:
        """Block until ``future`` finishes, or raise ``FetchCancelled`` once cancelled.

        ``on_cancel`` runs before raising so the caller can tear down whatever
        the abandoned future is blocked on.
        """
        while True:
            done, _pending = futures.wait([future], timeout=POLL_SECONDS)
            if done:
                return
            if self.cancelled:
                future.cancel()
                if on_cancel is not None:
                    on_cancel()
                self.raise_if_cancelled()
