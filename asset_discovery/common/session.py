"""Explicit lifecycle for the outbound HTTP session."""

from __future__ import annotations

import enum
import threading
from typing import Callable

import requests


class SessionState(enum.Enum):
    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    READY = "ready"
    FAILED = "failed"


class SessionLifecycle:
    """Owns one ``requests.Session`` and hands it out through ``acquire``.

    Sessions are created lazily so an unreachable upstream at start-up does not
    fail construction. A factory error leaves the lifecycle FAILED; the next
    ``acquire`` tries again.
    """

    def __init__(self, factory: Callable[[], requests.Session] = requests.Session) -> None:
        self._factory = factory
        self._session: requests.Session | None = None
        self._state = SessionState.UNCONNECTED
        self._lock = threading.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    def acquire(self) -> requests.Session:
        with self._lock:
            if self._state is SessionState.READY and self._session is not None:
                return self._session
            self._state = SessionState.CONNECTING
            try:
                session = self._factory()
            except Exception:
                self._state = SessionState.FAILED
                self._session = None
                raise
            self._session = session
            self._state = SessionState.READY
            return session

    def close(self) -> None:
        with self._lock:
            if self._session is not None:
                self._session.close()
            self._session = None
            self._state = SessionState.UNCONNECTED
