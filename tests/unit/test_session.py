import pytest

from asset_discovery.common.session import SessionLifecycle, SessionState


class FakeSession:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def test_lifecycle_starts_unconnected_and_is_lazy():
    created = []
    lifecycle = SessionLifecycle(factory=lambda: created.append(FakeSession()) or created[-1])

    assert lifecycle.state is SessionState.UNCONNECTED
    assert created == []

    session = lifecycle.acquire()
    assert lifecycle.state is SessionState.READY
    assert lifecycle.acquire() is session
    assert len(created) == 1


def test_lifecycle_factory_failure_moves_to_failed_then_recovers():
    attempts = {"count": 0}

    def factory():
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise OSError("no route")
        return FakeSession()

    lifecycle = SessionLifecycle(factory=factory)
    with pytest.raises(OSError):
        lifecycle.acquire()
    assert lifecycle.state is SessionState.FAILED

    lifecycle.acquire()
    assert lifecycle.state is SessionState.READY
    assert attempts["count"] == 2


def test_lifecycle_close_returns_to_unconnected():
    session = FakeSession()
    lifecycle = SessionLifecycle(factory=lambda: session)
    lifecycle.acquire()

    lifecycle.close()

    assert session.closed is True
    assert lifecycle.state is SessionState.UNCONNECTED
