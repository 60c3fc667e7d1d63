import pytest
from fastapi.testclient import TestClient

from app import app
from backend import RoomRegistry, room_registry
from broadcaster import broadcaster


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class NotifySpy:
    """Stands in for a broadcaster where only notify() matters."""

    def __init__(self):
        self.calls = 0

    def notify(self):
        self.calls += 1


@pytest.fixture(autouse=True)
def clean_registry():
    room_registry.clear()
    yield
    room_registry.clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return RoomRegistry(clock=clock)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def notifications(monkeypatch):
    spy = NotifySpy()
    monkeypatch.setattr(broadcaster, "notify", spy.notify)
    return spy
