from __future__ import annotations

import pytest
from mongomock_motor import AsyncMongoMockClient

from mongo_session import MongoSessionStore

NOW = 1_700_000_000


class FakeClock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def collection():
    client = AsyncMongoMockClient()
    yield client["catalyst"]["session"]
    client.close()


@pytest.fixture
def store(collection, clock) -> MongoSessionStore:
    return MongoSessionStore(collection, clock=clock)
