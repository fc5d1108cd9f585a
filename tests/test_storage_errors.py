from __future__ import annotations

import logging

import pytest
from pymongo.errors import DuplicateKeyError, OperationFailure, ServerSelectionTimeoutError

from mongo_session import MongoSessionStore, StorageUnavailable

from .conftest import NOW


class FlakyCollection:
    """Wraps a collection and fails the named methods."""

    def __init__(self, inner, fail: set, exc: Exception | None = None):
        self.inner = inner
        self.fail = fail
        self.exc = exc or ServerSelectionTimeoutError("localhost:27017: connection refused")

    def __getattr__(self, name):
        if name in self.fail:
            async def boom(*args, **kwargs):
                raise self.exc

            return boom
        return getattr(self.inner, name)


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.get("session:id1"),
        lambda s: s.put("session:id1", 1),
        lambda s: s.put("expires:id1", NOW),
        lambda s: s.delete("session:id1"),
        lambda s: s.delete_session("id1"),
        lambda s: s.sweep_expired(),
        lambda s: s.ensure_indexes(),
    ],
)
async def test_unreachable_backend_raises_storage_unavailable(collection, clock, call):
    everything = {"find_one", "update_one", "delete_one", "delete_many", "create_index"}
    store = MongoSessionStore(FlakyCollection(collection, everything), clock=clock)

    with pytest.raises(StorageUnavailable) as ei:
        await call(store)
    assert isinstance(ei.value.__cause__, ServerSelectionTimeoutError)


async def test_other_driver_errors_propagate_unchanged(collection, clock):
    exc = DuplicateKeyError("E11000 duplicate key")
    store = MongoSessionStore(FlakyCollection(collection, {"update_one"}, exc), clock=clock)

    with pytest.raises(DuplicateKeyError):
        await store.put("session:id1", 1)


async def test_failed_expiry_cleanup_does_not_fail_get(collection, clock, caplog):
    await collection.insert_one({"_id": "id1", "session": "[\"n\"]", "expires": NOW - 1})
    store = MongoSessionStore(FlakyCollection(collection, {"delete_one"}), clock=clock)

    with caplog.at_level(logging.WARNING, logger="mongo_session.store"):
        assert await store.get("session:id1") is None

    assert "expired session cleanup failed sid=id1" in caplog.text
    assert await collection.find_one({"_id": "id1"}) is not None


async def test_cleanup_rejected_by_server_does_not_fail_get(collection, clock, caplog):
    await collection.insert_one({"_id": "id1", "session": "[\"n\"]", "expires": NOW - 1})
    exc = OperationFailure("not authorized on catalyst to execute command { delete: \"session\" }")
    store = MongoSessionStore(FlakyCollection(collection, {"delete_one"}, exc), clock=clock)

    with caplog.at_level(logging.WARNING, logger="mongo_session.store"):
        assert await store.get("session:id1") is None

    assert "expired session cleanup failed sid=id1: not authorized" in caplog.text
