from __future__ import annotations

import functools
from typing import Any, Dict, Iterable, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ASCENDING
from pymongo.errors import ConnectionFailure, ExecutionTimeout, WTimeoutError

from ..errors import StorageUnavailable
from ..models.session import EXPIRES_FIELD

# Connectivity and timeout failures; everything else from pymongo propagates as-is.
_UNAVAILABLE = (ConnectionFailure, ExecutionTimeout, WTimeoutError)


def _storage_call(fn):
    @functools.wraps(fn)
    async def wrapper(self, *args, **kwargs):
        try:
            return await fn(self, *args, **kwargs)
        except _UNAVAILABLE as e:
            raise StorageUnavailable(f"{fn.__name__} failed: {e}") from e

    return wrapper


class SessionDAL:
    """
    Session documents, one per session id:

        {"_id": "<session_id>", "<field>": "<encoded>", ..., "expires": 1700000000}
    """

    def __init__(self, col: AsyncIOMotorCollection):
        self.col = col

    @_storage_call
    async def ensure_indexes(self) -> None:
        await self.col.create_index([(EXPIRES_FIELD, ASCENDING)])

    @_storage_call
    async def find_one(
        self, session_id: str, fields: Optional[Iterable[str]] = None
    ) -> Optional[Dict[str, Any]]:
        projection = {f: 1 for f in fields} if fields is not None else None
        return await self.col.find_one({"_id": session_id}, projection)

    @_storage_call
    async def set_field(self, session_id: str, field: str, value: Any) -> None:
        # Targeted $set so concurrent writers of sibling fields don't clobber each other.
        await self.col.update_one({"_id": session_id}, {"$set": {field: value}}, upsert=True)

    @_storage_call
    async def unset_field(self, session_id: str, field: str) -> None:
        await self.col.update_one({"_id": session_id}, {"$unset": {field: 1}})

    @_storage_call
    async def delete(self, session_id: str) -> bool:
        r = await self.col.delete_one({"_id": session_id})
        return r.deleted_count == 1

    @_storage_call
    async def delete_expired(self, before: int) -> int:
        r = await self.col.delete_many({EXPIRES_FIELD: {"$lt": before}})
        return r.deleted_count
