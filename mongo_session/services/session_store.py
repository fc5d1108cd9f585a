from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from ..dal.session_dal import SessionDAL
from ..db.mongodb import create_client, get_collection
from ..errors import CorruptPayload, StorageUnavailable
from ..models.session import EXPIRES_FIELD, SessionKey
from ..settings import Settings
from . import codec

log = logging.getLogger("mongo_session.store")


class MongoSessionStore:
    """
    Per-field session storage on a MongoDB collection.

    Keys are ``"<field>:<session_id>"``; each session is one document and each
    field is stored and removed independently. ``expires`` holds raw epoch
    seconds; once it is in the past the whole session reads as absent and is
    deleted.
    """

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        *,
        clock: Optional[Callable[[], float]] = None,
        client: Optional[AsyncIOMotorClient] = None,
    ):
        self.dal = SessionDAL(collection)
        self._clock = clock or time.time
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "MongoSessionStore":
        client = create_client(settings)
        log.info(
            "session store host=%s port=%s db=%s collection=%s",
            settings.HOSTNAME,
            settings.PORT,
            settings.DBNAME,
            settings.COLLECTIONNAME,
        )
        return cls(get_collection(client, settings), client=client, **kwargs)

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "MongoSessionStore":
        return cls.from_settings(Settings.from_config(config), **kwargs)

    def now(self) -> int:
        return int(self._clock())

    async def ensure_indexes(self) -> None:
        await self.dal.ensure_indexes()

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ----------------- Field operations -----------------

    async def get(self, key: str) -> Any:
        k = SessionKey.parse(key)

        found = await self.dal.find_one(k.session_id, fields=(k.field, EXPIRES_FIELD))
        if not found:
            return None

        expires = found.get(EXPIRES_FIELD)
        if expires is not None and self.now() > expires:
            log.info("session expired sid=%s expires=%s", k.session_id, expires)
            try:
                await self.delete_session(k.session_id)
            except (StorageUnavailable, PyMongoError) as e:
                # the read is still correct: the session is gone as far as the caller is concerned
                log.warning("expired session cleanup failed sid=%s: %s", k.session_id, e)
            return None

        if k.field not in found:
            return None
        if k.is_expires:
            return expires

        try:
            return codec.decode(found[k.field])
        except CorruptPayload as e:
            log.warning("corrupt session field sid=%s field=%s: %s", k.session_id, k.field, e)
            return None

    async def put(self, key: str, value: Any) -> None:
        k = SessionKey.parse(key)

        if k.is_expires:
            # stored raw so the sweep can compare it with $lt
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"expires must be integer epoch seconds, got {type(value).__name__}")
            stored = value
        else:
            stored = codec.encode(value)

        await self.dal.set_field(k.session_id, k.field, stored)

    async def delete(self, key: str) -> None:
        k = SessionKey.parse(key)

        found = await self.dal.find_one(k.session_id)
        if not found or k.field not in found:
            return

        # _id counts too: {_id, field, expires} keeps expires, {_id, field} is dropped
        if len(found) > 2:
            await self.dal.unset_field(k.session_id, k.field)
        else:
            await self.dal.delete(k.session_id)

    # ----------------- Session operations -----------------

    async def delete_session(self, session_id: str) -> bool:
        return await self.dal.delete(session_id)

    async def sweep_expired(self) -> int:
        now = self.now()
        removed = await self.dal.delete_expired(now)
        log.info("swept expired sessions removed=%d before=%d", removed, now)
        return removed
