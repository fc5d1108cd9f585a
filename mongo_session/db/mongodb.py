# mongo_session/db/mongodb.py
from __future__ import annotations

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection

from ..settings import Settings


def create_client(settings: Settings) -> AsyncIOMotorClient:
    # Motor connects in the background; the first operation surfaces an
    # unreachable server after SERVER_SELECTION_TIMEOUT_MS.
    return AsyncIOMotorClient(
        settings.mongo_uri,
        serverSelectionTimeoutMS=settings.SERVER_SELECTION_TIMEOUT_MS,
    )


def get_collection(client: AsyncIOMotorClient, settings: Settings) -> AsyncIOMotorCollection:
    return client[settings.DBNAME][settings.COLLECTIONNAME]
