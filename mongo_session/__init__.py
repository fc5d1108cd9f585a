from .errors import (
    CorruptPayload,
    MalformedKey,
    SessionStoreError,
    StorageUnavailable,
    UnencodableValue,
)
from .models import EXPIRES_FIELD, SessionKey
from .services import ExpirySweeper, MongoSessionStore
from .logger import setup_logging
from .settings import Settings, resolve

__all__ = [
    "MongoSessionStore",
    "ExpirySweeper",
    "SessionKey",
    "EXPIRES_FIELD",
    "Settings",
    "resolve",
    "setup_logging",
    "SessionStoreError",
    "StorageUnavailable",
    "MalformedKey",
    "CorruptPayload",
    "UnencodableValue",
]
