from .session_store import MongoSessionStore
from .sweeper import ExpirySweeper

__all__ = ["MongoSessionStore", "ExpirySweeper"]
