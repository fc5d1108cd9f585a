from .session import EXPIRES_FIELD, SessionKey

__all__ = ["EXPIRES_FIELD", "SessionKey"]
