from __future__ import annotations


class SessionStoreError(Exception):
    """Base class for everything the session store raises on its own."""


class StorageUnavailable(SessionStoreError):
    """
    The document store could not be reached or did not answer in time.
    Not retried here; the caller decides the retry policy.
    """


class MalformedKey(SessionStoreError, ValueError):
    """Composite key is not of the form ``<field>:<session_id>``."""

    def __init__(self, key: str, reason: str = "missing ':' separator"):
        super().__init__(f"Malformed session key {key!r}: {reason}")
        self.key = key


class CorruptPayload(SessionStoreError, ValueError):
    """Stored field value is not something the value codec produced."""


class UnencodableValue(SessionStoreError, TypeError):
    """Value cannot be represented by the value codec."""
