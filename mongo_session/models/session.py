from __future__ import annotations

from dataclasses import dataclass

from ..errors import MalformedKey

# Reserved field: raw epoch seconds, never passed through the value codec so
# the sweep can range-compare it in the store.
EXPIRES_FIELD = "expires"


@dataclass(frozen=True)
class SessionKey:
    """
    One field inside one session record, addressed by the host as
    ``"<field>:<session_id>"``.

    Only the first colon separates; the session id may contain more.
    """
    field: str
    session_id: str

    @classmethod
    def parse(cls, key: str) -> "SessionKey":
        if not isinstance(key, str):
            raise MalformedKey(repr(key), "key must be a string")
        field, sep, session_id = key.partition(":")
        if not sep:
            raise MalformedKey(key)
        if not field:
            raise MalformedKey(key, "empty field name")
        if not session_id:
            raise MalformedKey(key, "empty session id")
        # fields are top-level document keys: no paths, operators or the id
        if "." in field or field.startswith("$") or field == "_id":
            raise MalformedKey(key, f"field name {field!r} is not a plain document key")
        return cls(field=field, session_id=session_id)

    @property
    def is_expires(self) -> bool:
        return self.field == EXPIRES_FIELD

    def __str__(self) -> str:
        return f"{self.field}:{self.session_id}"
