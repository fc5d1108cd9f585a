# mongo_session/services/codec.py
"""
Value codec for session fields.

A value is turned into a tree of tagged JSON arrays and dumped with orjson,
so the stored payload is a compact single line. Decoding walks the same
grammar back and rejects anything the encoder would not have produced; no
payload is ever evaluated.

    None            ["n"]
    bool            ["b", true]
    int             ["i", "12345678901234567890"]
    float           ["f", "0.1"]          (repr; nan / inf / -0.0 included)
    str             ["s", "text"]
    bytes           ["y", "<base64>"]
    list            ["l", [node, ...]]
    tuple           ["t", [node, ...]]
    dict            ["m", [[key, value], ...]]

orjson refuses to serialize more than 255 nested JSON arrays. Each list or
tuple costs two of them and each dict three, so values nest at most about
126 lists or 85 dicts deep; deeper values raise UnencodableValue.
"""
from __future__ import annotations

import base64
import binascii
from typing import Any, List, Set

import orjson

from ..errors import CorruptPayload, UnencodableValue

__all__ = ["encode", "decode"]


def encode(value: Any) -> str:
    try:
        tree = _to_node(value, set())
        return orjson.dumps(tree).decode("utf-8")
    except orjson.JSONEncodeError as e:
        # e.g. lone surrogates in a str
        raise UnencodableValue(f"Cannot encode value: {e}") from e


def decode(payload: Any) -> Any:
    if not isinstance(payload, (str, bytes)):
        raise CorruptPayload(f"Expected an encoded string, got {type(payload).__name__}")
    try:
        tree = orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise CorruptPayload(f"Payload is not valid JSON: {e}") from e
    return _from_node(tree)


# ----------------- Encoding -----------------

def _to_node(value: Any, active: Set[int]) -> List[Any]:
    if value is None:
        return ["n"]
    if isinstance(value, bool):
        return ["b", value]
    if isinstance(value, int):
        try:
            return ["i", str(int(value))]
        except ValueError as e:
            # int -> str digit limit
            raise UnencodableValue(str(e)) from e
    if isinstance(value, float):
        return ["f", repr(float(value))]
    if isinstance(value, str):
        return ["s", str(value)]
    if isinstance(value, (bytes, bytearray)):
        return ["y", base64.b64encode(bytes(value)).decode("ascii")]

    if isinstance(value, (list, tuple, dict)):
        marker = id(value)
        if marker in active:
            raise UnencodableValue("Cannot encode a self-referencing value")
        active.add(marker)
        try:
            if isinstance(value, dict):
                return ["m", [[_to_node(k, active), _to_node(v, active)] for k, v in value.items()]]
            tag = "t" if isinstance(value, tuple) else "l"
            return [tag, [_to_node(v, active) for v in value]]
        finally:
            active.discard(marker)

    raise UnencodableValue(f"Unsupported type for session value: {type(value).__name__}")


# ----------------- Decoding -----------------

def _from_node(node: Any) -> Any:
    if not isinstance(node, list) or not node or not isinstance(node[0], str):
        raise CorruptPayload(f"Malformed node: {node!r:.80}")

    tag = node[0]
    if tag == "n":
        _arity(node, 1)
        return None

    _arity(node, 2)
    body = node[1]

    if tag == "b":
        if type(body) is not bool:
            raise CorruptPayload("Boolean node without a boolean")
        return body
    if tag == "i":
        return _canonical(body, int, str)
    if tag == "f":
        return _canonical(body, float, repr)
    if tag == "s":
        if not isinstance(body, str):
            raise CorruptPayload("String node without a string")
        return body
    if tag == "y":
        return _bytes(body)
    if tag in ("l", "t"):
        if not isinstance(body, list):
            raise CorruptPayload("Sequence node without items")
        items = [_from_node(item) for item in body]
        return tuple(items) if tag == "t" else items
    if tag == "m":
        return _mapping(body)

    raise CorruptPayload(f"Unknown node tag {tag!r}")


def _arity(node: List[Any], expected: int) -> None:
    if len(node) != expected:
        raise CorruptPayload(f"Node {node[0]!r} has {len(node)} elements, expected {expected}")


def _canonical(text: Any, parse, render) -> Any:
    if not isinstance(text, str):
        raise CorruptPayload("Numeric node without text")
    try:
        value = parse(text)
    except ValueError as e:
        raise CorruptPayload(f"Bad number {text!r:.40}") from e
    if render(value) != text:
        raise CorruptPayload(f"Non-canonical number {text!r:.40}")
    return value


def _bytes(text: Any) -> bytes:
    if not isinstance(text, str):
        raise CorruptPayload("Bytes node without text")
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CorruptPayload("Bad base64 in bytes node") from e
    if base64.b64encode(raw).decode("ascii") != text:
        raise CorruptPayload("Non-canonical base64 in bytes node")
    return raw


def _mapping(pairs: Any) -> dict:
    if not isinstance(pairs, list):
        raise CorruptPayload("Mapping node without pairs")
    out: dict = {}
    for pair in pairs:
        if not isinstance(pair, list) or len(pair) != 2:
            raise CorruptPayload("Mapping entry is not a [key, value] pair")
        key = _from_node(pair[0])
        try:
            hash(key)
        except TypeError as e:
            raise CorruptPayload("Unhashable mapping key") from e
        if key in out:
            raise CorruptPayload(f"Duplicate mapping key {key!r:.40}")
        out[key] = _from_node(pair[1])
    return out
