"""
Canonical NIP-01 serialization.

The event ``id`` is the SHA-256 of the UTF-8 bytes of::

    [0,"<pubkey>",<created_at>,<kind>,<tags-json>,<content-json>]

with compact JSON (no whitespace), array order preserved, non-ASCII left
unescaped and ``/`` never escaped as ``\\/``. Any deviation yields a
different id, so this module is bit-exact rather than stylistic.

``json.dumps`` with ``ensure_ascii=False`` and compact separators already
matches NIP-01: it escapes ``"``, ``\\`` and control characters (using the
short forms ``\\n``, ``\\t``, ``\\r``, ``\\b``, ``\\f``) and leaves ``/``
alone.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from nostrfeed.core.exceptions import SerializationError


def to_canonical_json(value: Any) -> str:
    """Encode *value* as compact JSON without slash escaping.

    Raises:
        SerializationError: If *value* contains non-JSON types, non-finite
            floats, or strings that are not valid Unicode (lone
            surrogates).
    """
    try:
        encoded = json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
        encoded.encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"value is not JSON encodable: {e}") from e
    return encoded


def _check_tags(tags: Any) -> None:
    if isinstance(tags, str | bytes) or not isinstance(tags, Sequence):
        raise SerializationError("tags must be a sequence of sequences of str")
    for i, tag in enumerate(tags):
        if isinstance(tag, str | bytes) or not isinstance(tag, Sequence):
            raise SerializationError(f"tags[{i}] must be a sequence of str")
        if not all(isinstance(value, str) for value in tag):
            raise SerializationError(f"tags[{i}] contains a non-string value")


def serialize_event(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: Sequence[Sequence[str]],
    content: str,
) -> str:
    """Return the canonical commitment string hashed to form the event id.

    Raises:
        SerializationError: If any field cannot be encoded. Callers must
            abort event construction; fields are never silently dropped.
    """
    if not isinstance(content, str):
        raise SerializationError(f"content must be a str, got {type(content).__name__}")
    if isinstance(created_at, bool) or not isinstance(created_at, int):
        raise SerializationError("created_at must be an int")
    if isinstance(kind, bool) or not isinstance(kind, int):
        raise SerializationError("kind must be an int")
    _check_tags(tags)

    tags_json = to_canonical_json([list(tag) for tag in tags])
    content_json = to_canonical_json(content)
    pubkey_json = to_canonical_json(pubkey)
    return f"[0,{pubkey_json},{int(created_at)},{int(kind)},{tags_json},{content_json}]"


def serialize_event_bytes(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: Sequence[Sequence[str]],
    content: str,
) -> bytes:
    """Return the UTF-8 pre-image of the event id."""
    return serialize_event(pubkey, created_at, kind, tags, content).encode("utf-8")


def serialize_message(message: Sequence[Any]) -> str:
    """Serialize a relay frame such as ``["EVENT", {...}]``."""
    return to_canonical_json(list(message))
