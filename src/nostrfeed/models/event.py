"""
Immutable, sealed Nostr event.

An [Event][nostrfeed.models.event.Event] carries the seven NIP-01 fields
exactly as they go over the wire. Instances are produced by
[sign_event()][nostrfeed.nips.signer.sign_event] or parsed from relay data
with [from_dict()][nostrfeed.models.event.Event.from_dict]; they are never
mutated afterwards. A correction is a new event.

See Also:
    [nostrfeed.nips.serialization][]: Canonical serialization used to
        derive ``id``.
    [nostrfeed.nips.signer][]: Seals and verifies events.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ._validation import freeze_tags, validate_hex, validate_int, validate_str, validate_timestamp
from .constants import EVENT_ID_BYTES, PUBKEY_BYTES, SIGNATURE_BYTES


_FIELDS = ("id", "pubkey", "created_at", "kind", "tags", "content", "sig")


@dataclass(frozen=True, slots=True)
class Event:
    """Sealed Nostr event.

    Validation is performed eagerly at construction time: ``id`` and
    ``pubkey`` must be 64 lowercase hex characters, ``sig`` 128, and
    ``tags`` a sequence of sequences of strings. Tags are stored as a
    tuple of tuples so the instance is deeply immutable.

    Note:
        Construction does **not** check that ``id`` matches the other
        fields or that ``sig`` verifies; use
        [verify_event()][nostrfeed.nips.signer.verify_event] for that.

    Examples:
        ```python
        event = Event.from_dict(relay_payload)
        event.kind            # 1
        event.to_message()    # ["EVENT", {...}]
        ```
    """

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: tuple[tuple[str, ...], ...]
    content: str
    sig: str

    def __post_init__(self) -> None:
        validate_hex(self.id, "id", nbytes=EVENT_ID_BYTES)
        validate_hex(self.pubkey, "pubkey", nbytes=PUBKEY_BYTES)
        validate_timestamp(self.created_at, "created_at")
        validate_int(self.kind, "kind")
        validate_str(self.content, "content")
        validate_hex(self.sig, "sig", nbytes=SIGNATURE_BYTES)
        object.__setattr__(self, "tags", freeze_tags(self.tags))

    def tag_lists(self) -> list[list[str]]:
        """Return the tags as fresh mutable lists, order preserved."""
        return [list(tag) for tag in self.tags]

    def tag_values(self, name: str) -> list[str]:
        """Return the first value of every tag named *name* (e.g. ``"p"``)."""
        return [tag[1] for tag in self.tags if len(tag) > 1 and tag[0] == name]

    def to_dict(self) -> dict[str, Any]:
        """Return the NIP-01 JSON object for this event."""
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": self.tag_lists(),
            "content": self.content,
            "sig": self.sig,
        }

    def to_message(self) -> list[Any]:
        """Return the relay submission frame ``["EVENT", <event-object>]``."""
        return ["EVENT", self.to_dict()]

    def to_json(self) -> str:
        """Serialize the event object compactly, without escaping ``/``."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Event:
        """Build an event from a NIP-01 JSON object.

        Raises:
            KeyError: If a required field is missing.
            TypeError: If a field has the wrong type.
            ValueError: If a hex field is malformed.
        """
        missing = [name for name in _FIELDS if name not in data]
        if missing:
            raise KeyError(f"event is missing fields: {', '.join(missing)}")
        return cls(**{name: data[name] for name in _FIELDS})

    @classmethod
    def from_json(cls, raw: str) -> Event:
        """Parse an event from its JSON object string."""
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise TypeError(f"event JSON must be an object, got {type(data).__name__}")
        return cls.from_dict(data)
