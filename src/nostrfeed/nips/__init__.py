"""Nostr protocol layer: canonical serialization, signing, event builders.

Attributes:
    serialization: Bit-exact NIP-01 commitment serialization and compact
        JSON without slash escaping.
    signer: Event id derivation (SHA-256), BIP-340 Schnorr signing and
        verification through ``nostr_sdk``.
    event_builders: Pure ``(content, kind, tags)`` template builders for
        every kind the client publishes.
    factory: [EventFactory][nostrfeed.nips.factory.EventFactory], which
        seals templates with the injected identity and returns ``None``
        when no event can be produced.
"""

from .event_builders import (
    EventTemplate,
    NoteZapTarget,
    ProfileZapTarget,
    RelayInfo,
    ZapTarget,
)
from .factory import EventFactory
from .serialization import serialize_event, serialize_message, to_canonical_json
from .signer import compute_event_id, sign_event, verify_event


__all__ = [
    "EventFactory",
    "EventTemplate",
    "NoteZapTarget",
    "ProfileZapTarget",
    "RelayInfo",
    "ZapTarget",
    "compute_event_id",
    "serialize_event",
    "serialize_message",
    "sign_event",
    "to_canonical_json",
    "verify_event",
]
