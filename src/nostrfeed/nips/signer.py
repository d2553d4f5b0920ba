"""
Event id derivation, Schnorr signing and verification.

Sealing an event takes three steps:

1. Canonically serialize ``(pubkey, created_at, kind, tags, content)``
   with [serialize_event()][nostrfeed.nips.serialization.serialize_event].
2. SHA-256 the UTF-8 bytes; the lowercase hex digest is the ``id``.
3. BIP-340 Schnorr-sign the raw 32-byte digest; the hex signature is
   ``sig``.

Signing is delegated to ``nostr_sdk.Keys.sign_schnorr``, which draws 32
bytes of fresh auxiliary randomness from the operating system RNG for every
signature. Nothing here caches the private key: a ``Keys`` object is built
for the duration of one call and dropped.

See Also:
    [EventFactory][nostrfeed.nips.factory.EventFactory]: Builds templates
        and seals them with the active identity.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Sequence

from nostr_sdk import Event as NostrEvent
from nostr_sdk import Keys, NostrSdkError

from nostrfeed.core.exceptions import SerializationError, SigningError
from nostrfeed.models import Event

from .serialization import serialize_event_bytes


logger = logging.getLogger(__name__)


def compute_event_id(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: Sequence[Sequence[str]],
    content: str,
) -> str:
    """Return the lowercase hex SHA-256 of the canonical serialization.

    Raises:
        SerializationError: If the fields cannot be encoded.
    """
    return hashlib.sha256(serialize_event_bytes(pubkey, created_at, kind, tags, content)).hexdigest()


def _load_keys(privkey: str) -> Keys:
    if not isinstance(privkey, str) or not privkey:
        raise SigningError("private key is missing")
    try:
        return Keys.parse(privkey)
    except (NostrSdkError, ValueError, TypeError) as e:
        # The key itself is never included in the message.
        raise SigningError("private key is malformed") from e


def sign_event(  # noqa: PLR0913
    pubkey: str,
    privkey: str,
    created_at: int,
    kind: int,
    tags: Sequence[Sequence[str]],
    content: str,
) -> Event:
    """Seal an event with its id and Schnorr signature.

    Args:
        pubkey: Author public key (hex). Must be the key derived from
            *privkey*.
        privkey: Author private key (hex or nsec), borrowed for this call.
        created_at: Unix timestamp in seconds.
        kind: Event kind.
        tags: Ordered tag matrix.
        content: Event content.

    Returns:
        A sealed, verifiable [Event][nostrfeed.models.event.Event].

    Raises:
        SerializationError: If tags or content cannot be encoded.
        SigningError: If the key is malformed, does not match *pubkey*, or
            signing fails.
    """
    event_id = compute_event_id(pubkey, created_at, kind, tags, content)
    keys = _load_keys(privkey)
    try:
        if keys.public_key().to_hex() != pubkey:
            raise SigningError("private key does not match the author pubkey")
        sig = keys.sign_schnorr(bytes.fromhex(event_id))
    except (NostrSdkError, ValueError, TypeError) as e:
        raise SigningError(f"schnorr signing failed for event {event_id[:16]}...") from e
    finally:
        del keys

    try:
        return Event(
            id=event_id,
            pubkey=pubkey,
            created_at=created_at,
            kind=int(kind),
            tags=[list(tag) for tag in tags],
            content=content,
            sig=sig,
        )
    except (TypeError, ValueError) as e:
        raise SigningError(f"signer produced an invalid event: {e}") from e


def verify_event(event: Event) -> bool:
    """Check that ``id`` matches the fields and ``sig`` verifies against it.

    Returns:
        ``True`` only if the recomputed id equals ``event.id`` and the
        Schnorr signature verifies for ``event.pubkey``. Never raises for
        malformed events; they simply fail verification.
    """
    try:
        expected = compute_event_id(
            event.pubkey, event.created_at, event.kind, event.tags, event.content
        )
    except SerializationError:
        return False
    if expected != event.id:
        return False

    try:
        return bool(NostrEvent.from_json(event.to_json()).verify())
    except (NostrSdkError, ValueError, TypeError) as e:
        logger.debug("event_verification_failed event_id=%s error=%s", event.id[:16], e)
        return False
