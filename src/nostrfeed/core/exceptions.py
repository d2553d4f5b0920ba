"""nostrfeed exception hierarchy.

Typed exceptions for every failure category of the event pipeline, so that
callers can tell a refused operation from a transient transport blip and
let ``CancelledError`` propagate untouched.

Exception hierarchy:

```text
NostrFeedError (base -- never raised directly)
├── ConfigurationError        -- config validation, missing keys, bad YAML
├── ConstructionError         -- an event could not be built
│   ├── MissingKeypairError   -- no usable keypair for the active identity
│   └── ReadOnlyIdentityError -- identity holds only a public key
├── SerializationError        -- tags/content not encodable
├── SigningError              -- malformed key bytes, Schnorr failure
└── TransportError            -- feed fetch failed (recoverable)
```

Every error carries a ``user_message`` that a UI can show verbatim. The
first four categories are fatal to the single operation that raised them
and are never retried automatically; ``TransportError`` leaves feed state
untouched and allows a caller-driven retry.

See Also:
    [EventFactory][nostrfeed.nips.factory.EventFactory]: Converts
        construction, serialization and signing errors into "no event
        produced".
    [FeedManager][nostrfeed.feed.manager.FeedManager]: Recovers from
        [TransportError][nostrfeed.core.exceptions.TransportError].
"""

from __future__ import annotations

from typing import ClassVar


class NostrFeedError(Exception):
    """Base exception for all nostrfeed errors.

    Never raised directly -- always use a specific subclass.
    """

    user_message: ClassVar[str] = "Something went wrong."


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(NostrFeedError):
    """Invalid or missing configuration (YAML, env vars)."""

    user_message = "The application is misconfigured."


# ---------------------------------------------------------------------------
# Event construction
# ---------------------------------------------------------------------------


class ConstructionError(NostrFeedError):
    """An event could not be constructed from the given inputs.

    Also raised directly for malformed domain inputs (empty ids, bad hex).
    """

    user_message = "The event could not be created."


class MissingKeypairError(ConstructionError):
    """No keypair is available for the active identity."""

    user_message = "You are not signed in. Sign in to continue."


class ReadOnlyIdentityError(ConstructionError):
    """The active identity only has a public key and cannot sign.

    Private-key operations are refused outright in this mode: they are
    not queued and not degraded to unsigned events.
    """

    user_message = "You are signed in with a public key only. Reconnect your private key to continue."


class SerializationError(NostrFeedError):
    """Tags or content could not be encoded for hashing."""

    user_message = "The event contains text that cannot be published."


class SigningError(NostrFeedError):
    """The private key is malformed or Schnorr signing failed."""

    user_message = "Your private key could not sign this event. Reconnect your private key."


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class TransportError(NostrFeedError):
    """A request to the relay transport failed.

    Transient by nature: the feed engine keeps its state and the caller
    may retry.
    """

    user_message = "Could not reach the server. Pull to retry."
