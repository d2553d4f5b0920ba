"""Shared constants for the models layer.

Defines the event kinds produced and consumed by the pipeline and the
pagination ordering discriminator. Placing them here avoids circular
dependencies between the models, nips and feed layers.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class EventKind(IntEnum):
    """Nostr event kinds built or consumed by nostrfeed.

    Attributes:
        METADATA: Kind 0 -- user profile metadata (NIP-01).
        TEXT_NOTE: Kind 1 -- posts and replies (NIP-01, NIP-10).
        CONTACTS: Kind 3 -- follow list with relay map content (NIP-02).
        DIRECT_MESSAGE: Kind 4 -- NIP-04 encrypted direct message.
        REPOST: Kind 6 -- repost of a kind 1 note (NIP-18).
        REACTION: Kind 7 -- like/reaction (NIP-25).
        ZAP_REQUEST: Kind 9734 -- zap request (NIP-57).
        MUTE_LIST: Kind 10000 -- mute list (NIP-51).
        APP_SETTINGS: Kind 30078 -- app-specific data: settings and
            chat-read markers (NIP-78).
        WALLET: Kind 10000300 -- wallet command envelope understood by the
            caching server.
    """

    METADATA = 0
    TEXT_NOTE = 1
    CONTACTS = 3
    DIRECT_MESSAGE = 4
    REPOST = 6
    REACTION = 7
    ZAP_REQUEST = 9_734
    MUTE_LIST = 10_000
    APP_SETTINGS = 30_078
    WALLET = 10_000_300


class OrderBy(StrEnum):
    """Known values of the ``order_by`` pagination field.

    Only ``created_at`` ordered feeds support backward paging and live
    polling. Any other value the server sends is kept verbatim as a plain
    string on the cursor.
    """

    CREATED_AT = "created_at"


APP_NAME = "nostrfeed"
"""Identifier used in the ``d`` tag of kind 30078 application events."""

EVENT_ID_BYTES = 32
PUBKEY_BYTES = 32
SIGNATURE_BYTES = 64
