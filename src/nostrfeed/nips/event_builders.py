"""Event templates for every kind the client publishes.

Each builder is a pure function returning an
[EventTemplate][nostrfeed.nips.event_builders.EventTemplate] -- the
``(content, kind, tags)`` triple the signer seals. Builders validate their
domain inputs and raise
[ConstructionError][nostrfeed.core.exceptions.ConstructionError] (or
[SerializationError][nostrfeed.core.exceptions.SerializationError] for
content that cannot be JSON encoded); they never return a partially built
template.

See Also:
    [EventFactory][nostrfeed.nips.factory.EventFactory]: Seals templates with
        the active identity.
    [EventKind][nostrfeed.models.constants.EventKind]: Kind table.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

from nostrfeed.core.exceptions import ConstructionError
from nostrfeed.models import APP_NAME, Event, EventKind, Post, UserProfile

from .serialization import to_canonical_json


# =============================================================================
# Types
# =============================================================================


class EventTemplate(NamedTuple):
    """Unsigned event body: everything except pubkey, timestamp, id and sig."""

    content: str
    kind: int
    tags: list[list[str]]


class RelayInfo(NamedTuple):
    """Read/write capability advertised for a relay in a contact list."""

    read: bool = True
    write: bool = True

    def to_dict(self) -> dict[str, bool]:
        return {"read": self.read, "write": self.write}


@dataclass(frozen=True, slots=True)
class ProfileZapTarget:
    """Zap aimed at a user profile."""

    pubkey: str


@dataclass(frozen=True, slots=True)
class NoteZapTarget:
    """Zap aimed at a note, credited to its author."""

    event_id: str
    author_pubkey: str


ZapTarget = ProfileZapTarget | NoteZapTarget


def _require(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ConstructionError(f"{name} must be a non-empty string")
    return value


def _mention_tags(mentioned_pubkeys: Iterable[str]) -> list[list[str]]:
    return [["p", _require(pk, "mentioned pubkey"), "", "mention"] for pk in mentioned_pubkeys]


def _relays_content(relays: Mapping[str, RelayInfo]) -> str:
    return to_canonical_json({url: relays[url].to_dict() for url in sorted(relays)})


def _app_tags(app_name: str) -> list[list[str]]:
    return [["d", _require(app_name, "app_name")]]


# =============================================================================
# Kind 0 / 1 / 6 / 7 (NIP-01, NIP-10, NIP-18, NIP-25)
# =============================================================================


def build_metadata(profile: UserProfile) -> EventTemplate:
    """Kind 0 profile metadata; content is the JSON profile map."""
    return EventTemplate(to_canonical_json(profile.to_metadata()), EventKind.METADATA, [])


def build_post(content: str, mentioned_pubkeys: Iterable[str] = ()) -> EventTemplate:
    """Kind 1 note with one ``["p", pk, "", "mention"]`` tag per mention."""
    return EventTemplate(content, EventKind.TEXT_NOTE, _mention_tags(mentioned_pubkeys))


def build_reply(
    content: str, parent: Post, mentioned_pubkeys: Iterable[str] = ()
) -> EventTemplate:
    """Kind 1 reply: ``e`` reply marker, parent author ``p``, then mentions."""
    tags = [
        ["e", _require(parent.id, "parent id"), "", "reply"],
        ["p", _require(parent.pubkey, "parent pubkey")],
    ]
    tags.extend(_mention_tags(mentioned_pubkeys))
    return EventTemplate(content, EventKind.TEXT_NOTE, tags)


def build_repost(original: Post | Event) -> EventTemplate:
    """Kind 6 repost; content is the canonical JSON of the original event."""
    tags = [
        ["e", _require(original.id, "original id")],
        ["p", _require(original.pubkey, "original pubkey")],
    ]
    return EventTemplate(to_canonical_json(original.to_dict()), EventKind.REPOST, tags)


def build_reaction(post: Post, content: str = "+") -> EventTemplate:
    """Kind 7 like; ``+`` unless another reaction is given."""
    tags = [["e", _require(post.id, "post id")], ["p", _require(post.pubkey, "post pubkey")]]
    return EventTemplate(content, EventKind.REACTION, tags)


# =============================================================================
# Kind 3 (NIP-02)
# =============================================================================


def build_contacts(contacts: Iterable[str], relays: Mapping[str, RelayInfo]) -> EventTemplate:
    """Kind 3 follow list.

    Follows are de-duplicated and sorted so that the same set always yields
    the same id.
    """
    tags = [["p", _require(pk, "contact pubkey")] for pk in sorted(set(contacts))]
    return EventTemplate(_relays_content(relays), EventKind.CONTACTS, tags)


def build_first_contact(own_pubkey: str, bootstrap_relays: Iterable[str]) -> EventTemplate:
    """Kind 3 list for a new account: follows itself, reads/writes every bootstrap relay."""
    relays = {url: RelayInfo(read=True, write=True) for url in bootstrap_relays}
    return EventTemplate(
        _relays_content(relays), EventKind.CONTACTS, [["p", _require(own_pubkey, "pubkey")]]
    )


# =============================================================================
# Kind 4 (NIP-04)
# =============================================================================


def build_direct_message(ciphertext: str, recipient_pubkey: str) -> EventTemplate:
    """Kind 4 direct message; *ciphertext* must already be NIP-04 encrypted."""
    return EventTemplate(
        _require(ciphertext, "ciphertext"),
        EventKind.DIRECT_MESSAGE,
        [["p", _require(recipient_pubkey, "recipient pubkey")]],
    )


# =============================================================================
# Kind 9734 (NIP-57)
# =============================================================================


def build_zap_request(comment: str, target: ZapTarget, relays: Iterable[str]) -> EventTemplate:
    """Kind 9734 zap request: target tags followed by the ``relays`` tag."""
    if isinstance(target, ProfileZapTarget):
        tags = [["p", _require(target.pubkey, "target pubkey")]]
    elif isinstance(target, NoteZapTarget):
        tags = [
            ["e", _require(target.event_id, "target event id")],
            ["p", _require(target.author_pubkey, "target author pubkey")],
        ]
    else:
        raise ConstructionError(f"unsupported zap target {type(target).__name__}")
    tags.append(["relays", *relays])
    return EventTemplate(comment, EventKind.ZAP_REQUEST, tags)


def build_wallet_zap(note: str, sats: int, post: Post, relays: Iterable[str] = ()) -> EventTemplate:
    """Kind 9734 zap request paid from the built-in wallet.

    The ``amount`` tag is in millisats. The ``relays`` tag is only added
    when the user has relays configured.
    """
    if isinstance(sats, bool) or not isinstance(sats, int) or sats <= 0:
        raise ConstructionError("sats must be a positive int")
    tags = [
        ["p", _require(post.pubkey, "post pubkey")],
        ["e", _require(post.id, "post id")],
        ["amount", str(sats * 1000)],
    ]
    relay_list = list(relays)
    if relay_list:
        tags.append(["relays", *relay_list])
    return EventTemplate(note, EventKind.ZAP_REQUEST, tags)


def build_wallet_command(content: str) -> EventTemplate:
    """Wallet envelope (kind 10000300) understood by the caching server."""
    return EventTemplate(content, EventKind.WALLET, [])


# =============================================================================
# Kind 10000 (NIP-51)
# =============================================================================


def build_mute_list(muted_pubkeys: Iterable[str]) -> EventTemplate:
    """Kind 10000 mute list, one ``p`` tag per muted pubkey in the given order."""
    tags = [["p", _require(pk, "muted pubkey")] for pk in dict.fromkeys(muted_pubkeys)]
    return EventTemplate("", EventKind.MUTE_LIST, tags)


# =============================================================================
# Kind 30078 (NIP-78)
# =============================================================================


def build_get_settings(app_name: str = APP_NAME) -> EventTemplate:
    """Kind 30078 request for the user's synced app settings."""
    content = to_canonical_json({"description": "Sync app settings"})
    return EventTemplate(content, EventKind.APP_SETTINGS, _app_tags(app_name))


def build_update_settings(settings: Mapping[str, Any], app_name: str = APP_NAME) -> EventTemplate:
    """Kind 30078 replacement of the user's app settings."""
    return EventTemplate(to_canonical_json(dict(settings)), EventKind.APP_SETTINGS, _app_tags(app_name))


def build_chat_read(pubkey: str, app_name: str = APP_NAME) -> EventTemplate:
    """Kind 30078 marker resetting the unread count of one conversation."""
    content = to_canonical_json(
        {"description": f"reset messages from '{_require(pubkey, 'chat pubkey')}'"}
    )
    return EventTemplate(content, EventKind.APP_SETTINGS, _app_tags(app_name))


def build_mark_all_chats_read(app_name: str = APP_NAME) -> EventTemplate:
    """Kind 30078 marker resetting the unread count of every conversation."""
    content = to_canonical_json({"description": "mark all messages as read"})
    return EventTemplate(content, EventKind.APP_SETTINGS, _app_tags(app_name))


__all__ = [
    "EventTemplate",
    "NoteZapTarget",
    "ProfileZapTarget",
    "RelayInfo",
    "ZapTarget",
    "build_chat_read",
    "build_contacts",
    "build_direct_message",
    "build_first_contact",
    "build_get_settings",
    "build_mark_all_chats_read",
    "build_metadata",
    "build_mute_list",
    "build_post",
    "build_reaction",
    "build_reply",
    "build_repost",
    "build_update_settings",
    "build_wallet_command",
    "build_wallet_zap",
    "build_zap_request",
]
