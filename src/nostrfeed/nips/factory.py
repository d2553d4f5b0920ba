"""
Signed event construction for the active identity.

[EventFactory][nostrfeed.nips.factory.EventFactory] ties the template
builders to the signer. The identity is injected rather than looked up
globally, and its keypair is borrowed for exactly one
[sign_event()][nostrfeed.nips.signer.sign_event] call.

Every public method returns the sealed event, or ``None`` when no event
could be produced. The reason is logged and kept on
[last_error][nostrfeed.nips.factory.EventFactory.last_error] so the UI can
show its ``user_message`` (for example "Reconnect your private key").
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from nostr_sdk import NostrSdkError, PublicKey, SecretKey, nip04_encrypt

from nostrfeed.core.exceptions import ConstructionError, NostrFeedError
from nostrfeed.core.logger import Logger
from nostrfeed.core.metrics import EVENTS_FAILED, EVENTS_SIGNED
from nostrfeed.models import APP_NAME, Event, Post, UserProfile
from nostrfeed.utils.keys import IdentityProvider

from . import event_builders as builders
from .event_builders import EventTemplate, RelayInfo, ZapTarget
from .signer import sign_event


class EventFactory:
    """Builds and signs events on behalf of an identity.

    Args:
        identity: Provider of the active keypair and user relays.
        app_name: Value of the ``d`` tag for kind 30078 events.
        bootstrap_relays: Relays written into a new account's contact list.
        clock: Returns the current Unix time; injectable for tests.

    Examples:
        ```python
        factory = EventFactory(Identity.from_private_key(nsec))
        event = factory.post("gm", mentioned_pubkeys=[friend])
        if event is None:
            show_banner(factory.last_error.user_message)
        ```
    """

    def __init__(
        self,
        identity: IdentityProvider,
        *,
        app_name: str = APP_NAME,
        bootstrap_relays: Iterable[str] = (),
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._identity = identity
        self._app_name = app_name
        self._bootstrap_relays = list(bootstrap_relays)
        self._clock = clock
        self._logger = Logger("factory")
        self._last_error: NostrFeedError | None = None

    @property
    def last_error(self) -> NostrFeedError | None:
        """The error behind the most recent ``None`` result, cleared on success."""
        return self._last_error

    # -------------------------------------------------------------------------
    # Core
    # -------------------------------------------------------------------------

    def seal(self, template: EventTemplate, *, created_at: int | None = None) -> Event:
        """Sign *template* with the identity's keypair.

        Raises:
            MissingKeypairError: If nobody is signed in.
            ReadOnlyIdentityError: If the identity cannot sign.
            SerializationError: If the template cannot be encoded.
            SigningError: If the private key is unusable.
        """
        keypair = self._identity.signing_keypair()
        if created_at is None:
            created_at = int(self._clock())
        return sign_event(
            keypair.pubkey,
            keypair.privkey or "",
            created_at,
            template.kind,
            template.tags,
            template.content,
        )

    def create(self, template: EventTemplate, *, created_at: int | None = None) -> Event | None:
        """Seal an arbitrary template, returning ``None`` on failure."""
        return self._produce(lambda: template, created_at=created_at)

    def _produce(
        self,
        build: Callable[[], EventTemplate],
        *,
        created_at: int | None = None,
        kind_hint: int | str = "unknown",
    ) -> Event | None:
        try:
            template = build()
            kind_hint = template.kind
            event = self.seal(template, created_at=created_at)
        except NostrFeedError as e:
            self._last_error = e
            EVENTS_FAILED.labels(kind=str(kind_hint), error=type(e).__name__).inc()
            self._logger.warning(
                "event_not_produced",
                kind=kind_hint,
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

        self._last_error = None
        EVENTS_SIGNED.labels(kind=str(event.kind)).inc()
        self._logger.debug("event_signed", kind=event.kind, event_id=event.id)
        return event

    # -------------------------------------------------------------------------
    # Notes and interactions
    # -------------------------------------------------------------------------

    def post(self, content: str, mentioned_pubkeys: Iterable[str] = ()) -> Event | None:
        mentions = list(mentioned_pubkeys)
        return self._produce(lambda: builders.build_post(content, mentions))

    def reply(
        self, content: str, parent: Post, mentioned_pubkeys: Iterable[str] = ()
    ) -> Event | None:
        mentions = list(mentioned_pubkeys)
        return self._produce(lambda: builders.build_reply(content, parent, mentions))

    def repost(self, original: Post | Event) -> Event | None:
        return self._produce(lambda: builders.build_repost(original))

    def like(self, post: Post) -> Event | None:
        return self._produce(lambda: builders.build_reaction(post))

    def metadata(self, profile: UserProfile) -> Event | None:
        return self._produce(lambda: builders.build_metadata(profile))

    # -------------------------------------------------------------------------
    # Contacts and mutes
    # -------------------------------------------------------------------------

    def contacts(self, contacts: Iterable[str], relays: Mapping[str, RelayInfo]) -> Event | None:
        follows = list(contacts)
        return self._produce(lambda: builders.build_contacts(follows, relays))

    def first_contact(self) -> Event | None:
        """Initial contact list for a new account: follow self, use bootstrap relays."""
        return self._produce(
            lambda: builders.build_first_contact(self._identity.pubkey, self._bootstrap_relays)
        )

    def mute_list(self, muted_pubkeys: Iterable[str]) -> Event | None:
        muted = list(muted_pubkeys)
        return self._produce(lambda: builders.build_mute_list(muted))

    # -------------------------------------------------------------------------
    # Settings and chat markers (kind 30078)
    # -------------------------------------------------------------------------

    def get_settings(self) -> Event | None:
        return self._produce(lambda: builders.build_get_settings(self._app_name))

    def update_settings(self, settings: Mapping[str, Any]) -> Event | None:
        return self._produce(lambda: builders.build_update_settings(settings, self._app_name))

    def chat_read(self, pubkey: str) -> Event | None:
        return self._produce(lambda: builders.build_chat_read(pubkey, self._app_name))

    def mark_all_chats_read(self) -> Event | None:
        return self._produce(lambda: builders.build_mark_all_chats_read(self._app_name))

    # -------------------------------------------------------------------------
    # Direct messages (NIP-04)
    # -------------------------------------------------------------------------

    def message(self, content: str, recipient_pubkey: str) -> Event | None:
        """Encrypt *content* for *recipient_pubkey* and seal a kind 4 event.

        Encryption failure produces no event; plaintext is never sent.
        """
        return self._produce(
            lambda: builders.build_direct_message(
                self._encrypt(content, recipient_pubkey), recipient_pubkey
            )
        )

    def _encrypt(self, content: str, recipient_pubkey: str) -> str:
        keypair = self._identity.signing_keypair()
        try:
            return nip04_encrypt(
                SecretKey.parse(keypair.privkey or ""),
                PublicKey.parse(recipient_pubkey),
                content,
            )
        except NostrSdkError as e:
            raise ConstructionError("direct message could not be encrypted") from e

    # -------------------------------------------------------------------------
    # Zaps and wallet (NIP-57)
    # -------------------------------------------------------------------------

    def zap(self, target: ZapTarget, relays: Iterable[str], comment: str = "") -> Event | None:
        relay_list = list(relays)
        return self._produce(lambda: builders.build_zap_request(comment, target, relay_list))

    def wallet_zap(self, note: str, sats: int, post: Post) -> Event | None:
        """Zap request for the built-in wallet, tagged with the user's relays."""
        return self._produce(
            lambda: builders.build_wallet_zap(note, sats, post, self._identity.relays)
        )

    def wallet(self, content: str) -> Event | None:
        return self._produce(lambda: builders.build_wallet_command(content))
