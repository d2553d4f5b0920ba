"""Mute list service shared by every feed of a session."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from nostrfeed.core.logger import Logger


MuteListener = Callable[[str], object]


class MuteList:
    """The user's muted pubkeys, with change notification.

    Feeds subscribe to be told when a pubkey is muted so they can drop its
    entries immediately. Publishing the kind 10000 event is the caller's
    job, via [EventFactory.mute_list()][nostrfeed.nips.factory.EventFactory.mute_list]
    with [pubkeys][nostrfeed.feed.mute.MuteList.pubkeys].
    """

    def __init__(self, pubkeys: Iterable[str] = ()) -> None:
        self._muted: dict[str, None] = dict.fromkeys(pubkeys)
        self._listeners: list[MuteListener] = []
        self._logger = Logger("mute")

    def __contains__(self, pubkey: object) -> bool:
        return pubkey in self._muted

    def __len__(self) -> int:
        return len(self._muted)

    @property
    def pubkeys(self) -> list[str]:
        """Muted pubkeys in the order they were muted."""
        return list(self._muted)

    def is_muted(self, pubkey: str | None) -> bool:
        return pubkey is not None and pubkey in self._muted

    def subscribe(self, listener: MuteListener) -> Callable[[], None]:
        """Register *listener* for newly muted pubkeys; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def mute(self, pubkey: str) -> bool:
        """Mute *pubkey* and notify listeners. Returns False if it was already muted."""
        if pubkey in self._muted:
            return False
        self._muted[pubkey] = None
        self._logger.info("user_muted", pubkey=pubkey, muted=len(self._muted))
        for listener in list(self._listeners):
            listener(pubkey)
        return True

    def unmute(self, pubkey: str) -> bool:
        """Unmute *pubkey*. Entries already removed from feeds are not restored."""
        if pubkey not in self._muted:
            return False
        del self._muted[pubkey]
        self._logger.info("user_unmuted", pubkey=pubkey, muted=len(self._muted))
        return True

    def replace(self, pubkeys: Iterable[str]) -> None:
        """Replace the whole list (e.g. from a fetched kind 10000 event), notifying new mutes."""
        incoming = dict.fromkeys(pubkeys)
        added = [pk for pk in incoming if pk not in self._muted]
        self._muted = incoming
        for pubkey in added:
            for listener in list(self._listeners):
                listener(pubkey)
