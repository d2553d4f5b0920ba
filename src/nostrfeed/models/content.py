"""
Timeline entities: posts, profiles, reposts and their parsed form.

A [ParsedContent][nostrfeed.models.content.ParsedContent] is what a
timeline holds: one underlying [Post][nostrfeed.models.content.Post], the
author's [UserProfile][nostrfeed.models.content.UserProfile], and, when it
arrived through one or more reposts, a
[RepostInfo][nostrfeed.models.content.RepostInfo] wrapper aggregating every
reposting identity.

Posts, profiles and repost wrappers are frozen. ``ParsedContent`` is the
one mutable record: the feed engine swaps its ``reposted`` wrapper for a
merged one when further reposts of the same post arrive.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ._validation import freeze_tags, validate_int, validate_str, validate_str_not_empty
from .constants import EventKind


@dataclass(frozen=True, slots=True)
class Post:
    """An underlying note as delivered by the caching server.

    ``sig`` may be empty for posts the server re-encodes without a
    signature; such posts can be displayed and reacted to but not
    reposted verbatim.
    """

    id: str
    pubkey: str
    created_at: int
    content: str = ""
    kind: int = EventKind.TEXT_NOTE
    tags: tuple[tuple[str, ...], ...] = ()
    sig: str = ""

    def __post_init__(self) -> None:
        validate_str(self.id, "id")
        validate_str_not_empty(self.pubkey, "pubkey")
        validate_int(self.created_at, "created_at")
        validate_int(self.kind, "kind")
        validate_str(self.content, "content")
        validate_str(self.sig, "sig")
        object.__setattr__(self, "tags", freeze_tags(self.tags))

    def to_dict(self) -> dict[str, Any]:
        """Return the NIP-01 JSON object, fields in wire order."""
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": [list(tag) for tag in self.tags],
            "content": self.content,
            "sig": self.sig,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Post:
        """Parse a post object; ``created_at`` may arrive as a float."""
        return cls(
            id=data.get("id", ""),
            pubkey=data["pubkey"],
            created_at=int(data.get("created_at", 0)),
            content=data.get("content", ""),
            kind=int(data.get("kind", EventKind.TEXT_NOTE)),
            tags=data.get("tags") or (),
            sig=data.get("sig", ""),
        )


@dataclass(frozen=True, slots=True)
class UserProfile:
    """Display profile for a pubkey (kind 0 content plus the key)."""

    pubkey: str
    name: str = ""
    display_name: str = ""
    picture: str = ""
    nip05: str = ""
    about: str = ""
    lud16: str = ""

    @property
    def best_name(self) -> str:
        return self.display_name or self.name or self.pubkey[:8]

    def to_metadata(self) -> dict[str, str]:
        """Return the kind 0 content map, empty fields dropped."""
        fields = {
            "name": self.name,
            "display_name": self.display_name,
            "picture": self.picture,
            "nip05": self.nip05,
            "about": self.about,
            "lud16": self.lud16,
        }
        return {k: v for k, v in fields.items() if v}

    @classmethod
    def from_dict(cls, pubkey: str, data: Mapping[str, Any]) -> UserProfile:
        def text(key: str) -> str:
            value = data.get(key)
            return value if isinstance(value, str) else ""

        return cls(
            pubkey=pubkey,
            name=text("name"),
            display_name=text("display_name") or text("displayName"),
            picture=text("picture"),
            nip05=text("nip05"),
            about=text("about"),
            lud16=text("lud16"),
        )


@dataclass(frozen=True, slots=True)
class RepostInfo:
    """Aggregation of every repost of one post within a timeline.

    Attributes:
        users: Reposting pubkeys in first-seen order, without duplicates.
            The first entry is the canonical reposting identity shown in
            the UI and used for mute matching.
        date: Timestamp of the repost that created the wrapper.
        id: Event id of the repost that created the wrapper.
    """

    users: tuple[str, ...]
    date: int
    id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "users", tuple(dict.fromkeys(self.users)))
        validate_int(self.date, "date")
        validate_str(self.id, "id")

    @property
    def reposter(self) -> str | None:
        return self.users[0] if self.users else None

    def merged(self, users: Iterable[str]) -> RepostInfo:
        """Return a wrapper whose users are the union with *users*.

        The set never shrinks and the original ``date`` and ``id`` are kept.
        """
        return RepostInfo(users=(*self.users, *users), date=self.date, id=self.id)


@dataclass(frozen=True, slots=True)
class NostrRepost:
    """A repost as delivered by the server: reposting event plus the original post."""

    id: str
    pubkey: str
    post: Post
    date: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NostrRepost:
        return cls(
            id=data["id"],
            pubkey=data["pubkey"],
            post=Post.from_dict(data["post"]),
            date=int(data.get("date", 0)),
        )


@dataclass(slots=True, eq=False)
class ParsedContent:
    """One timeline entry.

    Compared by identity: two entries for the same post are distinct
    objects until the feed engine folds them together.
    """

    post: Post
    user: UserProfile
    reposted: RepostInfo | None = None

    @property
    def id(self) -> str:
        return self.post.id

    @property
    def author(self) -> str:
        return self.post.pubkey

    @property
    def reposter(self) -> str | None:
        return self.reposted.reposter if self.reposted else None

    @property
    def sort_date(self) -> int:
        """Repost date for reposted entries, creation date otherwise."""
        return self.reposted.date if self.reposted else self.post.created_at

    def __repr__(self) -> str:
        return f"ParsedContent(id={self.id[:12]!r}, author={self.author[:12]!r}, reposter={self.reposter!r})"
