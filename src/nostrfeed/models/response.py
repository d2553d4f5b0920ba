"""
Aggregated query result from the caching server.

A feed request streams back several JSON chunks; each may carry any of
``posts``, ``reposts``, ``users``, ``pagination`` and ``order``.
[PostRequestResult.merge()][nostrfeed.models.response.PostRequestResult.merge]
folds them into one result, and
[process()][nostrfeed.models.response.PostRequestResult.process] turns the
result into timeline entries.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .content import NostrRepost, ParsedContent, Post, RepostInfo, UserProfile
from .pagination import PaginationCursor


logger = logging.getLogger(__name__)


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


@dataclass(slots=True)
class PostRequestResult:
    """Everything a single feed, thread or profile request returned.

    Attributes:
        posts: Notes in delivery order.
        reposts: Reposts, each embedding the original note.
        users: Profiles keyed by pubkey.
        pagination: Cursor metadata, when the server sent it.
        order: Explicit entry order (post or repost event ids), when the
            server ranks results itself.
    """

    posts: list[Post] = field(default_factory=list)
    reposts: list[NostrRepost] = field(default_factory=list)
    users: dict[str, UserProfile] = field(default_factory=dict)
    pagination: PaginationCursor | None = None
    order: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.posts) + len(self.reposts)

    def merge(self, chunk: Mapping[str, Any]) -> None:
        """Fold one streamed response chunk into this result.

        Malformed posts, reposts, profiles and pagination are skipped with
        a warning; one bad entry never discards the rest of the page.
        """
        for raw in _as_list(chunk.get("posts")):
            try:
                self.posts.append(Post.from_dict(raw))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("post_skipped error=%s", e)
        for raw in _as_list(chunk.get("reposts")):
            try:
                self.reposts.append(NostrRepost.from_dict(raw))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("repost_skipped error=%s", e)
        users = chunk.get("users")
        if isinstance(users, Mapping):
            for pubkey, raw in users.items():
                if not isinstance(raw, Mapping):
                    continue
                try:
                    self.users[str(pubkey)] = UserProfile.from_dict(str(pubkey), raw)
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning("user_skipped pubkey=%s error=%s", pubkey, e)
        pagination = chunk.get("pagination")
        if isinstance(pagination, Mapping):
            try:
                self.pagination = PaginationCursor.from_dict(pagination)
            except (TypeError, ValueError, OverflowError) as e:
                logger.warning("pagination_skipped error=%s", e)
        self.order.extend(str(i) for i in _as_list(chunk.get("order")))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PostRequestResult:
        result = cls()
        result.merge(data)
        return result

    def user(self, pubkey: str) -> UserProfile:
        return self.users.get(pubkey) or UserProfile(pubkey=pubkey)

    def process(self) -> list[ParsedContent]:
        """Build timeline entries in delivery order.

        When the server sent an explicit ``order`` it is followed exactly,
        and entries it does not mention are appended afterwards. Otherwise
        posts and reposts are interleaved newest first by their display
        date (repost date for reposts); the sort is stable, so ties keep
        the order the server delivered them in.
        """
        entries: list[tuple[str, ParsedContent]] = [
            (post.id, ParsedContent(post=post, user=self.user(post.pubkey))) for post in self.posts
        ]
        entries.extend(
            (
                repost.id,
                ParsedContent(
                    post=repost.post,
                    user=self.user(repost.post.pubkey),
                    reposted=RepostInfo(users=(repost.pubkey,), date=repost.date, id=repost.id),
                ),
            )
            for repost in self.reposts
        )

        if self.order:
            rank = {key: i for i, key in enumerate(self.order)}
            entries.sort(key=lambda entry: rank.get(entry[0], len(rank)))
        else:
            entries.sort(key=lambda entry: entry[1].sort_date, reverse=True)
        return [parsed for _, parsed in entries]
