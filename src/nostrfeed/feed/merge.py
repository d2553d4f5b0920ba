"""
Pure merge steps of the feed engine.

These functions hold the deduplication rules; the
[FeedManager][nostrfeed.feed.manager.FeedManager] only sequences them and
owns the state they operate on.

* [drop_boundary_duplicate()][nostrfeed.feed.merge.drop_boundary_duplicate]:
  pages may overlap by one boundary item.
* [merge_reposts()][nostrfeed.feed.merge.merge_reposts]: folds every
  repost of a post into one canonical timeline entry.
* [filter_unseen()][nostrfeed.feed.merge.filter_unseen]: drops live-poll
  candidates already committed or buffered.

Note:
    The boundary rule assumes the server pages strictly backwards in time
    without reordering. It only compares the first item of the new page to
    the last item of the timeline.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from nostrfeed.models import ParsedContent


@dataclass(slots=True)
class CanonicalRepost:
    """Registry record for the one timeline entry that represents a reposted post.

    Attributes:
        post_id: Id of the reposted post.
        repost_id: Id of the repost event that created the canonical entry.
            An entry is canonical when its wrapper carries this id.
        entry: The canonical entry, whose wrapper absorbs later reposts.
    """

    post_id: str
    repost_id: str
    entry: ParsedContent

    def absorb(self, users: Iterable[str]) -> None:
        """Union *users* into the canonical wrapper, keeping its date and id."""
        if self.entry.reposted is not None:
            self.entry.reposted = self.entry.reposted.merged(users)


class RepostRegistry:
    """Map from post id to its canonical repost entry, for one timeline's lifetime."""

    __slots__ = ("_records",)

    def __init__(self) -> None:
        self._records: dict[str, CanonicalRepost] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, post_id: object) -> bool:
        return post_id in self._records

    def get(self, post_id: str) -> CanonicalRepost | None:
        return self._records.get(post_id)

    def register(self, entry: ParsedContent) -> CanonicalRepost:
        if entry.reposted is None:
            raise ValueError("only reposted entries can be registered")
        record = CanonicalRepost(post_id=entry.id, repost_id=entry.reposted.id, entry=entry)
        self._records[entry.id] = record
        return record

    def is_canonical(self, entry: ParsedContent) -> bool:
        """Whether *entry* is the registered representative of its post."""
        record = self._records.get(entry.id)
        return (
            record is not None
            and entry.reposted is not None
            and entry.reposted.id == record.repost_id
        )

    def clear(self) -> None:
        self._records.clear()


def drop_boundary_duplicate(
    timeline: Sequence[ParsedContent], page: Sequence[ParsedContent]
) -> list[ParsedContent]:
    """Drop the page's first item if it repeats the timeline's last item."""
    items = list(page)
    if timeline and items and items[0].id == timeline[-1].id:
        del items[0]
    return items


def merge_reposts(page: Sequence[ParsedContent], registry: RepostRegistry) -> list[ParsedContent]:
    """Group reposts by post id and keep only canonical entries.

    For every reposted post in *page*: when the registry already has a
    canonical entry, the new reposting users are unioned into its wrapper;
    otherwise the first repost in the page becomes canonical, carrying the
    users of all its siblings. The returned list keeps page order and drops
    every non-canonical repost entry. Plain (non-repost) entries pass
    through untouched.
    """
    groups: dict[str, list[ParsedContent]] = {}
    for entry in page:
        if entry.reposted is not None:
            groups.setdefault(entry.id, []).append(entry)

    # Posts whose canonical entry is already in the timeline contribute users only.
    absorbed: set[str] = set()
    for post_id, reposts in groups.items():
        users = [user for entry in reposts if entry.reposted for user in entry.reposted.users]
        record = registry.get(post_id)
        if record is not None:
            record.absorb(users)
            absorbed.add(post_id)
        else:
            registry.register(reposts[0]).absorb(users)

    merged: list[ParsedContent] = []
    for entry in page:
        if entry.reposted is not None:
            if entry.id in absorbed or not registry.is_canonical(entry):
                continue
            absorbed.add(entry.id)
        merged.append(entry)
    return merged


def filter_unseen(
    candidates: Iterable[ParsedContent], *known: Iterable[ParsedContent]
) -> list[ParsedContent]:
    """Drop candidates already present in any of the *known* sequences.

    A plain post is a duplicate of any known entry with the same post id,
    reposted or not. A repost is a duplicate only when the same post is
    already shown as reposted by that same user; a repost of a known post
    by a different user survives so its reposter can be merged in.
    Candidates without a post id are dropped.
    """
    seen: set[tuple[str, str | None]] = set()
    for sequence in known:
        for entry in sequence:
            seen.add((entry.id, None))
            if entry.reposted is not None:
                seen.update((entry.id, user) for user in entry.reposted.users)

    return [
        entry
        for entry in candidates
        if entry.id and (entry.id, entry.reposter) not in seen
    ]
