"""Thread view ordering around a focal post."""

from __future__ import annotations

from collections.abc import Iterable

from nostrfeed.models import ParsedContent, ThreadView


def order_thread(entries: Iterable[ParsedContent], focal_id: str) -> ThreadView | None:
    """Arrange a thread for display.

    Posts older than the focal post come first, oldest first; posts newer
    than it (and non-focal posts sharing its timestamp) follow, newest
    first. Duplicate post ids keep their first occurrence.

    Returns:
        The ordered [ThreadView][nostrfeed.models.thread.ThreadView], or
        ``None`` when the focal post is not among *entries*.
    """
    unique: dict[str, ParsedContent] = {}
    for entry in entries:
        unique.setdefault(entry.id, entry)

    focal = unique.pop(focal_id, None)
    if focal is None:
        return None

    pivot = focal.post.created_at
    before = sorted(
        (e for e in unique.values() if e.post.created_at < pivot),
        key=lambda e: e.post.created_at,
    )
    after = sorted(
        (e for e in unique.values() if e.post.created_at >= pivot),
        key=lambda e: e.post.created_at,
        reverse=True,
    )
    return ThreadView(posts=(*before, focal, *after), focal_index=len(before))
