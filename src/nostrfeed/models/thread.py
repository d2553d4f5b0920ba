"""Thread view ordering result."""

from __future__ import annotations

from dataclasses import dataclass

from .content import ParsedContent


@dataclass(frozen=True, slots=True)
class ThreadView:
    """A conversation arranged around its focal post.

    Attributes:
        posts: Ancestors oldest first, then the focal post, then replies
            newest first.
        focal_index: Position of the focal post in ``posts`` so the UI can
            scroll to it.
    """

    posts: tuple[ParsedContent, ...]
    focal_index: int

    @property
    def focal(self) -> ParsedContent:
        return self.posts[self.focal_index]
