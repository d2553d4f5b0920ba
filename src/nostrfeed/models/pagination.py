"""Pagination cursor for incremental feed fetching."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .constants import OrderBy


@dataclass(slots=True)
class PaginationCursor:
    """Time-range boundaries of what a feed has already loaded.

    ``since`` is the oldest timestamp covered so far and ``until`` the
    newest. The cursor is created from the first page response, advanced
    in place as further pages and live polls arrive, and dropped on
    refresh.

    Attributes:
        since: Lower bound (Unix seconds) of the loaded range.
        until: Upper bound (Unix seconds) of the loaded range.
        order_by: Server ordering of the feed; ``None`` when unspecified.
    """

    since: int
    until: int
    order_by: str | None = OrderBy.CREATED_AT

    @property
    def is_chronological(self) -> bool:
        """Whether the feed is ordered by creation time (or unspecified)."""
        return self.order_by is None or self.order_by == OrderBy.CREATED_AT

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PaginationCursor:
        """Parse the ``pagination`` object of a response, rounding timestamps.

        Missing or ``null`` bounds read as 0.
        """
        order_by = data.get("order_by")
        return cls(
            since=round(float(data.get("since") or 0)),
            until=round(float(data.get("until") or 0)),
            order_by=str(order_by) if order_by is not None else None,
        )
