"""
Feed merge engine.

A [FeedManager][nostrfeed.feed.manager.FeedManager] owns one timeline. It
pages backwards through a feed, polls for newer posts, folds reposts of the
same post into one entry, and drops entries of muted users.

State machine::

    Idle --request_next_page()--> Loading --page/failure--> Idle
    (AtEnd is an orthogonal flag, set when a page yields nothing new)

All mutations happen on the event loop that owns the manager; it is not
safe to drive one instance from several threads. At most one page fetch
and one live poll are in flight at a time. Every
[refresh()][nostrfeed.feed.manager.FeedManager.refresh] bumps a generation
counter, and responses belonging to an older generation are discarded.

Examples:
    ```python
    feed = FeedManager(transport, identity, feed=FeedSource.latest(identity.pubkey))
    async with feed:
        await feed.refresh()
        await feed.request_next_page()
        for entry in feed.timeline:
            ...
    ```
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from types import TracebackType
from typing import Any, Self

from nostrfeed.core.exceptions import TransportError
from nostrfeed.core.logger import Logger
from nostrfeed.core.metrics import FEED_PAGES, TIMELINE_SIZE
from nostrfeed.models import PaginationCursor, ParsedContent, PostRequestResult, ThreadView
from nostrfeed.utils.keys import IdentityProvider
from nostrfeed.utils.transport import (
    FEED_DIRECTIVE,
    PROFILE_FEED,
    THREAD_VIEW,
    Transport,
    feed_directive_payload,
    fetch_result,
    profile_feed_payload,
    thread_view_payload,
)

from .configs import FeedConfig
from .merge import RepostRegistry, drop_boundary_duplicate, filter_unseen, merge_reposts
from .mute import MuteList
from .thread import order_thread


BatchListener = Callable[[list[ParsedContent]], object]


@dataclass(frozen=True, slots=True)
class FeedSource:
    """A server-side feed identified by its directive string."""

    name: str
    directive: str
    include_replies: bool = False

    @classmethod
    def latest(cls, user_pubkey: str) -> FeedSource:
        """The user's chronological home feed."""
        return cls(name="Latest", directive=user_pubkey)

    @classmethod
    def search(cls, query: str) -> FeedSource:
        return cls(name=f"Search: {query}", directive=f"search;{query}")


class FeedManager:
    """Owner of one ordered, de-duplicated timeline.

    Exactly one of ``feed`` or ``profile_pubkey`` selects what is paged;
    with neither, the identity's "Latest" feed is used. Thread timelines
    are loaded with
    [request_thread()][nostrfeed.feed.manager.FeedManager.request_thread].

    Args:
        transport: Request channel to the caching server.
        identity: Supplies ``user_pubkey`` for every request.
        config: Paging and polling policy.
        feed: Directive feed to page through.
        profile_pubkey: Page through this user's notes instead.
        mute_list: When given, muting a pubkey removes its entries.
        add_future_posts_directly: Overrides
            ``config.add_future_posts_directly`` with a callable evaluated
            at merge time (e.g. "is the user scrolled to the top").
    """

    def __init__(  # noqa: PLR0913
        self,
        transport: Transport,
        identity: IdentityProvider,
        *,
        config: FeedConfig | None = None,
        feed: FeedSource | None = None,
        profile_pubkey: str | None = None,
        mute_list: MuteList | None = None,
        add_future_posts_directly: Callable[[], bool] | None = None,
    ) -> None:
        if feed is not None and profile_pubkey is not None:
            raise ValueError("feed and profile_pubkey are mutually exclusive")
        self._transport = transport
        self._identity = identity
        self._config = config if config is not None else FeedConfig()
        self._feed = feed
        self._profile_pubkey = profile_pubkey
        self._with_replies: bool | None = None
        self._add_directly = add_future_posts_directly or (
            lambda: self._config.add_future_posts_directly
        )
        self._logger = Logger("feed")

        self._timeline: list[ParsedContent] = []
        self._buffered: list[ParsedContent] = []
        self._new_added = 0
        self._cursor: PaginationCursor | None = None
        self._registry = RepostRegistry()
        self._thread: ThreadView | None = None

        self._loading = False
        self._polling = False
        self._at_end = False
        self._generation = 0

        self._page_listeners: list[BatchListener] = []
        self._future_listeners: list[BatchListener] = []

        self._mute_list = mute_list
        self._unsubscribe_mutes = (
            mute_list.subscribe(self.handle_user_muted) if mute_list is not None else None
        )
        self._shutdown_event = asyncio.Event()
        self._poll_task: asyncio.Task[None] | None = None

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        if self._profile_pubkey is not None:
            return f"profile:{self._profile_pubkey[:12]}"
        return self._feed.name if self._feed is not None else "Latest"

    @property
    def config(self) -> FeedConfig:
        return self._config

    @property
    def feed(self) -> FeedSource | None:
        return self._feed

    @property
    def timeline(self) -> tuple[ParsedContent, ...]:
        """Committed entries, newest first. A snapshot; the engine owns the list."""
        return tuple(self._timeline)

    @property
    def buffered(self) -> tuple[ParsedContent, ...]:
        """Polled entries waiting for the user to pull them in."""
        return tuple(self._buffered)

    @property
    def cursor(self) -> PaginationCursor | None:
        return replace(self._cursor) if self._cursor is not None else None

    @property
    def thread(self) -> ThreadView | None:
        return self._thread

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def is_polling(self) -> bool:
        return self._polling

    @property
    def at_end(self) -> bool:
        return self._at_end

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def new_posts_count(self) -> int:
        """Entries the user has not seen yet: spliced-in plus buffered."""
        return self._new_added + len(self._buffered)

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def on_page(self, listener: BatchListener) -> None:
        """Call *listener* with every batch appended by a page."""
        self._page_listeners.append(listener)

    def on_future_posts(self, listener: BatchListener) -> None:
        """Call *listener* with every batch of newer posts found by polling."""
        self._future_listeners.append(listener)

    # -------------------------------------------------------------------------
    # Feed selection
    # -------------------------------------------------------------------------

    async def set_feed(self, feed: FeedSource) -> None:
        self._feed = feed
        self._profile_pubkey = None
        await self.refresh()

    async def set_with_replies(self, with_replies: bool | None) -> None:
        """Override reply inclusion for profile feeds and reload."""
        self._with_replies = with_replies
        await self.refresh()

    # -------------------------------------------------------------------------
    # Paging
    # -------------------------------------------------------------------------

    def _reset(self) -> None:
        self._generation += 1
        self._timeline.clear()
        self._buffered.clear()
        self._new_added = 0
        self._cursor = None
        self._registry.clear()
        self._thread = None
        self._loading = False
        self._at_end = False
        self._update_gauges()

    async def refresh(self) -> None:
        """Discard the timeline and load the first page again.

        Responses to requests issued before this call are ignored when
        they arrive.
        """
        self._reset()
        self._logger.info("feed_refreshed", feed=self.name, generation=self._generation)
        await self.request_next_page()

    async def request_next_page(self) -> bool:
        """Fetch the next (older) page and merge it.

        Returns:
            ``True`` if a request was issued, ``False`` when skipped because
            a page is already loading, the end was reached, or the feed is
            not chronologically ordered.
        """
        if self._loading or self._at_end:
            return False
        if self._cursor is not None and not self._cursor.is_chronological:
            return False

        self._loading = True
        generation = self._generation
        name, payload = self._page_request()

        try:
            result = await fetch_result(
                self._transport, name, payload, timeout=self._config.request_timeout
            )
        except TransportError as e:
            if generation == self._generation:
                FEED_PAGES.labels(feed=self.name, outcome="failed").inc()
                self._logger.warning("page_request_failed", feed=self.name, error=str(e))
            return True
        finally:
            # A newer refresh owns the flag once the generation moved on.
            if generation == self._generation:
                self._loading = False

        if generation != self._generation:
            FEED_PAGES.labels(feed=self.name, outcome="stale").inc()
            self._logger.debug(
                "stale_page_dropped", feed=self.name, generation=generation, current=self._generation
            )
            return True

        self._apply_page(result)
        return True

    def _page_request(self) -> tuple[str, dict[str, Any]]:
        until = self._cursor.since if self._cursor is not None else None
        user_pubkey = self._identity.pubkey

        if self._profile_pubkey is not None:
            if until is None and self._timeline:
                until = self._timeline[-1].sort_date
            return PROFILE_FEED, profile_feed_payload(
                self._profile_pubkey,
                user_pubkey,
                limit=self._config.page_limit,
                until=until,
                include_replies=bool(self._with_replies),
            )

        feed = self._feed or FeedSource.latest(user_pubkey)
        return FEED_DIRECTIVE, feed_directive_payload(
            feed.directive,
            user_pubkey,
            limit=self._config.page_limit,
            until=until,
            include_replies=feed.include_replies,
        )

    def _apply_page(self, result: PostRequestResult) -> None:
        if result.pagination is not None:
            if self._cursor is None:
                self._cursor = replace(result.pagination)
            else:
                self._cursor.since = result.pagination.since

        items = drop_boundary_duplicate(self._timeline, result.process())
        if items:
            items = merge_reposts(items, self._registry)

        if not items:
            self._at_end = True
            FEED_PAGES.labels(feed=self.name, outcome="end").inc()
            self._logger.info("feed_end_reached", feed=self.name, timeline=len(self._timeline))
            return

        self._timeline.extend(items)
        FEED_PAGES.labels(feed=self.name, outcome="merged").inc()
        self._update_gauges()
        self._logger.debug(
            "page_merged", feed=self.name, added=len(items), timeline=len(self._timeline)
        )
        self._notify(self._page_listeners, items)

    # -------------------------------------------------------------------------
    # Live polling
    # -------------------------------------------------------------------------

    async def poll_future_posts(self) -> list[ParsedContent]:
        """Fetch posts newer than the cursor and merge them at the head.

        Depending on the merge policy the new entries are spliced into the
        timeline head or buffered for
        [add_all_future_posts()][nostrfeed.feed.manager.FeedManager.add_all_future_posts].

        Returns:
            The entries that survived de-duplication (empty if none, if a
            poll is already in flight, or if the feed cannot be polled).
        """
        if self._polling or self._profile_pubkey is not None:
            return []
        cursor = self._cursor
        if cursor is None or not cursor.is_chronological:
            return []

        self._polling = True
        generation = self._generation
        feed = self._feed or FeedSource.latest(self._identity.pubkey)
        payload = feed_directive_payload(
            feed.directive,
            self._identity.pubkey,
            limit=self._config.future_limit,
            since=cursor.until,
        )

        try:
            result = await fetch_result(
                self._transport, FEED_DIRECTIVE, payload, timeout=self._config.request_timeout
            )
        except TransportError as e:
            self._logger.warning("future_poll_failed", feed=self.name, error=str(e))
            return []
        finally:
            self._polling = False

        if generation != self._generation or self._cursor is None:
            self._logger.debug("stale_poll_dropped", feed=self.name, generation=generation)
            return []

        if result.pagination is not None:
            self._cursor.until = result.pagination.until

        items = filter_unseen(result.process(), self._timeline, self._buffered)
        items = merge_reposts(items, self._registry)
        if not items:
            return []

        if self._add_directly():
            self._timeline[0:0] = items
            self._new_added += len(items)
        else:
            self._buffered[0:0] = items

        self._update_gauges()
        self._logger.debug(
            "future_posts_merged",
            feed=self.name,
            added=len(items),
            buffered=len(self._buffered),
        )
        self._notify(self._future_listeners, items)
        return items

    def add_all_future_posts(self) -> int:
        """Move every buffered entry to the timeline head; returns how many moved."""
        moved = len(self._buffered)
        if moved:
            self._timeline[0:0] = self._buffered
            self._buffered.clear()
        self._new_added = 0
        self._update_gauges()
        return moved

    def did_show_post(self, index: int) -> None:
        """Record that the entry at *index* scrolled into view."""
        if index < self._new_added:
            self._new_added = max(index, 0)

    async def on_foreground(self) -> list[ParsedContent]:
        """App returned to the foreground: poll immediately."""
        return await self.poll_future_posts()

    # -------------------------------------------------------------------------
    # Threads
    # -------------------------------------------------------------------------

    async def request_thread(self, post_id: str) -> ThreadView | None:
        """Load the thread around *post_id* as this manager's timeline.

        Returns:
            The ordered thread, or ``None`` if the request failed, was
            superseded, or the focal post was missing from the response.
        """
        self._reset()
        generation = self._generation
        payload = thread_view_payload(
            post_id, self._identity.pubkey, limit=self._config.thread_limit
        )

        try:
            result = await fetch_result(
                self._transport, THREAD_VIEW, payload, timeout=self._config.request_timeout
            )
        except TransportError as e:
            self._logger.warning("thread_request_failed", post_id=post_id, error=str(e))
            return None

        if generation != self._generation:
            return None

        self._thread = order_thread(result.process(), post_id)
        if self._thread is None:
            self._logger.warning("thread_focal_missing", post_id=post_id)
            return None

        self._timeline = list(self._thread.posts)
        self._update_gauges()
        return self._thread

    # -------------------------------------------------------------------------
    # Mutes
    # -------------------------------------------------------------------------

    def handle_user_muted(self, pubkey: str) -> int:
        """Drop every committed or buffered entry authored or reposted by *pubkey*.

        Returns:
            The number of entries removed.
        """

        def keep(entry: ParsedContent) -> bool:
            return entry.author != pubkey and entry.reposter != pubkey

        before = len(self._timeline) + len(self._buffered)
        # The unseen head shrinks by the muted entries it held.
        self._new_added = sum(1 for entry in self._timeline[: self._new_added] if keep(entry))
        self._timeline = [entry for entry in self._timeline if keep(entry)]
        self._buffered = [entry for entry in self._buffered if keep(entry)]
        if self._thread is not None:
            self._thread = order_thread(
                (entry for entry in self._thread.posts if keep(entry)), self._thread.focal.id
            )
        removed = before - len(self._timeline) - len(self._buffered)
        if removed:
            self._update_gauges()
            self._logger.info("muted_entries_removed", feed=self.name, removed=removed)
        return removed

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Start periodic live polling on the running event loop."""
        if self._poll_task is not None and not self._poll_task.done():
            return
        self._shutdown_event.clear()
        self._poll_task = asyncio.create_task(self._poll_forever(), name=f"poll:{self.name}")

    async def wait(self, timeout: float) -> bool:  # noqa: ASYNC109
        """Sleep up to *timeout* seconds; ``True`` if shutdown was requested meanwhile."""
        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=timeout)
            return True
        except TimeoutError:
            return False

    async def _poll_forever(self) -> None:
        if await self.wait(self._config.initial_poll_delay):
            return
        while True:
            try:
                await self.poll_future_posts()
            except asyncio.CancelledError:
                raise
            except Exception as e:  # Intentionally broad: error boundary for the poll loop
                self._logger.error(
                    "future_poll_error", feed=self.name, error_type=type(e).__name__, error=str(e)
                )
            if await self.wait(self._config.poll_interval):
                return

    async def aclose(self) -> None:
        """Stop polling and detach from the mute list."""
        self._shutdown_event.set()
        task, self._poll_task = self._poll_task, None
        try:
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        except Exception as e:  # Intentionally broad: shutdown must still detach
            self._logger.error(
                "poll_task_error", feed=self.name, error_type=type(e).__name__, error=str(e)
            )
        finally:
            if self._unsubscribe_mutes is not None:
                self._unsubscribe_mutes()
                self._unsubscribe_mutes = None

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _notify(self, listeners: Sequence[BatchListener], items: list[ParsedContent]) -> None:
        for listener in list(listeners):
            listener(list(items))

    def _update_gauges(self) -> None:
        TIMELINE_SIZE.labels(feed=self.name, section="committed").set(len(self._timeline))
        TIMELINE_SIZE.labels(feed=self.name, section="buffered").set(len(self._buffered))
