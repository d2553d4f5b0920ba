"""Feed layer: timeline paging, live polling, repost merging, threads, mutes.

Top of the diamond DAG. Depends on every other nostrfeed package.

Attributes:
    FeedManager: Owner of one de-duplicated timeline. See
        [FeedManager][nostrfeed.feed.manager.FeedManager].
    FeedSource: Directive feed selector (``Latest``, search, custom).
    FeedConfig: Paging and polling policy, loadable from YAML.
    MuteList: Observable set of muted pubkeys.
    RepostRegistry: Post id to canonical repost entry mapping.
"""

from .configs import FeedConfig
from .manager import FeedManager, FeedSource
from .merge import (
    CanonicalRepost,
    RepostRegistry,
    drop_boundary_duplicate,
    filter_unseen,
    merge_reposts,
)
from .mute import MuteList
from .thread import order_thread


__all__ = [
    "CanonicalRepost",
    "FeedConfig",
    "FeedManager",
    "FeedSource",
    "MuteList",
    "RepostRegistry",
    "drop_boundary_duplicate",
    "filter_unseen",
    "merge_reposts",
    "order_thread",
]
