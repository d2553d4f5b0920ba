"""Pure dataclasses with zero I/O for events, keys and timeline entries.

The models layer is the foundation of the diamond DAG. It has no
dependencies on any other nostrfeed package, only on the Python standard
library. Validation happens in ``__post_init__`` so invalid instances never
escape the constructor.

Attributes:
    Event: Sealed NIP-01 event with wire (de)serialization.
    Keypair: Hex public key plus optional private key.
    Post: Underlying note as delivered by the caching server.
    UserProfile: Display profile for a pubkey.
    RepostInfo: Aggregation of all reposts of one post.
    NostrRepost: A repost event together with the original note.
    ParsedContent: One timeline entry (post, author, optional repost wrapper).
    PaginationCursor: ``since``/``until``/``order_by`` boundaries of a feed.
    PostRequestResult: A full feed/thread response, folded from chunks.
    ThreadView: Thread posts ordered around the focal post.
    EventKind: Event kinds produced and consumed by the pipeline.
    OrderBy: Known ``order_by`` values.

Note:
    Frozen models use ``object.__setattr__`` in ``__post_init__`` to store
    normalised fields (tag tuples, de-duplicated repost users).
"""

from .constants import APP_NAME, EventKind, OrderBy
from .content import NostrRepost, ParsedContent, Post, RepostInfo, UserProfile
from .event import Event
from .keypair import Keypair
from .pagination import PaginationCursor
from .response import PostRequestResult
from .thread import ThreadView


__all__ = [
    "APP_NAME",
    "Event",
    "EventKind",
    "Keypair",
    "NostrRepost",
    "OrderBy",
    "PaginationCursor",
    "ParsedContent",
    "Post",
    "PostRequestResult",
    "RepostInfo",
    "ThreadView",
    "UserProfile",
]
