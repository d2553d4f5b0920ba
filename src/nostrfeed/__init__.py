r"""nostrfeed -- Nostr event pipeline for a feed-reading client.

Builds, serializes and signs NIP-01 events, and merges paginated feed
responses from a caching server into one ordered, de-duplicated timeline.

Architecture follows a **diamond DAG** dependency structure where imports
flow strictly downward:

```text
                 feed          Timeline paging, polling, merging
             /   |   \
          core  nips  utils    Infrastructure, protocol, and helpers
             \   |   /
              models           Pure dataclasses (zero I/O)
```

Attributes:
    models: Pure dataclasses. Zero I/O, depends only on stdlib.
    core: Exceptions, logging, YAML loading, metrics.
    nips: NIP-01 serialization and signing, event builders, EventFactory.
    utils: Identity and key management, caching server transport.
    feed: FeedManager and the merge helpers it is built from.

Note:
    For lightweight usage, import directly from subpackages::

        from nostrfeed.models import Event
        from nostrfeed.nips import serialize_event

    Top-level imports (``from nostrfeed import FeedManager``) use lazy
    loading and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("nostrfeed")

__all__ = [
    "Event",
    "EventFactory",
    "FeedConfig",
    "FeedManager",
    "FeedSource",
    "Identity",
    "Keypair",
    "Logger",
    "MuteList",
    "PaginationCursor",
    "ParsedContent",
    "serialize_event",
    "sign_event",
    "verify_event",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Logger": ("nostrfeed.core", "Logger"),
    "Event": ("nostrfeed.models", "Event"),
    "Keypair": ("nostrfeed.models", "Keypair"),
    "PaginationCursor": ("nostrfeed.models", "PaginationCursor"),
    "ParsedContent": ("nostrfeed.models", "ParsedContent"),
    "EventFactory": ("nostrfeed.nips", "EventFactory"),
    "serialize_event": ("nostrfeed.nips", "serialize_event"),
    "sign_event": ("nostrfeed.nips", "sign_event"),
    "verify_event": ("nostrfeed.nips", "verify_event"),
    "Identity": ("nostrfeed.utils.keys", "Identity"),
    "FeedConfig": ("nostrfeed.feed", "FeedConfig"),
    "FeedManager": ("nostrfeed.feed", "FeedManager"),
    "FeedSource": ("nostrfeed.feed", "FeedSource"),
    "MuteList": ("nostrfeed.feed", "MuteList"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'nostrfeed' has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(__all__)
