"""Core layer: logging, exceptions, configuration loading, metrics.

Sits in the middle of the diamond DAG -- depends only on the standard
library plus PyYAML and prometheus_client, and is depended upon by
``nostrfeed.nips``, ``nostrfeed.utils`` and ``nostrfeed.feed``.

Attributes:
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][nostrfeed.core.logger.Logger].
    exceptions: Typed error hierarchy rooted at
        [NostrFeedError][nostrfeed.core.exceptions.NostrFeedError].
    load_yaml: Safe YAML loading with ``yaml.safe_load()``.
    metrics: Prometheus counters and gauges for signing and feed paging.
"""

from .exceptions import (
    ConfigurationError,
    ConstructionError,
    MissingKeypairError,
    NostrFeedError,
    ReadOnlyIdentityError,
    SerializationError,
    SigningError,
    TransportError,
)
from .logger import Logger, StructuredFormatter, format_kv_pairs
from .metrics import EVENTS_FAILED, EVENTS_SIGNED, FEED_PAGES, TIMELINE_SIZE
from .yaml import load_yaml


__all__ = [
    "EVENTS_FAILED",
    "EVENTS_SIGNED",
    "FEED_PAGES",
    "TIMELINE_SIZE",
    "ConfigurationError",
    "ConstructionError",
    "Logger",
    "MissingKeypairError",
    "NostrFeedError",
    "ReadOnlyIdentityError",
    "SerializationError",
    "SigningError",
    "StructuredFormatter",
    "TransportError",
    "format_kv_pairs",
    "load_yaml",
]
