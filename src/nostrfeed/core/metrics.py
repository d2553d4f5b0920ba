"""
Prometheus metrics for the event pipeline.

Module-level metric objects (singletons, thread-safe) shared by the signer
and every feed instance. Exposition is left to the host application, which
can mount ``prometheus_client.generate_latest()`` wherever it serves HTTP.

Architecture:
    EVENTS_SIGNED:        Sealed events, labelled by kind.
    EVENTS_FAILED:        Construction/serialization/signing failures,
                          labelled by kind and error type.
    FEED_PAGES:           Page responses, labelled by feed and outcome
                          (merged, end, stale, failed).
    TIMELINE_SIZE:        Committed + buffered entries per feed.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge


EVENTS_SIGNED = Counter(
    "nostrfeed_events_signed_total",
    "Events sealed with an id and Schnorr signature",
    ["kind"],
)

EVENTS_FAILED = Counter(
    "nostrfeed_events_failed_total",
    "Event constructions that produced no event",
    ["kind", "error"],
)

FEED_PAGES = Counter(
    "nostrfeed_feed_pages_total",
    "Feed page responses by outcome",
    ["feed", "outcome"],
)

TIMELINE_SIZE = Gauge(
    "nostrfeed_timeline_size",
    "Number of entries held by a feed",
    ["feed", "section"],
)
