"""
Pytest configuration and shared fixtures for nostrfeed tests.

Provides:
- Deterministic key material and identities
- Builders for posts, reposts and timeline entries
- A scripted in-memory Transport
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any

import pytest
from nostr_sdk import Keys

from nostrfeed.models import Keypair, ParsedContent, Post, RepostInfo, UserProfile
from nostrfeed.utils.keys import Identity, LoginMethod


VALID_HEX_KEY = "67dea2ed018072d675f5415ecfaed7d2597555e202d85b3d65ea4e58d2d92ffa"  # pragma: allowlist secret

ALICE = "a" * 64
BOB = "b" * 64
CAROL = "c" * 64


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Keys and identities
# ============================================================================


@pytest.fixture
def keys() -> Keys:
    return Keys.parse(VALID_HEX_KEY)


@pytest.fixture
def keypair(keys: Keys) -> Keypair:
    return Keypair(pubkey=keys.public_key().to_hex(), privkey=VALID_HEX_KEY)


@pytest.fixture
def identity(keypair: Keypair) -> Identity:
    return Identity(keypair, relays=["wss://relay.example.com"])


@pytest.fixture
def read_only_identity(keypair: Keypair) -> Identity:
    return Identity(Keypair(pubkey=keypair.pubkey), login_method=LoginMethod.NPUB)


# ============================================================================
# Timeline entries
# ============================================================================


def make_post(post_id: str, pubkey: str = ALICE, created_at: int = 1_700_000_000) -> Post:
    return Post(id=post_id, pubkey=pubkey, created_at=created_at, content=f"note {post_id}")


def make_entry(
    post_id: str,
    pubkey: str = ALICE,
    created_at: int = 1_700_000_000,
    *,
    reposted_by: str | None = None,
    repost_id: str | None = None,
    repost_date: int | None = None,
) -> ParsedContent:
    """Build a timeline entry, optionally wrapped as a repost by *reposted_by*."""
    reposted = None
    if reposted_by is not None:
        reposted = RepostInfo(
            users=(reposted_by,),
            date=repost_date if repost_date is not None else created_at + 10,
            id=repost_id or f"rp-{post_id}-{reposted_by[:4]}",
        )
    return ParsedContent(
        post=make_post(post_id, pubkey, created_at),
        user=UserProfile(pubkey=pubkey),
        reposted=reposted,
    )


def post_dict(post_id: str, pubkey: str = ALICE, created_at: int = 1_700_000_000) -> dict[str, Any]:
    return make_post(post_id, pubkey, created_at).to_dict()


def repost_dict(
    post_id: str,
    reposter: str,
    *,
    author: str = ALICE,
    created_at: int = 1_700_000_000,
    date: int | None = None,
    repost_id: str | None = None,
) -> dict[str, Any]:
    return {
        "id": repost_id or f"rp-{post_id}-{reposter[:4]}",
        "pubkey": reposter,
        "post": post_dict(post_id, author, created_at),
        "date": date if date is not None else created_at + 10,
    }


def page(
    posts: list[dict[str, Any]] | None = None,
    reposts: list[dict[str, Any]] | None = None,
    *,
    since: int = 1_699_000_000,
    until: int = 1_700_000_100,
    order_by: str | None = "created_at",
    order: list[str] | None = None,
) -> dict[str, Any]:
    """Single-chunk caching server response."""
    chunk: dict[str, Any] = {
        "posts": posts or [],
        "reposts": reposts or [],
        "users": {},
        "pagination": {"since": since, "until": until, "order_by": order_by},
    }
    if order is not None:
        chunk["order"] = order
    return chunk


# ============================================================================
# Transport
# ============================================================================


class FakeTransport:
    """Scripted Transport that answers requests from a queue of responses.

    Each queued item is either a list of chunks, an exception to raise, or
    a callable returning an awaitable that yields the chunks (to hold a
    request in flight).
    """

    def __init__(self) -> None:
        self.requests: list[tuple[str, dict[str, Any]]] = []
        self.responses: list[Any] = []
        self.connected_calls = 0

    def respond(self, *chunks: Mapping[str, Any]) -> None:
        self.responses.append(list(chunks))

    def fail(self, error: BaseException) -> None:
        self.responses.append(error)

    def hold(self, gate: Callable[[], Any], *chunks: Mapping[str, Any]) -> None:
        self.responses.append((gate, list(chunks)))

    async def wait_connected(self) -> None:
        self.connected_calls += 1

    async def send(self, name: str, payload: Mapping[str, Any]) -> AsyncIterator[Mapping[str, Any]]:
        self.requests.append((name, dict(payload)))
        response = self.responses.pop(0) if self.responses else []
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, tuple):
            gate, response = response
            await gate()
        for chunk in response:
            yield chunk


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
