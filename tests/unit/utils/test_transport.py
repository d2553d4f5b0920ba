"""
Unit tests for utils.transport module.

Tests:
- fetch_result() readiness wait, chunk folding and error mapping
- Request payload builders
- fetch_user_infos()
"""

import asyncio
from collections.abc import AsyncIterator, Mapping
from typing import Any

import pytest

from nostrfeed.core import TransportError
from nostrfeed.utils.transport import (
    FEED_DIRECTIVE,
    USER_INFOS,
    Transport,
    feed_directive_payload,
    fetch_result,
    fetch_user_infos,
    profile_feed_payload,
    thread_view_payload,
    user_infos_payload,
)
from tests.conftest import ALICE, BOB, FakeTransport, page, post_dict


class SlowTransport:
    async def wait_connected(self) -> None:
        return None

    async def send(self, name: str, payload: Mapping[str, Any]) -> AsyncIterator[Mapping[str, Any]]:
        await asyncio.sleep(10)
        yield {}


class TestFetchResult:
    """Request/response folding."""

    async def test_folds_chunks(self, transport: FakeTransport) -> None:
        transport.respond({"posts": [post_dict("p1")]}, page(posts=[post_dict("p2")]), "noise")  # type: ignore[arg-type]
        result = await fetch_result(transport, FEED_DIRECTIVE, {"directive": "x"})
        assert [p.id for p in result.posts] == ["p1", "p2"]
        assert result.pagination is not None
        assert transport.connected_calls == 1
        assert transport.requests == [(FEED_DIRECTIVE, {"directive": "x"})]

    async def test_os_error_mapped(self, transport: FakeTransport) -> None:
        transport.fail(ConnectionResetError("reset"))
        with pytest.raises(TransportError, match="reset"):
            await fetch_result(transport, FEED_DIRECTIVE, {})

    async def test_unexpected_error_mapped(self, transport: FakeTransport) -> None:
        transport.fail(RuntimeError("websocket closed"))
        with pytest.raises(TransportError, match="websocket closed") as exc_info:
            await fetch_result(transport, FEED_DIRECTIVE, {})
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_transport_error_passthrough(self, transport: FakeTransport) -> None:
        transport.fail(TransportError("closed"))
        with pytest.raises(TransportError, match="closed"):
            await fetch_result(transport, FEED_DIRECTIVE, {})

    async def test_timeout(self) -> None:
        with pytest.raises(TransportError, match="timed out"):
            await fetch_result(SlowTransport(), FEED_DIRECTIVE, {}, timeout=0.01)

    async def test_cancellation_propagates(self) -> None:
        task = asyncio.create_task(fetch_result(SlowTransport(), FEED_DIRECTIVE, {}))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    def test_protocol_runtime_check(self, transport: FakeTransport) -> None:
        assert isinstance(transport, Transport)


class TestPayloads:
    """Flat request payloads."""

    def test_feed_directive_minimal(self) -> None:
        assert feed_directive_payload("home", ALICE, limit=20) == {
            "directive": "home",
            "user_pubkey": ALICE,
            "limit": 20,
        }

    def test_feed_directive_full(self) -> None:
        payload = feed_directive_payload("home", ALICE, limit=20, until=5, since=1, include_replies=True)
        assert payload["until"] == 5
        assert payload["since"] == 1
        assert payload["include_replies"] is True

    def test_until_zero_kept(self) -> None:
        assert feed_directive_payload("home", ALICE, limit=1, until=0)["until"] == 0

    def test_profile_feed(self) -> None:
        assert profile_feed_payload(BOB, ALICE, limit=10, until=7) == {
            "pubkey": BOB,
            "user_pubkey": ALICE,
            "notes": "authored",
            "limit": 10,
            "until": 7,
        }

    def test_thread_view(self) -> None:
        assert thread_view_payload("abc", ALICE, limit=100) == {
            "event_id": "abc",
            "limit": 100,
            "user_pubkey": ALICE,
        }

    def test_user_infos_deduplicated(self) -> None:
        assert user_infos_payload([ALICE, BOB, ALICE]) == {"pubkeys": [ALICE, BOB]}


class TestFetchUserInfos:
    """Batch profile lookup."""

    async def test_profiles(self, transport: FakeTransport) -> None:
        transport.respond({"users": {ALICE: {"name": "alice"}}})
        users = await fetch_user_infos(transport, [ALICE])
        assert users[ALICE].name == "alice"
        assert transport.requests[0] == (USER_INFOS, {"pubkeys": [ALICE]})

    async def test_empty_skips_request(self, transport: FakeTransport) -> None:
        assert await fetch_user_infos(transport, []) == {}
        assert transport.requests == []
