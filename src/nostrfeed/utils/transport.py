"""
Contract with the relay/caching-server transport and request payloads.

The feed engine does not manage sockets. It talks to a
[Transport][nostrfeed.utils.transport.Transport] collaborator that exposes
a readiness signal and a request/response stream, and folds the streamed
chunks into one [PostRequestResult][nostrfeed.models.response.PostRequestResult]
with [fetch_result()][nostrfeed.utils.transport.fetch_result].

Payload builders produce the flat keyed maps the caching server expects:

* ``feed_directive``: ``{directive, user_pubkey, limit, until?, since?, include_replies?}``
* ``feed`` (profile): ``{pubkey, user_pubkey, notes, limit, until?, include_replies?}``
* ``thread_view``: ``{event_id, limit, user_pubkey}``
* ``user_infos``: ``{pubkeys}``
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from nostrfeed.core.exceptions import TransportError
from nostrfeed.models import PostRequestResult, UserProfile


FEED_DIRECTIVE = "feed_directive"
PROFILE_FEED = "feed"
THREAD_VIEW = "thread_view"
USER_INFOS = "user_infos"


@runtime_checkable
class Transport(Protocol):
    """Asynchronous request channel to the caching server.

    Implementations own connection management, reconnection and retry;
    the feed engine only waits for readiness and consumes responses.
    """

    async def wait_connected(self) -> None:
        """Return once the transport can accept requests."""
        ...

    def send(self, name: str, payload: Mapping[str, Any]) -> AsyncIterator[Mapping[str, Any]]:
        """Issue request *name* and stream back its JSON-like responses."""
        ...


async def fetch_result(
    transport: Transport,
    name: str,
    payload: Mapping[str, Any],
    *,
    timeout: float | None = None,
) -> PostRequestResult:
    """Send one request and fold every streamed chunk into a single result.

    Args:
        transport: The connected transport collaborator.
        name: Request name (``feed_directive``, ``thread_view``, ...).
        payload: Flat request payload.
        timeout: Overall deadline in seconds, including the wait for
            readiness. ``None`` waits indefinitely.

    Raises:
        TransportError: If the transport fails or the deadline expires.
            ``asyncio.CancelledError`` always propagates unchanged.
    """

    async def _collect() -> PostRequestResult:
        await transport.wait_connected()
        result = PostRequestResult()
        async for chunk in transport.send(name, payload):
            if isinstance(chunk, Mapping):
                result.merge(chunk)
        return result

    try:
        return await asyncio.wait_for(_collect(), timeout=timeout)
    except TransportError:
        raise
    except TimeoutError as e:
        raise TransportError(f"{name} request timed out after {timeout}s") from e
    except Exception as e:  # Intentionally broad: any transport fault surfaces as TransportError
        raise TransportError(f"{name} request failed: {e}") from e


def feed_directive_payload(  # noqa: PLR0913
    directive: str,
    user_pubkey: str,
    *,
    limit: int,
    until: int | None = None,
    since: int | None = None,
    include_replies: bool = False,
) -> dict[str, Any]:
    """Payload for a directive (home, list, search) feed page."""
    payload: dict[str, Any] = {
        "directive": directive,
        "user_pubkey": user_pubkey,
        "limit": limit,
    }
    if until is not None:
        payload["until"] = until
    if since is not None:
        payload["since"] = since
    if include_replies:
        payload["include_replies"] = True
    return payload


def profile_feed_payload(
    pubkey: str,
    user_pubkey: str,
    *,
    limit: int,
    until: int | None = None,
    include_replies: bool = False,
) -> dict[str, Any]:
    """Payload for a page of notes authored by *pubkey*."""
    payload: dict[str, Any] = {
        "pubkey": pubkey,
        "user_pubkey": user_pubkey,
        "notes": "authored",
        "limit": limit,
    }
    if until is not None:
        payload["until"] = until
    if include_replies:
        payload["include_replies"] = True
    return payload


def thread_view_payload(event_id: str, user_pubkey: str, *, limit: int) -> dict[str, Any]:
    """Payload for a thread around *event_id*."""
    return {"event_id": event_id, "limit": limit, "user_pubkey": user_pubkey}


def user_infos_payload(pubkeys: Iterable[str]) -> dict[str, Any]:
    """Payload for a batch profile lookup."""
    return {"pubkeys": list(dict.fromkeys(pubkeys))}


async def fetch_user_infos(
    transport: Transport,
    pubkeys: Iterable[str],
    *,
    timeout: float | None = None,
) -> dict[str, UserProfile]:
    """Look up display profiles for *pubkeys*.

    Raises:
        TransportError: If the request fails.
    """
    payload = user_infos_payload(pubkeys)
    if not payload["pubkeys"]:
        return {}
    result = await fetch_result(transport, USER_INFOS, payload, timeout=timeout)
    return result.users
