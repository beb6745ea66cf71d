from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Optional

from .models import AsyncChunk, AsyncEnd, AsyncEvent, AsyncHeaders, Options
from .transport.types import TransportChunk, TransportEnd, TransportHeaders
from .types import REDIRECT_STATUSES, Method, RequestId
from .utils import logger

if TYPE_CHECKING:
    from .client import Client

_EVENTS = (TransportHeaders, TransportChunk, TransportEnd)


async def transform(
    client: Client,
    subscriber: asyncio.Queue[AsyncEvent],
    mailbox: asyncio.Queue[Any],
    *,
    method: Method,
    url: str,
    options: Options,
    follow_redirects: bool,
    hops: int,
    stream_id: Optional[RequestId] = None,
) -> None:
    """
    Relay the transport events of one streaming request to ``subscriber``.

    Runs until the end of the response has been relayed. Headers, status
    codes and chunks go through the client hooks on the way. A 302 or 304
    with ``follow_redirects`` re-issues the request against the new
    location and hands the stream over to the transformer of that request,
    which keeps reporting under the id the subscriber already knows.

    A failing hook or redirect is logged and ends the stream with
    ``AsyncEnd``.
    """
    while True:
        event = await mailbox.get()
        if stream_id is None and isinstance(event, _EVENTS):
            stream_id = event.id
        try:
            relayed = await _relay(
                client, event, method, url, options, follow_redirects, hops, stream_id
            )
        except Exception:
            logger.exception("stream %r from %s failed", stream_id, url)
            await subscriber.put(AsyncEnd(stream_id))
            return
        if relayed is None:
            logger.warning(
                "stream %r ignoring unexpected message %r", stream_id, event
            )
            continue
        if relayed is _HANDED_OVER:
            return
        await subscriber.put(relayed)
        if isinstance(relayed, AsyncEnd):
            return


_HANDED_OVER = object()


async def _relay(
    client: Client,
    event: Any,
    method: Method,
    url: str,
    options: Options,
    follow_redirects: bool,
    hops: int,
    stream_id: Optional[RequestId],
) -> Any:
    if isinstance(event, TransportHeaders):
        status_code = client.process_status_code(event.status)
        if follow_redirects and status_code in REDIRECT_STATUSES:
            location = client.process_response_location(event)
            await client._redirect(
                method, location, url, options, hops, stream_id=stream_id
            )
            return _HANDED_OVER
        return AsyncHeaders(
            stream_id, status_code, client.process_response_headers(event.headers)
        )
    elif isinstance(event, TransportChunk):
        return AsyncChunk(stream_id, client.process_response_chunk(event.chunk))
    elif isinstance(event, TransportEnd):
        return AsyncEnd(stream_id)
    return None
