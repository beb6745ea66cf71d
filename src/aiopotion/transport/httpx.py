import asyncio
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Iterator, Mapping, Optional, Set

import httpx

from aiopotion.types import Body, EncodedHeaders, Timeout
from aiopotion.utils import logger

from .base import Transport
from .types import (
    Accepted,
    ChunkError,
    ConnFailed,
    Failed,
    Ok,
    TransportChunk,
    TransportEnd,
    TransportHeaders,
    TransportResult,
)


@dataclass(frozen=True)
class HTTPXConnection:
    url: str
    client: httpx.AsyncClient


@dataclass(frozen=True)
class HTTPX(Transport):
    client: httpx.AsyncClient
    _ids: Iterator[int] = field(
        default_factory=count, init=False, repr=False, compare=False
    )
    _streams: "Set[asyncio.Task[None]]" = field(
        default_factory=set, init=False, repr=False, compare=False
    )

    async def send(
        self,
        *,
        method: str,
        url: str,
        headers: EncodedHeaders,
        body: Body,
        options: Mapping[str, Any],
        timeout: Timeout,
    ) -> TransportResult:
        return await self._send(
            self.client,
            method=method,
            url=url,
            headers=headers,
            body=body,
            options=options,
            timeout=timeout,
        )

    async def send_direct(
        self,
        connection: HTTPXConnection,
        *,
        method: str,
        url: str,
        headers: EncodedHeaders,
        body: Body,
        options: Mapping[str, Any],
        timeout: Timeout,
    ) -> TransportResult:
        return await self._send(
            connection.client,
            method=method,
            url=url,
            headers=headers,
            body=body,
            options=options,
            timeout=timeout,
        )

    async def spawn_connection(
        self, url: str, options: Mapping[str, Any]
    ) -> HTTPXConnection:
        client = httpx.AsyncClient(
            limits=httpx.Limits(max_connections=1, max_keepalive_connections=1),
            **options,
        )
        return HTTPXConnection(url, client)

    async def stop_connection(self, connection: HTTPXConnection) -> None:
        await connection.client.aclose()

    async def _send(
        self,
        client: httpx.AsyncClient,
        *,
        method: str,
        url: str,
        headers: EncodedHeaders,
        body: Body,
        options: Mapping[str, Any],
        timeout: Timeout,
    ) -> TransportResult:
        extra = dict(options)
        stream_to: Optional["asyncio.Queue[Any]"] = extra.pop("stream_to", None)
        auth = extra.pop("basic_auth", None) or httpx.USE_CLIENT_DEFAULT
        request = client.build_request(
            method, url, headers=headers, content=body, timeout=timeout, **extra
        )
        try:
            response = await client.send(
                request,
                auth=auth,
                follow_redirects=False,
                stream=stream_to is not None,
            )
        except httpx.TimeoutException:
            raise asyncio.TimeoutError()
        except httpx.ConnectError as exc:
            return ConnFailed(exc)
        except httpx.HTTPError as exc:
            return Failed(exc)

        if stream_to is None:
            return Ok(str(response.status_code), response.headers.raw, response.content)

        request_id = next(self._ids)
        task = asyncio.create_task(self._pump(request_id, response, stream_to))
        self._streams.add(task)
        task.add_done_callback(self._streams.discard)
        return Accepted(request_id)

    async def _pump(
        self,
        request_id: int,
        response: httpx.Response,
        mailbox: "asyncio.Queue[Any]",
    ) -> None:
        try:
            await mailbox.put(
                TransportHeaders(
                    request_id, str(response.status_code), response.headers.raw
                )
            )
            async for chunk in response.aiter_bytes():
                await mailbox.put(TransportChunk(request_id, chunk))
        except (httpx.HTTPError, httpx.StreamError) as exc:
            logger.debug("stream %r failed: %r", request_id, exc)
            await mailbox.put(TransportChunk(request_id, ChunkError(exc)))
        finally:
            await response.aclose()
        await mailbox.put(TransportEnd(request_id))
