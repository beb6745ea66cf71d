import asyncio
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Iterator, Mapping, Optional, Set

import aiohttp

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
class AIOHTTPConnection:
    url: str
    session: aiohttp.ClientSession


@dataclass(frozen=True)
class AIOHTTP(Transport):
    session: aiohttp.ClientSession
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
            self.session,
            method=method,
            url=url,
            headers=headers,
            body=body,
            options=options,
            timeout=timeout,
        )

    async def send_direct(
        self,
        connection: AIOHTTPConnection,
        *,
        method: str,
        url: str,
        headers: EncodedHeaders,
        body: Body,
        options: Mapping[str, Any],
        timeout: Timeout,
    ) -> TransportResult:
        return await self._send(
            connection.session,
            method=method,
            url=url,
            headers=headers,
            body=body,
            options=options,
            timeout=timeout,
        )

    async def spawn_connection(
        self, url: str, options: Mapping[str, Any]
    ) -> AIOHTTPConnection:
        session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=1), **options
        )
        return AIOHTTPConnection(url, session)

    async def stop_connection(self, connection: AIOHTTPConnection) -> None:
        await connection.session.close()

    async def _send(
        self,
        session: aiohttp.ClientSession,
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
        auth = _basic_auth(extra.pop("basic_auth", None))
        if stream_to is None:
            client_timeout = aiohttp.ClientTimeout(total=timeout)
        else:
            client_timeout = aiohttp.ClientTimeout(
                sock_connect=timeout, sock_read=timeout
            )
        try:
            response = await session.request(
                method,
                url,
                headers=headers,
                data=body,
                auth=auth,
                timeout=client_timeout,
                allow_redirects=False,
                **extra,
            )
        except asyncio.TimeoutError:
            raise
        except aiohttp.ClientConnectorError as exc:
            return ConnFailed(exc)
        except aiohttp.ClientError as exc:
            return Failed(exc)

        if stream_to is None:
            try:
                async with response:
                    content = await response.read()
            except asyncio.TimeoutError:
                raise
            except aiohttp.ClientError as exc:
                return Failed(exc)
            return Ok(str(response.status), response.raw_headers, content)

        request_id = next(self._ids)
        task = asyncio.create_task(self._pump(request_id, response, stream_to))
        self._streams.add(task)
        task.add_done_callback(self._streams.discard)
        return Accepted(request_id)

    async def _pump(
        self,
        request_id: int,
        response: aiohttp.ClientResponse,
        mailbox: "asyncio.Queue[Any]",
    ) -> None:
        try:
            await mailbox.put(
                TransportHeaders(request_id, str(response.status), response.raw_headers)
            )
            async for chunk in response.content.iter_any():
                await mailbox.put(TransportChunk(request_id, chunk))
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.debug("stream %r failed: %r", request_id, exc)
            await mailbox.put(TransportChunk(request_id, ChunkError(exc)))
        finally:
            response.release()
        await mailbox.put(TransportEnd(request_id))


def _basic_auth(credentials: Any) -> Optional[aiohttp.BasicAuth]:
    if credentials is None:
        return None
    user, password = credentials
    return aiohttp.BasicAuth(user, password)
