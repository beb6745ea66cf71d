import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from aiopotion.types import Body, EncodedHeaders, RequestId, Timeout

from .base import Transport
from .types import Accepted, TransportEvent, TransportResult


@dataclass(frozen=True)
class SentRequest:
    method: str
    url: str
    headers: EncodedHeaders
    body: Body
    options: Mapping[str, Any]
    timeout: Timeout
    connection: Any = None


@dataclass
class MockConnection:
    url: str
    options: Mapping[str, Any]
    stopped: bool = False


@dataclass
class MockTransport(Transport):
    """
    Hands out the scripted results in order and records every request.

    When a result is ``Accepted``, the events scripted for its id are put
    on the ``stream_to`` queue of the request. Exceptions in ``results``
    are raised instead of returned.
    """

    results: List[Union[TransportResult, BaseException]]
    events: Dict[RequestId, List[TransportEvent]] = field(default_factory=dict)
    requests: List[SentRequest] = field(default_factory=list)

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
            None,
            SentRequest(method, url, headers, body, options, timeout),
        )

    async def send_direct(
        self,
        connection: MockConnection,
        *,
        method: str,
        url: str,
        headers: EncodedHeaders,
        body: Body,
        options: Mapping[str, Any],
        timeout: Timeout,
    ) -> TransportResult:
        return await self._send(
            connection,
            SentRequest(method, url, headers, body, options, timeout, connection),
        )

    async def spawn_connection(
        self, url: str, options: Mapping[str, Any]
    ) -> MockConnection:
        return MockConnection(url, options)

    async def stop_connection(self, connection: MockConnection) -> None:
        connection.stopped = True

    async def _send(
        self, connection: Optional[MockConnection], request: SentRequest
    ) -> TransportResult:
        if connection is not None and connection.stopped:
            raise RuntimeError(f"connection to {connection.url} was stopped")
        self.requests.append(request)
        result = self.results.pop(0)
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, Accepted):
            mailbox: "asyncio.Queue[Any]" = request.options["stream_to"]
            for event in self.events.pop(result.id, []):
                mailbox.put_nowait(event)
        return result
