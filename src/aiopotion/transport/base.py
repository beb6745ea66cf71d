import abc
from typing import Any, Mapping

from aiopotion.types import Body, EncodedHeaders, Timeout

from .types import TransportResult

Connection = Any


class Transport(metaclass=abc.ABCMeta):
    @abc.abstractmethod
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
        """
        Send a request over a pooled connection.

        Connection and other client failures are returned as ``ConnFailed``
        or ``Failed``, an expired timeout raises ``asyncio.TimeoutError``.
        If ``options`` contains a ``stream_to`` queue, return ``Accepted``
        once the response head arrived and put the ``TransportHeaders``,
        ``TransportChunk`` and ``TransportEnd`` events on that queue.
        """

    @abc.abstractmethod
    async def send_direct(
        self,
        connection: Connection,
        *,
        method: str,
        url: str,
        headers: EncodedHeaders,
        body: Body,
        options: Mapping[str, Any],
        timeout: Timeout,
    ) -> TransportResult:
        """
        Like send, but over a connection from spawn_connection.
        """

    @abc.abstractmethod
    async def spawn_connection(
        self, url: str, options: Mapping[str, Any]
    ) -> Connection:
        pass

    @abc.abstractmethod
    async def stop_connection(self, connection: Connection) -> None:
        pass
