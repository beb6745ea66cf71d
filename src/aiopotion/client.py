from __future__ import annotations

import asyncio
import dataclasses
from typing import *

from .errors import (
    ConfigurationError,
    HTTPError,
    TooManyRedirects,
    UnexpectedTransportResult,
    error_to_string,
)
from .hooks import Hooks
from .models import AsyncResponse, Options, RequestDescriptor, Response
from .transformer import transform
from .transport.base import Connection, Transport
from .transport.types import Accepted, ConnFailed, Failed, Ok, TransportResult
from .types import EncodedHeaders, HeadersInput, Method, RequestId
from .utils import logger, normalize_location, to_str

Result = Union[Response, AsyncResponse]


class Client(Hooks):
    """
    A general purpose HTTP client.

    Customize it by subclassing and overriding the hooks defined in
    ``Hooks``, the request machinery below calls them at every step.
    """

    def __init__(
        self, transport: Transport, *, defaults: Optional[Options] = None
    ) -> None:
        self.transport = transport
        self.defaults = Options() if defaults is None else defaults
        self._streams: Dict[RequestId, asyncio.Task[None]] = {}

    async def request(
        self,
        method: Union[Method, str],
        url: str,
        options: Optional[Options] = None,
        **overrides: Any,
    ) -> Result:
        """
        Send an HTTP request.

        ``options`` defaults to the client defaults, keyword arguments
        override single fields of it (``body``, ``headers``, ``timeout``,
        ``basic_auth``, ``stream_to``, ``direct``, ``follow_redirects``,
        ``max_redirects``, ``transport_options``).

        Returns a Response, or an AsyncResponse if ``stream_to`` is set.
        Raises HTTPError if the request failed.
        """
        return await self._request(
            _method(method), url, self._options(options, overrides), 0
        )

    async def request_direct(
        self,
        connection: Connection,
        method: Union[Method, str],
        url: str,
        options: Optional[Options] = None,
        **overrides: Any,
    ) -> Result:
        return await self.request(
            method, url, options, direct=connection, **overrides
        )

    async def get(
        self, url: str, options: Optional[Options] = None, **overrides: Any
    ) -> Result:
        return await self.request(Method.get, url, options, **overrides)

    async def put(
        self, url: str, options: Optional[Options] = None, **overrides: Any
    ) -> Result:
        return await self.request(Method.put, url, options, **overrides)

    async def head(
        self, url: str, options: Optional[Options] = None, **overrides: Any
    ) -> Result:
        return await self.request(Method.head, url, options, **overrides)

    async def post(
        self, url: str, options: Optional[Options] = None, **overrides: Any
    ) -> Result:
        return await self.request(Method.post, url, options, **overrides)

    async def patch(
        self, url: str, options: Optional[Options] = None, **overrides: Any
    ) -> Result:
        return await self.request(Method.patch, url, options, **overrides)

    async def delete(
        self, url: str, options: Optional[Options] = None, **overrides: Any
    ) -> Result:
        return await self.request(Method.delete, url, options, **overrides)

    async def options(
        self, url: str, options: Optional[Options] = None, **overrides: Any
    ) -> Result:
        return await self.request(Method.options, url, options, **overrides)

    async def spawn_connection(
        self, url: str, **session_options: Any
    ) -> Connection:
        """
        Open a dedicated connection for use with the ``direct`` option.

        The connection must not be used by concurrent requests.
        """
        return await self.transport.spawn_connection(
            self.process_url(to_str(url)), session_options
        )

    async def stop_connection(self, connection: Connection) -> None:
        await self.transport.stop_connection(connection)

    def cancel_stream(self, stream_id: RequestId) -> bool:
        """
        Stop relaying the events of a streaming request.

        Returns whether a running stream was cancelled.
        """
        task = self._streams.pop(stream_id, None)
        if task is None or task.done():
            return False
        return task.cancel()

    def process_arguments(
        self,
        method: Method,
        url: str,
        options: Options,
        hops: int = 0,
        stream_id: Optional[RequestId] = None,
    ) -> RequestDescriptor:
        raw_options = options
        options = self.process_options(options)
        if options.max_redirects < 0:
            raise ConfigurationError(
                f"max_redirects must not be negative, got {options.max_redirects}"
            )
        if hops > options.max_redirects:
            raise TooManyRedirects(f"more than {options.max_redirects} redirects")

        transport_options = dict(options.transport_options)
        if options.basic_auth is not None:
            transport_options["basic_auth"] = _credentials(options.basic_auth)

        url = self.process_url(to_str(url))

        transformer = None
        if options.stream_to is not None:
            mailbox: asyncio.Queue[Any] = asyncio.Queue()
            transformer = asyncio.create_task(
                transform(
                    self,
                    options.stream_to,
                    mailbox,
                    method=method,
                    url=url,
                    options=raw_options,
                    follow_redirects=options.follow_redirects,
                    hops=hops,
                    stream_id=stream_id,
                )
            )
            transport_options["stream_to"] = mailbox

        return RequestDescriptor(
            method=method,
            url=url,
            headers=_encode_headers(
                self.process_request_headers(options.headers)
            ),
            body=self.process_request_body(options.body),
            timeout=options.timeout,
            transport_options=transport_options,
            follow_redirects=options.follow_redirects,
            direct=options.direct,
            transformer=transformer,
        )

    def handle_response(self, response: TransportResult) -> Result:
        if isinstance(response, Ok):
            return Response(
                status_code=self.process_status_code(response.status),
                headers=self.process_response_headers(response.headers),
                body=self.process_response_body(response.body),
            )
        elif isinstance(response, Accepted):
            return AsyncResponse(response.id)
        elif isinstance(response, ConnFailed):
            if response.reason is None:
                raise HTTPError("conn_failed")
            raise HTTPError(error_to_string(response.reason)) from _cause(
                response.reason
            )
        elif isinstance(response, Failed):
            raise HTTPError(error_to_string(response.reason)) from _cause(
                response.reason
            )
        raise UnexpectedTransportResult(response)

    async def _request(
        self,
        method: Method,
        url: str,
        options: Options,
        hops: int,
        stream_id: Optional[RequestId] = None,
    ) -> Result:
        args = self.process_arguments(method, url, options, hops, stream_id)
        try:
            response = await self._send(args)
        except BaseException:
            _cancel(args.transformer)
            raise

        if isinstance(response, Accepted) and args.transformer is not None:
            self._track(
                response.id if stream_id is None else stream_id, args.transformer
            )
        else:
            _cancel(args.transformer)

        if (
            self.response_ok(response)
            and self.is_redirect(cast(Ok, response))
            and args.follow_redirects
        ):
            location = self.process_response_location(cast(Ok, response))
            return await self._redirect(
                method, location, args.url, options, hops, stream_id
            )
        return self.handle_response(response)

    async def _redirect(
        self,
        method: Method,
        location: Optional[str],
        url: str,
        options: Options,
        hops: int,
        stream_id: Optional[RequestId] = None,
    ) -> Result:
        next_url = normalize_location(location, url)
        logger.debug("following redirect from %s to %s", url, next_url)
        return await self._request(method, next_url, options, hops + 1, stream_id)

    async def _send(self, args: RequestDescriptor) -> TransportResult:
        logger.debug("sending request %r", args)
        try:
            if args.direct is not None:
                return await self.transport.send_direct(
                    args.direct,
                    method=args.method.value,
                    url=args.url,
                    headers=args.headers,
                    body=args.body,
                    options=args.transport_options,
                    timeout=args.timeout,
                )
            return await self.transport.send(
                method=args.method.value,
                url=args.url,
                headers=args.headers,
                body=args.body,
                options=args.transport_options,
                timeout=args.timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.debug("request timed out")
            raise HTTPError("req_timedout") from exc

    def _track(self, stream_id: RequestId, task: asyncio.Task[None]) -> None:
        def forget(done: asyncio.Task[None]) -> None:
            if self._streams.get(stream_id) is done:
                del self._streams[stream_id]

        self._streams[stream_id] = task
        task.add_done_callback(forget)

    def _options(
        self, options: Optional[Options], overrides: Dict[str, Any]
    ) -> Options:
        if options is None:
            options = self.defaults
        if not overrides:
            return options
        try:
            return dataclasses.replace(options, **overrides)
        except TypeError as exc:
            raise ConfigurationError(str(exc)) from exc


def _method(method: Union[Method, str]) -> Method:
    if isinstance(method, Method):
        return method
    try:
        return Method(to_str(method).upper())
    except ValueError:
        raise ConfigurationError(f"unknown method {method!r}") from None


def _credentials(basic_auth: Any) -> Tuple[str, str]:
    if not isinstance(basic_auth, (tuple, list)) or len(basic_auth) != 2:
        raise ConfigurationError(
            f"basic_auth must be a (user, password) pair, got {basic_auth!r}"
        )
    user, password = basic_auth
    return to_str(user), to_str(password)


def _encode_headers(headers: HeadersInput) -> EncodedHeaders:
    pairs = headers.items() if isinstance(headers, Mapping) else headers
    encoded = []
    for name, value in pairs:
        if isinstance(value, (list, tuple)):
            encoded.extend((to_str(name), to_str(item)) for item in value)
        else:
            encoded.append((to_str(name), to_str(value)))
    return encoded


def _cause(reason: Any) -> Optional[BaseException]:
    return reason if isinstance(reason, BaseException) else None


def _cancel(task: Optional[asyncio.Task[None]]) -> None:
    if task is not None:
        task.cancel()
