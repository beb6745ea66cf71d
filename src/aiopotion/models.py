from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import *

from .types import (
    Body,
    EncodedHeaders,
    HeadersInput,
    HeaderValue,
    Method,
    RequestId,
    Timeout,
)


class HeaderMap(Mapping[str, HeaderValue]):
    """
    Immutable, case-insensitive header mapping.

    Names keep the casing they were first seen with and are iterated in
    case-insensitive sorted order. A name that occurred more than once maps
    to a tuple of its values, most recent first.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[Tuple[str, HeaderValue]] = ()) -> None:
        collected = {name.lower(): (name, value) for name, value in entries}
        self._entries: Dict[str, Tuple[str, HeaderValue]] = {
            key: collected[key] for key in sorted(collected)
        }

    def __getitem__(self, name: str) -> HeaderValue:
        return self._entries[name.lower()][1]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __hash__(self) -> int:
        return hash(frozenset(self.items()))

    def __repr__(self) -> str:
        return f"HeaderMap({dict(self)!r})"

    def get_list(self, name: str) -> List[str]:
        """
        Return all values of a header in arrival order.
        """
        value = self.get(name)
        if value is None:
            return []
        if isinstance(value, tuple):
            return list(reversed(value))
        return [value]

    def to_pairs(self) -> List[Tuple[str, str]]:
        return [(name, value) for name in self for value in self.get_list(name)]


@dataclass(frozen=True)
class Response:
    status_code: int
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: bytes = b""

    def is_success(self) -> bool:
        return 200 <= self.status_code <= 299

    def is_success_or_redirect(self) -> bool:
        return self.is_success() or self.status_code in (302, 304)


@dataclass(frozen=True)
class AsyncResponse:
    id: RequestId


@dataclass(frozen=True)
class AsyncHeaders:
    id: RequestId
    status_code: int
    headers: HeaderMap


@dataclass(frozen=True)
class AsyncChunk:
    id: RequestId
    chunk: Any


@dataclass(frozen=True)
class AsyncEnd:
    id: RequestId


AsyncEvent = Union[AsyncHeaders, AsyncChunk, AsyncEnd]


@dataclass(frozen=True)
class Options:
    """
    Per request configuration.

    ``timeout`` is in seconds. ``stream_to`` turns the request into a
    streaming one: the call returns an ``AsyncResponse`` right away and the
    events of the response are put on the queue. ``direct`` is a connection
    handle from ``Client.spawn_connection``. ``transport_options`` are
    handed to the transport untouched.
    """

    body: Body = b""
    headers: HeadersInput = ()
    timeout: Timeout = 5.0
    basic_auth: Optional[Tuple[str, str]] = None
    stream_to: Optional[asyncio.Queue[AsyncEvent]] = None
    direct: Any = None
    follow_redirects: bool = False
    max_redirects: int = 10
    transport_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RequestDescriptor:
    method: Method
    url: str
    headers: EncodedHeaders
    body: Body
    timeout: Timeout
    transport_options: Mapping[str, Any]
    follow_redirects: bool
    direct: Any = None
    transformer: Optional[asyncio.Task[None]] = field(
        default=None, repr=False, compare=False
    )
