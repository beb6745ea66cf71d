from enum import Enum
from typing import (
    Any,
    AsyncIterable,
    Iterable,
    List,
    Mapping,
    Tuple,
    Union,
)

Timeout = Union[float, int]

# Request side.
Body = Union[bytes, str, AsyncIterable[bytes]]
HeaderPairs = Iterable[Tuple[Any, Any]]
HeadersInput = Union[Mapping[Any, Any], HeaderPairs]
EncodedHeaders = List[Tuple[str, str]]

# Response side, as handed over by a transport.
RawStatus = Union[str, bytes, int]
RawHeaders = Iterable[Tuple[Union[str, bytes], Any]]

HeaderValue = Union[str, Tuple[str, ...]]

RequestId = Any


class Method(Enum):
    get = "GET"
    head = "HEAD"
    post = "POST"
    put = "PUT"
    patch = "PATCH"
    delete = "DELETE"
    options = "OPTIONS"


REDIRECT_STATUSES = frozenset({302, 304})
