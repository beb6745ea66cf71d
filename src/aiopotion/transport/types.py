from dataclasses import dataclass
from typing import Any, Optional, Union

from aiopotion.types import RawHeaders, RawStatus, RequestId


@dataclass(frozen=True)
class Ok:
    status: RawStatus
    headers: RawHeaders
    body: Any
    trailer: Any = None


@dataclass(frozen=True)
class Accepted:
    """
    The request was accepted for asynchronous delivery, its events will
    be put on the ``stream_to`` queue from the transport options.
    """

    id: RequestId


@dataclass(frozen=True)
class ConnFailed:
    reason: Optional[Any] = None


@dataclass(frozen=True)
class Failed:
    reason: Any


TransportResult = Union[Ok, Accepted, ConnFailed, Failed]


@dataclass(frozen=True)
class FileBody:
    path: str


@dataclass(frozen=True)
class ChunkError:
    reason: Any


@dataclass(frozen=True)
class TransportHeaders:
    id: RequestId
    status: RawStatus
    headers: RawHeaders


@dataclass(frozen=True)
class TransportChunk:
    id: RequestId
    chunk: Any


@dataclass(frozen=True)
class TransportEnd:
    id: RequestId


TransportEvent = Union[TransportHeaders, TransportChunk, TransportEnd]
