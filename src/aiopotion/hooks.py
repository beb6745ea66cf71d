from __future__ import annotations

import re
from typing import *

from .errors import InvalidStatusCode, UnexpectedTransportResult
from .models import HeaderMap, Options
from .transport.types import ChunkError, FileBody, Ok, TransportHeaders, TransportResult
from .types import Body, HeadersInput, HeaderValue, RawHeaders, RawStatus
from .utils import to_str

_SCHEME = re.compile(r"\Ahttps?://")
_LEADING_INTEGER = re.compile(r"[+-]?\d+")


class Hooks:
    """
    The overridable steps of the request pipeline.

    Every method here has a working default. Subclass and override any of
    them to customize a client, calling ``super()`` to fall back to the
    default behavior. Hooks must not perform I/O.
    """

    def process_url(self, url: str) -> str:
        if _SCHEME.match(url):
            return url
        return "http://" + url

    def process_request_body(self, body: Body) -> Body:
        return body

    def process_request_headers(self, headers: HeadersInput) -> HeadersInput:
        return headers

    def process_response_body(self, body: Any) -> bytes:
        return _flatten(body)

    def process_response_chunk(self, chunk: Any) -> Any:
        if isinstance(chunk, ChunkError):
            return chunk
        return _flatten(chunk)

    def process_status_code(self, status_code: RawStatus) -> int:
        """
        Take the leading integer of the status, ``"200 OK"`` gives 200.
        """
        if isinstance(status_code, int):
            return status_code
        if isinstance(status_code, bytes):
            status_code = status_code.decode("latin-1")
        match = _LEADING_INTEGER.match(status_code)
        if match is None:
            raise InvalidStatusCode(status_code)
        return int(match.group())

    def process_response_headers(self, headers: RawHeaders) -> HeaderMap:
        """
        Build a HeaderMap from (name, value) pairs.

        Names and values are converted to str, repeated names (compared
        case-insensitively) collect their values most recent first.
        """
        collected: Dict[str, Tuple[str, HeaderValue]] = {}
        for raw_name, raw_value in headers:
            name = to_str(raw_name)
            value = to_str(raw_value)
            key = name.lower()
            if key in collected:
                first_name, previous = collected[key]
                if not isinstance(previous, tuple):
                    previous = (previous,)
                collected[key] = (first_name, (value,) + previous)
            else:
                collected[key] = (name, value)
        return HeaderMap(collected.values())

    def process_options(self, options: Options) -> Options:
        return options

    def is_redirect(self, response: Ok) -> bool:
        status_code = self.process_status_code(response.status)
        return 300 < status_code < 400

    def response_ok(self, response: TransportResult) -> bool:
        return isinstance(response, Ok)

    def process_response_location(
        self, response: Union[Ok, TransportHeaders]
    ) -> Optional[str]:
        location = self.process_response_headers(response.headers).get("Location")
        if isinstance(location, tuple):
            return location[0]
        return location


def _flatten(data: Any) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, FileBody):
        return data.path.encode("utf-8")
    if isinstance(data, int) and 0 <= data <= 255:
        return bytes((data,))
    if isinstance(data, (list, tuple)):
        return b"".join(_flatten(part) for part in data)
    raise UnexpectedTransportResult(data)
