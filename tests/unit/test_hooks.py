from typing import Any

import pytest

from aiopotion.errors import InvalidStatusCode, UnexpectedTransportResult
from aiopotion.hooks import Hooks
from aiopotion.models import Options
from aiopotion.transport.types import (
    Accepted,
    ChunkError,
    ConnFailed,
    Failed,
    FileBody,
    Ok,
    TransportHeaders,
    TransportResult,
)

hooks = Hooks()


@pytest.mark.parametrize(
    "url,expected",
    [
        ("example.com", "http://example.com"),
        ("example.com/get?a=b", "http://example.com/get?a=b"),
        ("http://example.com", "http://example.com"),
        ("https://example.com", "https://example.com"),
        ("httpbin.org", "http://httpbin.org"),
    ],
)
def test_process_url(url: str, expected: str) -> None:
    assert hooks.process_url(url) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [("200 OK", 200), ("404", 404), (b"302", 302), ("301Moved", 301), (204, 204)],
)
def test_process_status_code(raw: Any, expected: int) -> None:
    assert hooks.process_status_code(raw) == expected


@pytest.mark.parametrize("raw", ["OK", "", b" 200"])
def test_process_status_code_without_leading_integer(raw: Any) -> None:
    with pytest.raises(InvalidStatusCode):
        hooks.process_status_code(raw)


def test_process_response_headers_groups_repeated_names() -> None:
    headers = hooks.process_response_headers(
        [
            (b"Set-Cookie", b"first=foo; Path=/"),
            ("Content-Type", "text/plain"),
            ("set-cookie", "second=bar; Path=/"),
            ("Content-Length", 0),
        ]
    )
    assert list(headers) == ["Content-Length", "Content-Type", "Set-Cookie"]
    assert headers["Content-Length"] == "0"
    assert headers["set-cookie"] == ("second=bar; Path=/", "first=foo; Path=/")
    assert headers.get_list("Set-Cookie") == ["first=foo; Path=/", "second=bar; Path=/"]


def test_process_response_headers_is_idempotent() -> None:
    headers = hooks.process_response_headers(
        [
            ("X-B", "1"),
            ("x-a", "2"),
            ("X-B", "3"),
            ("X-B", "4"),
        ]
    )
    assert hooks.process_response_headers(headers.to_pairs()) == headers
    assert headers == {"x-a": "2", "X-B": ("4", "3", "1")}


def test_process_response_body_flattens_nested_data() -> None:
    assert hooks.process_response_body([b"he", ["l", [108]], "o"]) == b"hello"
    assert hooks.process_response_body(bytearray(b"raw")) == b"raw"
    assert hooks.process_response_body("") == b""


def test_process_response_body_file_reference() -> None:
    assert hooks.process_response_body(FileBody("/tmp/saved")) == b"/tmp/saved"


def test_process_response_body_unknown_shape() -> None:
    with pytest.raises(UnexpectedTransportResult):
        hooks.process_response_body(object())


def test_process_response_chunk() -> None:
    error = ChunkError("connection closed")
    assert hooks.process_response_chunk(error) is error
    assert hooks.process_response_chunk([b"a", "b"]) == b"ab"
    assert hooks.process_response_chunk(FileBody("/tmp/chunk")) == b"/tmp/chunk"


@pytest.mark.parametrize(
    "status,expected",
    [
        ("301", True),
        ("302", True),
        ("303", True),
        ("399", True),
        ("200", False),
        ("300", False),
        ("400", False),
        ("404", False),
    ],
)
def test_is_redirect(status: str, expected: bool) -> None:
    assert hooks.is_redirect(Ok(status, [], b"")) is expected


@pytest.mark.parametrize(
    "result,expected",
    [
        (Ok("200", [], b""), True),
        (Ok("500", [], b"", trailer=None), True),
        (Accepted(1), False),
        (ConnFailed(), False),
        (Failed("closed"), False),
    ],
)
def test_response_ok(result: TransportResult, expected: bool) -> None:
    assert hooks.response_ok(result) is expected


def test_process_response_location() -> None:
    assert (
        hooks.process_response_location(Ok("302", [("location", "/new")], b""))
        == "/new"
    )
    assert hooks.process_response_location(Ok("302", [], b"")) is None
    assert (
        hooks.process_response_location(
            TransportHeaders(1, "302", [(b"Location", b"http://example.com/x")])
        )
        == "http://example.com/x"
    )


def test_identity_hooks() -> None:
    options = Options(timeout=1)
    headers = [("Accept", "text/html")]
    assert hooks.process_options(options) is options
    assert hooks.process_request_headers(headers) is headers
    assert hooks.process_request_body(b"body") == b"body"
