import string
import urllib.parse

import pytest

from licenselens.errors import CryptolensError, Subsystem
from licenselens.request import (
    API_PREFIX,
    PostBuilder,
    RequestHandler,
    build_url,
    percent_encode,
)


class FakeTransport:
    def __init__(self, reply=b'{"result":0}', error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def __call__(self, url, body, headers):
        self.calls.append((url, body, dict(headers)))
        if self.error is not None:
            raise self.error
        return self.reply


def test_unreserved_characters_pass_through():
    text = string.ascii_letters + string.digits + "-._~"
    assert percent_encode(text) == text


def test_reserved_characters_are_encoded():
    assert percent_encode("a b&c=d") == "a%20b%26c%3Dd"


def test_non_ascii_is_encoded_as_utf8_bytes():
    assert percent_encode("\u00e9") == "%C3%A9"


@pytest.mark.parametrize("text", ["", "plain", "x+y/z?q=1&r=2", "\u00e5\u00e4\u00f6 \u20ac", "%25"])
def test_percent_encode_round_trips(text):
    encoded = percent_encode(text)
    allowed = set(string.ascii_letters + string.digits + "-._~%")
    assert set(encoded) <= allowed
    assert urllib.parse.unquote(encoded) == text


def test_build_url_inserts_slash():
    assert build_url("example.com", "api") == "https://example.com/api"


def test_build_url_keeps_single_slash():
    assert build_url("example.com", "/api") == "https://example.com/api"
    assert build_url("example.com/", "api") == "https://example.com/api"


def test_build_url_without_endpoint():
    assert build_url("example.com", None) == "https://example.com"


def test_post_builder_joins_arguments():
    transport = FakeTransport()
    builder = PostBuilder("example.com", "/x", transport)
    result = builder.add_argument("a", "1").add_argument("b c", "2&3")
    assert result is builder
    assert builder.body == "a=1&b%20c=2%263"


def test_post_builder_make_sends_form():
    transport = FakeTransport(reply=b"reply body")
    builder = PostBuilder("example.com", "/api/key/Activate", transport)
    builder.add_argument("token", "token")
    assert builder.make() == "reply body"
    url, body, headers = transport.calls[0]
    assert url == "https://example.com/api/key/Activate"
    assert body == b"token=token"
    assert headers["Content-Type"] == "application/x-www-form-urlencoded"


def test_post_builder_transport_failure_raises():
    transport = FakeTransport(error=ConnectionError("down"))
    builder = PostBuilder("example.com", "/x", transport)
    with pytest.raises(CryptolensError) as info:
        builder.make()
    assert info.value.subsystem == Subsystem.REQUEST_HANDLER


def test_make_request_uses_method_endpoint_and_host():
    transport = FakeTransport(reply=b'{"result":1}')
    handler = RequestHandler(host="example.com", transport=transport)
    reply = handler.make_request("Deactivate", {"Key": "K-1", "MachineCode": "m c"})
    assert reply == '{"result":1}'
    url, body, _ = transport.calls[0]
    assert url == "https://example.com" + API_PREFIX + "Deactivate"
    assert urllib.parse.parse_qsl(body.decode("ascii")) == [
        ("Key", "K-1"),
        ("MachineCode", "m c"),
    ]


def test_make_request_accepts_pairs_and_empty():
    transport = FakeTransport()
    handler = RequestHandler(host="example.com", transport=transport)
    handler.make_request("Activate", [])
    handler.make_request("Activate", [("v", "1")])
    assert transport.calls[0][1] == b""
    assert transport.calls[1][1] == b"v=1"


def test_make_request_failure_raises():
    transport = FakeTransport(error=OSError("no route"))
    handler = RequestHandler(host="example.com", transport=transport)
    with pytest.raises(CryptolensError) as info:
        handler.make_request("Activate", {"v": "1"})
    assert info.value.subsystem == Subsystem.REQUEST_HANDLER


def test_post_request_builds_url():
    handler = RequestHandler(transport=FakeTransport())
    builder = handler.post_request("example.com", "api/key/GetKey")
    assert builder.url == "https://example.com/api/key/GetKey"