"""Building and sending form-encoded POST requests to the licensing Web API."""

from __future__ import annotations

import string
import urllib.error
import urllib.request
from collections.abc import Callable, Iterable, Mapping

from .errors import CryptolensError, Subsystem

DEFAULT_HOST = "app.cryptolens.io"
API_PREFIX = "/api/key/"

_UNRESERVED = frozenset((string.ascii_letters + string.digits + "-._~").encode("ascii"))
_HEX = "0123456789ABCDEF"

# Reasons reported with Subsystem.REQUEST_HANDLER.
_SEND_REQUEST_FAILED = 4

Transport = Callable[[str, bytes, Mapping[str, str]], bytes]


def percent_encode(text: str) -> str:
    """Percent-encode every byte of the UTF-8 text that is not unreserved."""
    parts = []
    for byte in text.encode("utf-8"):
        if byte in _UNRESERVED:
            parts.append(chr(byte))
        else:
            parts.append("%" + _HEX[byte >> 4] + _HEX[byte & 0xF])
    return "".join(parts)


def build_url(host: str, endpoint: str | None) -> str:
    """Join host and endpoint into an https URL with exactly one slash between."""
    url = "https://" + host
    endpoint = endpoint or ""
    if not url.endswith("/") and endpoint and not endpoint.startswith("/"):
        url += "/"
    return url + endpoint


def _urllib_transport(
    url: str, body: bytes, headers: Mapping[str, str], timeout: float | None = None
) -> bytes:
    request = urllib.request.Request(url, data=body, headers=dict(headers), method="POST")
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            return response.read()
    except urllib.error.HTTPError as exc:
        # Error statuses still carry a reply body that the caller interprets.
        with exc:
            return exc.read()


class PostBuilder:
    """Collects form arguments for one POST request and sends it."""

    def __init__(
        self, host: str, endpoint: str, transport: Transport | None = None
    ) -> None:
        self.url = build_url(host, endpoint)
        self._fields: list[str] = []
        self._transport = transport or _urllib_transport

    @property
    def body(self) -> str:
        """The form-encoded request body built so far."""
        return "&".join(self._fields)

    def add_argument(self, key: str, value: str) -> "PostBuilder":
        """Append one key/value pair to the body and return this builder."""
        self._fields.append(f"{percent_encode(key)}={percent_encode(value)}")
        return self

    def make(self) -> str:
        """Send the request and return the body of the reply."""
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        try:
            reply = self._transport(self.url, self.body.encode("ascii"), headers)
        except OSError as exc:
            raise CryptolensError(
                Subsystem.REQUEST_HANDLER, _SEND_REQUEST_FAILED
            ) from exc
        return reply.decode("utf-8", errors="replace")


class RequestHandler:
    """Makes requests to the key methods of the licensing Web API."""

    def __init__(
        self, host: str = DEFAULT_HOST, transport: Transport | None = None
    ) -> None:
        self.host = host
        self._transport = transport

    def post_request(self, host: str, endpoint: str) -> PostBuilder:
        """Start a POST request to ``endpoint`` on ``host``."""
        return PostBuilder(host, endpoint, self._transport)

    def make_request(
        self,
        method: str,
        arguments: Mapping[str, str] | Iterable[tuple[str, str]],
    ) -> str:
        """Call a Web API key method with the given arguments; return the reply."""
        request = self.post_request(self.host, API_PREFIX + method)
        pairs = arguments.items() if isinstance(arguments, Mapping) else arguments
        for key, value in pairs:
            request.add_argument(key, value)
        return request.make()