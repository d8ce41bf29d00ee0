"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Builds and emits HTTP/1.1 responses.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  HTTP/1.1 200 OK\r\n                  ← status-line                 │
    │  Content-Type: text/html\r\n          ← header block (verbatim)     │
    │  \r\n                                 ← blank line                  │
    │  <html>...</html>                     ← body bytes                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every connection carries exactly one response and is then closed, so the
end of the body is marked by the close itself. No Content-Length, Date
or Server header is added: what the handler put in the header block is
exactly what goes on the wire.

=============================================================================
HEADER BLOCKS: STRUCTURED OR VERBATIM
=============================================================================

Most responses are built from an ordered list of (name, value) pairs:

    HTTPResponse(200, headers=[("Content-Type", "image/png")], body=...)

Script output is different. The interpreter writes its own header block,
and that block is forwarded byte-for-byte:

    HTTPResponse(200, raw_headers=b"Content-Type: text/plain\r\n", ...)

=============================================================================
THE CLOSED STATUS TABLE
=============================================================================

A response whose status code has no reason phrase (see status_codes.py)
is silently dropped: to_bytes() returns b"" and the writer sends
nothing. It is never an exception.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .status_codes import HTTPStatus, reason


access_logger = logging.getLogger("cgihttpd.access")

HTTP_VERSION = "HTTP/1.1"

ERROR_TEMPLATE = (
    "<html><head><title>{code} {phrase}</title></head>"
    "<body><h1>{code} {phrase}</h1></body></html>"
)


@dataclass
class HTTPResponse:
    """
    One response, ready to be serialized.

    Attributes:
        status:      Status code. Only codes in the closed table produce output.
        headers:     Ordered (name, value) pairs.
        body:        Body bytes.
        raw_headers: Pre-formatted header block; when set, replaces `headers`.
    """

    status: int = HTTPStatus.OK
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""
    raw_headers: Optional[bytes] = None

    @property
    def phrase(self) -> Optional[str]:
        """Reason phrase, or None when the status is outside the table."""
        return reason(self.status)

    @property
    def status_line(self) -> str:
        """
        The status-line without its CRLF, e.g. "HTTP/1.1 404 Not Found".

        Empty when the status has no reason phrase.
        """
        phrase = self.phrase
        if phrase is None:
            return ""
        return f"{HTTP_VERSION} {int(self.status)} {phrase}"

    def header_block(self) -> bytes:
        """Header lines, each ending in CRLF, without the blank line."""
        if self.raw_headers is not None:
            return self.raw_headers
        return "".join(
            f"{name}: {value}\r\n" for name, value in self.headers
        ).encode("utf-8", "surrogateescape")

    def to_bytes(self) -> bytes:
        """
        Serialize for socket.sendall().

            status-line CRLF
            header block
            CRLF
            body

        Returns b"" when the status is outside the closed table.
        """
        status_line = self.status_line
        if not status_line:
            return b""
        return (
            status_line.encode("ascii") + b"\r\n"
            + self.header_block()
            + b"\r\n"
            + self.body
        )


class ResponseWriter:
    """
    Sends responses over a connection and logs each completed one.

    The sink only needs a `send_response(data: bytes) -> bool` method,
    which Connection provides.
    """

    def __init__(self, logger: logging.Logger = access_logger):
        self.logger = logger

    def write(self, sink, response: HTTPResponse) -> bool:
        """
        Write `response` to `sink`.

        Returns:
            True if the response was sent. False if the status code was
            not in the table (nothing sent) or the send failed.
        """
        data = response.to_bytes()
        if not data:
            self.logger.debug(f"No reason phrase for status {response.status}, not responding")
            return False

        if not sink.send_response(data):
            return False

        self.logger.info(response.status_line)
        return True


# =============================================================================
# CONVENIENCE CONSTRUCTORS
# =============================================================================

def ok(body: Union[str, bytes], content_type: str) -> HTTPResponse:
    """200 OK with a single Content-Type header."""
    if isinstance(body, str):
        body = body.encode("utf-8", "surrogateescape")
    return HTTPResponse(
        status=HTTPStatus.OK,
        headers=[("Content-Type", content_type)],
        body=body,
    )


def redirect(location: str) -> HTTPResponse:
    """301 Moved Permanently with a Location header and an empty body."""
    return HTTPResponse(
        status=HTTPStatus.MOVED_PERMANENTLY,
        headers=[("Location", location)],
    )


def error_response(status: int) -> HTTPResponse:
    """
    Minimal HTML error page for `status`.

        <html><head><title>404 Not Found</title></head>
        <body><h1>404 Not Found</h1></body></html>

    For a status outside the table the result is still an HTTPResponse,
    but one that serializes to nothing.
    """
    phrase = reason(status)
    if phrase is None:
        return HTTPResponse(status=status)

    body = ERROR_TEMPLATE.format(code=int(status), phrase=phrase)
    return HTTPResponse(
        status=status,
        headers=[("Content-Type", "text/html")],
        body=body.encode("utf-8"),
    )


def forbidden() -> HTTPResponse:
    return error_response(HTTPStatus.FORBIDDEN)


def not_found() -> HTTPResponse:
    return error_response(HTTPStatus.NOT_FOUND)


def internal_error() -> HTTPResponse:
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR)
