"""
=============================================================================
REQUEST-LINE PARSER
=============================================================================

Turns the first line of a header block into an immutable HTTPRequest.
Header fields are framed and size-checked by the framer, but never
interpreted: this server only needs the request-line.

=============================================================================
REQUEST-LINE ANATOMY
=============================================================================

    GET /app.php?id=7 HTTP/1.1\\r\\n
    ─┬─ ──────┬────── ────┬───
     │        │           │
     │        │           └── version: after the LAST space
     │        └────────────── request-target: between the two
     └─────────────────────── method: before the FIRST space

Splitting on the first and last space (rather than on every space) means
a target containing spaces still parses; it is the framer's size limits,
not the parser, that bounds the line.

=============================================================================
VALIDATION ORDER
=============================================================================

The checks run in a fixed order, and the first failure wins:

    ┌────┬────────────────────────────────────────────┬────────┐
    │ #  │ Check                                      │ Status │
    ├────┼────────────────────────────────────────────┼────────┤
    │ 1  │ line contains a space                      │  400   │
    │ 2  │ method is exactly "GET"                    │  405   │
    │ 3  │ request-target starts with "/"             │  501   │
    │ 4  │ request-target has no '"'                  │  400   │
    │ 5  │ line contains CRLF                         │  400   │
    │ 6  │ version is exactly "HTTP/1.1"              │  505   │
    └────┴────────────────────────────────────────────┴────────┘

So "POST /x HTTP/1.0" is a 405, not a 505.

=============================================================================
PATH AND QUERY
=============================================================================

    "/a/b?x=1&y=2"   → path "/a/b", query "x=1&y=2"
    "/a/b?"          → path "/a/b", query ""
    "/a/b"           → path "/a/b", query None

The path is kept exactly as received (still percent-encoded). Decoding
happens later, in the resolver, because the redirect for directories
must echo the original spelling back to the client.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional

from .status_codes import HTTPStatus


SUPPORTED_METHOD = "GET"
SUPPORTED_VERSION = "HTTP/1.1"


class HTTPParseError(Exception):
    """
    Raised when a request-line is rejected.

    Carries the HTTP status code that should be sent back:

        400 Bad Request                - no space, '"' in target, no CRLF
        405 Method Not Allowed         - anything but GET
        501 Not Implemented            - target not starting with "/"
        505 HTTP Version Not Supported - anything but HTTP/1.1
    """

    def __init__(self, message: str, status_code: int = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request-line.

    Frozen: once parsed, nothing downstream can change what the client
    asked for.

    Attributes:
        method:  Always "GET" for a successfully parsed request.
        target:  Request-target as received, path plus "?query".
        path:    Target path, still percent-encoded.
        query:   Text after the first "?", or None when there is no "?".
        version: Always "HTTP/1.1" for a successfully parsed request.
    """

    method: str
    target: str
    path: str
    query: Optional[str] = None
    version: str = SUPPORTED_VERSION

    @property
    def query_string(self) -> str:
        """Query for the CGI environment; empty when absent."""
        return self.query or ""


class RequestLineParser:
    """
    Parses one request-line (including its trailing CRLF).

    Usage:
        parser = RequestLineParser()
        request = parser.parse("GET /a/b?x=1 HTTP/1.1\\r\\n")
        request.path    # "/a/b"
        request.query   # "x=1"
    """

    def parse(self, line: str) -> HTTPRequest:
        """
        Parse a request-line.

        Args:
            line: The request-line, normally ending with "\\r\\n".

        Returns:
            The parsed request.

        Raises:
            HTTPParseError: With the status code to respond with.
        """
        first_space = line.find(" ")
        if first_space == -1:
            raise HTTPParseError(f"No space in request-line: {line!r}")

        method = line[:first_space]
        if method != SUPPORTED_METHOD:
            raise HTTPParseError(
                f"Method not allowed: {method!r}",
                status_code=HTTPStatus.METHOD_NOT_ALLOWED,
            )

        last_space = line.rfind(" ")
        target = line[first_space + 1:last_space]

        if not target.startswith("/"):
            raise HTTPParseError(
                f"Request-target must be an absolute path: {target!r}",
                status_code=HTTPStatus.NOT_IMPLEMENTED,
            )

        if '"' in target:
            raise HTTPParseError(f"Request-target contains a quote: {target!r}")

        crlf = line.find("\r\n")
        if crlf == -1:
            raise HTTPParseError("Request-line is not CRLF-terminated")

        version = line[last_space + 1:]
        if version != SUPPORTED_VERSION + "\r\n":
            raise HTTPParseError(
                f"Unsupported HTTP version: {version.rstrip()!r}",
                status_code=HTTPStatus.HTTP_VERSION_NOT_SUPPORTED,
            )

        # The first "?" from the start of the line; the method is "GET",
        # so this is always the first "?" of the target
        question = line.find("?")
        if question != -1 and question < last_space:
            path = line[first_space + 1:question]
            query: Optional[str] = line[question + 1:last_space]
        else:
            path = target
            query = None

        return HTTPRequest(
            method=method,
            target=target,
            path=path,
            query=query,
            version=SUPPORTED_VERSION,
        )


def parse_request_line(header_block: bytes) -> HTTPRequest:
    """
    Parse the request-line at the start of a framed header block.

    The block is decoded as UTF-8 with "surrogateescape", so raw non-UTF-8
    octets survive intact until they reach the filesystem.
    """
    end = header_block.find(b"\r\n")
    raw_line = header_block if end == -1 else header_block[:end + 2]
    return RequestLineParser().parse(request_line_text(raw_line))


def request_line_text(raw_line: bytes) -> str:
    """Decode raw request-line bytes the way the parser expects them."""
    return raw_line.decode("utf-8", "surrogateescape")
