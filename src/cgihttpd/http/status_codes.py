"""
=============================================================================
HTTP STATUS CODES (CLOSED TABLE)
=============================================================================

This server only ever speaks a small, fixed set of status codes. Every
response goes through this table: a code that is not listed here has no
reason phrase, and a response without a reason phrase is never written.

=============================================================================
THE TABLE
=============================================================================

    ┌────────┬──────────────────────────────┬──────────────────────────────┐
    │  Code  │ Reason phrase                │ Emitted when                 │
    ├────────┼──────────────────────────────┼──────────────────────────────┤
    │  200   │ OK                           │ file, listing, script output │
    │  301   │ Moved Permanently            │ directory without "/"        │
    │  400   │ Bad Request                  │ '"' in target, no CRLF       │
    │  403   │ Forbidden                    │ unreadable file/dir, escape  │
    │  404   │ Not Found                    │ nothing at path              │
    │  405   │ Method Not Allowed           │ method other than GET        │
    │  414   │ Request-URI Too Long         │ reserved (outer limits)      │
    │  418   │ I'm a teapot                 │ reserved (RFC 2324)          │
    │  500   │ Internal Server Error        │ interpreter / I/O failures   │
    │  501   │ Not Implemented              │ bad target, unknown type     │
    │  505   │ HTTP Version Not Supported   │ version other than HTTP/1.1  │
    └────────┴──────────────────────────────┴──────────────────────────────┘

Note the 414 phrase: this server uses the RFC 2616 wording
("Request-URI Too Long"), not the RFC 7231 one ("URI Too Long").

=============================================================================
"""

from enum import IntEnum
from typing import Optional


class HTTPStatus(IntEnum):
    """
    The status codes this server knows how to send.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    MOVED_PERMANENTLY = 301
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    REQUEST_URI_TOO_LONG = 414   # reserved, nothing in the pipeline emits it
    IM_A_TEAPOT = 418            # reserved, RFC 2324
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status-line."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_URI_TOO_LONG: "Request-URI Too Long",
    HTTPStatus.IM_A_TEAPOT: "I'm a teapot",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}


def reason(code: int) -> Optional[str]:
    """
    Look up the reason phrase for a status code.

    Returns None for any code outside the closed table. Callers treat
    None as "do not respond at all".

        >>> reason(301)
        'Moved Permanently'
        >>> reason(302) is None
        True
    """
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return None
