"""
=============================================================================
HTTP PROTOCOL PACKAGE
=============================================================================

Everything that touches the wire format, leaf-first:

    framing.py       bytes from the socket  ──► one header block
    request.py       header block           ──► HTTPRequest
    encoding.py      percent-decoding, HTML escaping
    mime_types.py    extension              ──► Content-Type
    status_codes.py  code                   ──► reason phrase
    response.py      HTTPResponse           ──► bytes on the wire

=============================================================================
"""

from .framing import FramingError, FramingLimits, RequestFramer
from .request import (
    HTTPParseError,
    HTTPRequest,
    RequestLineParser,
    parse_request_line,
)
from .encoding import percent_decode, html_escape
from .mime_types import MIME_TYPES, SCRIPT_MIME_TYPE, lookup, is_script
from .status_codes import HTTPStatus, reason
from .response import (
    HTTPResponse,
    ResponseWriter,
    ok,
    redirect,
    error_response,
    forbidden,
    not_found,
    internal_error,
)

__all__ = [
    # Framing
    "FramingError",
    "FramingLimits",
    "RequestFramer",

    # Request-line parsing
    "HTTPParseError",
    "HTTPRequest",
    "RequestLineParser",
    "parse_request_line",

    # Text transforms
    "percent_decode",
    "html_escape",

    # MIME types
    "MIME_TYPES",
    "SCRIPT_MIME_TYPE",
    "lookup",
    "is_script",

    # Status codes
    "HTTPStatus",
    "reason",

    # Responses
    "HTTPResponse",
    "ResponseWriter",
    "ok",
    "redirect",
    "error_response",
    "forbidden",
    "not_found",
    "internal_error",
]
