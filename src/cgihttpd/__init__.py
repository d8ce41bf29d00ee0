"""
=============================================================================
CGIHTTPD - A Small Sequential HTTP/1.1 Server With CGI Scripts
=============================================================================

Serves one directory tree over raw sockets: static files, generated
directory listings, and .php scripts run through an external CGI
interpreter (php-cgi by default).

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   1. RAW SOCKETS                                                     │
    │      - bind / listen / accept, one client at a time                 │
    │      - header block framed by CRLF CRLF, with hard size limits      │
    │                                                                      │
    │   2. HTTP/1.1, GET ONLY                                              │
    │      - request-line parsing, header fields ignored                  │
    │      - responses delimited by closing the connection                │
    │                                                                      │
    │   3. RESOURCES                                                       │
    │      - static files by extension (8 MIME types)                     │
    │      - index.php / index.html, else an HTML listing                 │
    │      - CGI scripts: headers and body come from the interpreter      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    cgihttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m cgihttpd)
    ├── server.py            # HTTPServer, the per-connection pipeline
    ├── config.py            # ServerConfig / ServerContext
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop, signals
    │   └── connection.py    # Client socket wrapper + state machine
    ├── http/
    │   ├── framing.py       # Header-block framing and limits
    │   ├── request.py       # Request-line parsing
    │   ├── encoding.py      # Percent-decoding, HTML escaping
    │   ├── response.py      # Responses, writer, error pages
    │   ├── status_codes.py  # Reason phrases
    │   └── mime_types.py    # Extension -> Content-Type
    └── handlers/
        ├── resolver.py      # Path -> filesystem classification
        ├── static.py        # File transfer
        ├── listing.py       # Directory listings
        ├── script.py        # CGI interpreter
        └── dispatcher.py    # Resolved path -> handler

=============================================================================
QUICK START
=============================================================================

    from cgihttpd import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(root="./www", port=8080))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig, ServerContext
from .server import HTTPServer, create_server

__all__ = [
    "__version__",
    "HTTPServer",
    "ServerConfig",
    "ServerContext",
    "create_server",
]
