"""
=============================================================================
CGI HTTP SERVER
=============================================================================

The orchestrator: ties the socket layer, the HTTP layer and the handlers
into one per-connection pipeline.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        │ (Orchestrator)  │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────────┐    │
    │    │ SocketServer │    │ http package │    │RequestDispatcher │    │
    │    │  (accept)    │    │ (frame/parse)│    │ (resolve/handle) │    │
    │    └──────┬───────┘    └──────────────┘    └──────────────────┘    │
    │           ▼                                                         │
    │    ┌──────────────┐                                                 │
    │    │  Connection  │                                                 │
    │    └──────────────┘                                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. ACCEPT
       └── SocketServer accepts a client and wraps it in a Connection

    2. FRAME
       └── Read until CRLF CRLF, within the configured limits.
           Failure: close without a response.

    3. PARSE
       └── Request-line only. Failure: 400 / 405 / 501 / 505.

    4. RESOLVE
       └── Map the path under the server root.

    5. RESPOND
       └── static file, directory listing, script output, 301 or error

    6. CLOSE
       └── Always. One request per connection.

Everything happens in the accepting thread. The next client is not
accepted until the current one is closed.

=============================================================================
"""

import logging
from typing import Optional, Tuple

from .config import ServerConfig, ServerContext
from .core import SocketServer, Connection, ConnectionState
from .handlers import RequestDispatcher, ResourceKind
from .http import (
    FramingError,
    HTTPParseError,
    HTTPResponse,
    ResponseWriter,
    error_response,
    internal_error,
    is_script,
    parse_request_line,
)
from .http.response import access_logger
from .handlers.resolver import ResolvedPath


logger = logging.getLogger(__name__)

_KIND_STATES = {
    ResourceKind.DIRECTORY_LISTABLE: ConnectionState.LISTING,
    ResourceKind.DIRECTORY_NEEDS_SLASH: ConnectionState.REDIRECTING,
    ResourceKind.MISSING: ConnectionState.ERRORING,
    ResourceKind.UNSUPPORTED_TYPE: ConnectionState.ERRORING,
    ResourceKind.FORBIDDEN: ConnectionState.ERRORING,
}


class HTTPServer:
    """
    Sequential HTTP/1.1 server for static files, directory listings and
    CGI scripts.

    Usage:
        config = ServerConfig(port=8080, root="./www")
        server = HTTPServer(config)
        server.run()  # Blocks until SIGINT/SIGTERM or shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize the server.

        Validates the configuration and resolves the server root up front,
        so a bad root fails here rather than on the first request.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.context: ServerContext = self.config.to_context()

        self._socket_server = SocketServer(self.config)
        self._dispatcher = RequestDispatcher(self.context)
        self._writer = ResponseWriter()

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port); the real port once the server is listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the listening socket cannot be bound.
        """
        self._setup_logging()
        logger.info(f"Using {self.context.root} for server's root")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")

    def shutdown(self):
        """Stop after the connection currently being served, if any."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = self.config.numeric_log_level

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("cgihttpd").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Serve exactly one request on `conn`, then close it.

        =====================================================================
        CONNECTION PIPELINE
        =====================================================================

        1. Frame the header block. On failure: close, send nothing.
        2. Parse the request-line. On failure: error page.
        3. Resolve and dispatch.
        4. Write the response (if its status has a reason phrase).

        Any unexpected exception in 2-3 becomes a 500; the accept loop
        carries on with the next client either way.
        =====================================================================
        """
        with conn:
            try:
                header_block = conn.read_request()
            except FramingError as e:
                logger.debug(f"[{conn.id}] Framing failed from {conn.client_ip}: {e}")
                return

            try:
                response = self._respond(conn, header_block)
            except Exception as e:
                logger.exception(f"[{conn.id}] Request handling error: {e}")
                conn.state = ConnectionState.ERRORING
                response = internal_error()

            self._writer.write(conn, response)

    def _respond(self, conn: Connection, header_block: bytes) -> HTTPResponse:
        conn.state = ConnectionState.PARSING

        request_line = header_block.split(b"\r\n", 1)[0]
        access_logger.info(request_line.decode("utf-8", "replace"))

        try:
            request = parse_request_line(header_block)
        except HTTPParseError as e:
            logger.debug(f"[{conn.id}] Rejected request-line: {e} ({int(e.status_code)})")
            conn.state = ConnectionState.ERRORING
            return error_response(e.status_code)

        conn.state = ConnectionState.RESOLVING
        resolved = self._dispatcher.resolve(request)
        conn.state = self._state_for(resolved)

        return self._dispatcher.dispatch(request, resolved)

    @staticmethod
    def _state_for(resolved: ResolvedPath) -> ConnectionState:
        if resolved.kind in _KIND_STATES:
            return _KIND_STATES[resolved.kind]
        if is_script(resolved.mime_type):
            return ConnectionState.SCRIPTING
        return ConnectionState.TRANSFERRING


def create_server(root: str, **kwargs) -> HTTPServer:
    """
    Shortcut for HTTPServer(ServerConfig(root=root, **kwargs)).

    Example:
        server = create_server("./www", port=0, interpreter=("php-cgi",))
        threading.Thread(target=server.run, daemon=True).start()
    """
    return HTTPServer(ServerConfig(root=root, **kwargs))


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# HTTPServer wires SocketServer -> Connection -> framing -> parsing ->
# RequestDispatcher -> ResponseWriter, one connection at a time.
#
# Failure handling by stage:
# - framing:  connection closed, nothing sent
# - parsing:  error page with the parser's status code
# - handlers: error pages returned by the handlers themselves
# - anything else: logged with traceback, 500
# =============================================================================
