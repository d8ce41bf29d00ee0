"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for the lifetime of exactly one request.

=============================================================================
CONNECTION LIFECYCLE
=============================================================================

There is no keep-alive: each connection carries one request and one
response (or nothing, if framing fails), then it is closed. The states
therefore form a straight line with a single fan-out:

    IDLE ──► FRAMING ──► PARSING ──► RESOLVING ──┬──► TRANSFERRING ──┐
                │            │                   ├──► LISTING ───────┤
                │            │                   ├──► SCRIPTING ─────┤
                │            │                   ├──► REDIRECTING ───┤
                │            └───────────────────┴──► ERRORING ──────┤
                │                                                    ▼
                │                                               RESPONDED
                │                                                    │
                └─────────────── framing failed ────────────────► CLOSED

Nothing ever moves backwards. close() is reached on every path, including
exceptions, because the server uses the connection as a context manager.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from ..http.framing import FramingLimits, RequestFramer


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Per-connection pipeline states."""

    IDLE = "idle"                  # Accepted, nothing read yet
    FRAMING = "framing"            # Reading the header block
    PARSING = "parsing"            # Parsing the request-line
    RESOLVING = "resolving"        # Mapping the path onto the filesystem
    TRANSFERRING = "transferring"  # Sending a static file
    LISTING = "listing"            # Rendering a directory index
    SCRIPTING = "scripting"        # Running the interpreter
    REDIRECTING = "redirecting"    # Sending a 301
    ERRORING = "erroring"          # Sending an error page
    RESPONDED = "responded"        # Response written
    CLOSED = "closed"              # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier for log lines.
        state: Current pipeline state.
        created_at: Timestamp when the connection was accepted.
        timeout: Socket timeout; None keeps the socket fully blocking.
        limits: Header-block limits used by read_request().
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.IDLE
    created_at: float = field(default_factory=time.time)

    timeout: Optional[float] = None
    limits: FramingLimits = FramingLimits()

    def __post_init__(self):
        # settimeout(None) puts the socket in blocking mode
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Read one framed header block from the socket.

        Returns:
            The header block, ending with the CRLF of its last line.

        Raises:
            FramingError: If no complete, in-limits block arrives.
        """
        self.state = ConnectionState.FRAMING
        return RequestFramer(self.limits).read(self._recv)

    def _recv(self, size: int) -> bytes:
        """
        socket.recv() that reports an abrupt disconnect as end-of-stream.
        """
        try:
            return self.socket.recv(size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes to the client.

        Uses sendall() so that a partial send never truncates a response.

        Returns:
            True if send succeeded, False if the connection was lost.
        """
        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

        self.state = ConnectionState.RESPONDED
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) first, so the client sees a clean FIN after the
        last body byte; the close is what tells it the body is complete.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
