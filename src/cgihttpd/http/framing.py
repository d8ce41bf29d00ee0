"""
=============================================================================
REQUEST FRAMING
=============================================================================

Reads raw bytes from a connection until a complete header block has
arrived, enforcing size limits modelled on Apache's LimitRequestLine,
LimitRequestFields and LimitRequestFieldSize.

=============================================================================
WHAT "FRAMING" MEANS HERE
=============================================================================

TCP delivers a byte stream, not messages. A single recv() may return
half a request line, or the whole request plus garbage. The framer's job
is to turn that stream into exactly one header block:

    recv() #1:  b"GET /index.html HT"
    recv() #2:  b"TP/1.1\\r\\nHost: x\\r\\n\\r\\nleftover"
                                        ────┬───
                                            └── terminator found

    header block returned:
                b"GET /index.html HTTP/1.1\\r\\nHost: x\\r\\n"

The block ends at the CRLF that closes the last field line; the blank
line and anything after it (this server never reads request bodies)
are dropped.

=============================================================================
LIMITS
=============================================================================

    ┌─────────────────────────┬─────────┬─────────────────────────────────┐
    │  Limit                  │ Default │ Applies to                      │
    ├─────────────────────────┼─────────┼─────────────────────────────────┤
    │  request_line           │  8190   │ request-line incl. its CRLF     │
    │  fields                 │  50     │ number of header field lines    │
    │  field_size             │  4094   │ each field line incl. its CRLF  │
    │  total (derived)        │  212894 │ bytes read before giving up     │
    └─────────────────────────┴─────────┴─────────────────────────────────┘

    total = request_line + fields * field_size + 4

Any violation, a read error, or the peer closing the stream before the
terminator arrives raises FramingError. The caller closes the connection
without sending anything back.

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable


CRLF = b"\r\n"
TERMINATOR = b"\r\n\r\n"


class FramingError(Exception):
    """
    Raised when a complete, in-limits header block cannot be read.

    There is deliberately no status code attached: a framing failure is
    answered by closing the connection, not with an HTTP response.
    """


@dataclass(frozen=True)
class FramingLimits:
    """Size limits for one header block."""

    request_line: int = 8190
    fields: int = 50
    field_size: int = 4094
    chunk_size: int = 512

    @property
    def max_total(self) -> int:
        """Upper bound on accumulated bytes while looking for the terminator."""
        return self.request_line + self.fields * self.field_size + 4


class RequestFramer:
    """
    Accumulates bytes from a connection into one header block.

    Usage:
        framer = RequestFramer(FramingLimits())
        block = framer.read(sock.recv)   # bytes, ends with b"\\r\\n"
    """

    def __init__(self, limits: FramingLimits = FramingLimits()):
        self.limits = limits

    def read(self, recv: Callable[[int], bytes]) -> bytes:
        """
        Read from `recv` until a full header block is available.

        Args:
            recv: Callable like socket.recv - takes a maximum byte count,
                  returns b"" once the peer has closed the stream.

        Returns:
            The header block, ending with the CRLF of its last line.

        Raises:
            FramingError: On read errors, early close, or limit violations.
        """
        buffer = bytearray()

        while len(buffer) < self.limits.max_total:
            try:
                chunk = recv(self.limits.chunk_size)
            except OSError as e:
                raise FramingError(f"Read failed: {e}") from e

            if not chunk:
                raise FramingError(
                    f"Stream closed after {len(buffer)} bytes without a terminator"
                )

            # The terminator may straddle two chunks, so back up 3 bytes
            start = max(len(buffer) - 3, 0)
            buffer.extend(chunk)

            end = buffer.find(TERMINATOR, start)
            if end != -1:
                return self._validate(bytes(buffer[:end + len(CRLF)]))

        raise FramingError(
            f"No terminator within {self.limits.max_total} bytes"
        )

    def _validate(self, block: bytes) -> bytes:
        """Check the request-line and field lines of a trimmed block."""
        line_end = block.find(CRLF)
        if line_end + len(CRLF) > self.limits.request_line:
            raise FramingError(
                f"Request-line is {line_end + len(CRLF)} bytes "
                f"(limit {self.limits.request_line})"
            )

        fields = 0
        position = line_end + len(CRLF)
        while position < len(block):
            field_end = block.find(CRLF, position)
            size = field_end + len(CRLF) - position
            if size > self.limits.field_size:
                raise FramingError(
                    f"Header field is {size} bytes (limit {self.limits.field_size})"
                )
            fields += 1
            position = field_end + len(CRLF)

        if fields > self.limits.fields:
            raise FramingError(
                f"{fields} header fields (limit {self.limits.fields})"
            )

        return block
