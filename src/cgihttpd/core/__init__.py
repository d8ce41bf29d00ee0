"""
=============================================================================
CORE PACKAGE - Socket plumbing
=============================================================================

    socket_server.py   listening socket, sequential accept loop, signals
    connection.py      one client socket, one request, one state machine

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
]
