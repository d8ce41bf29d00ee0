"""
Unit tests for the connection wrapper and socket server.
"""

import socket
import threading

import pytest

from cgihttpd.config import ServerConfig
from cgihttpd.core import Connection, ConnectionState, SocketServer
from cgihttpd.http.framing import FramingError, FramingLimits


@pytest.fixture
def socket_pair():
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    server_side.close()
    client_side.close()


class TestConnection:
    """Tests for Connection."""

    def test_initial_state(self, socket_pair):
        """Test a fresh connection."""
        conn = Connection(socket=socket_pair[0], address=("127.0.0.1", 5555))

        assert conn.state is ConnectionState.IDLE
        assert conn.client_ip == "127.0.0.1"
        assert len(conn.id) == 8

    def test_read_request(self, socket_pair):
        """Test reading one header block."""
        server_side, client_side = socket_pair
        client_side.sendall(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n")

        conn = Connection(socket=server_side, address=("127.0.0.1", 5555))

        assert conn.read_request() == b"GET / HTTP/1.1\r\nHost: x\r\n"
        assert conn.state is ConnectionState.FRAMING

    def test_read_request_uses_limits(self, socket_pair):
        """Test that the connection's limits apply."""
        server_side, client_side = socket_pair
        client_side.sendall(b"GET /long HTTP/1.1\r\n\r\n")

        conn = Connection(
            socket=server_side,
            address=("127.0.0.1", 5555),
            limits=FramingLimits(request_line=5),
        )

        with pytest.raises(FramingError):
            conn.read_request()

    def test_peer_closed(self, socket_pair):
        """Test a peer that closes before sending a block."""
        server_side, client_side = socket_pair
        client_side.sendall(b"GET / HT")
        client_side.shutdown(socket.SHUT_WR)

        conn = Connection(socket=server_side, address=("127.0.0.1", 5555))

        with pytest.raises(FramingError):
            conn.read_request()

    def test_timeout(self, socket_pair):
        """Test that a silent peer trips the socket timeout."""
        conn = Connection(socket=socket_pair[0], address=("127.0.0.1", 5555), timeout=0.1)

        with pytest.raises(FramingError):
            conn.read_request()

    def test_send_and_close(self, socket_pair):
        """Test sending a response and closing."""
        server_side, client_side = socket_pair

        with Connection(socket=server_side, address=("127.0.0.1", 5555)) as conn:
            assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n") is True
            assert conn.state is ConnectionState.RESPONDED

        assert conn.state is ConnectionState.CLOSED
        assert client_side.recv(1024) == b"HTTP/1.1 200 OK\r\n\r\n"
        assert client_side.recv(1024) == b""

    def test_close_twice(self, socket_pair):
        """Test that close() is idempotent."""
        conn = Connection(socket=socket_pair[0], address=("127.0.0.1", 5555))
        conn.close()
        conn.close()
        assert conn.state is ConnectionState.CLOSED


class TestSocketServer:
    """Tests for SocketServer."""

    def test_sequential_accept(self):
        """Test that connections are handed over one at a time."""
        server = SocketServer(ServerConfig(host="127.0.0.1", port=0))
        seen = []
        active = []

        def handler(conn: Connection):
            active.append(conn)
            assert len(active) == 1
            with conn:
                seen.append(conn.read_request())
            active.remove(conn)

        thread = threading.Thread(target=server.start, args=(handler,), daemon=True)
        thread.start()
        assert server.wait_until_ready(timeout=5.0)

        port = server.address[1]
        assert port != 0

        for n in range(3):
            with socket.create_connection(("127.0.0.1", port), timeout=5.0) as s:
                s.sendall(f"GET /{n} HTTP/1.1\r\n\r\n".encode())
                assert s.recv(1) == b""

        server.shutdown()
        thread.join(timeout=5.0)

        assert not thread.is_alive()
        assert seen == [f"GET /{n} HTTP/1.1\r\n".encode() for n in range(3)]

    def test_shutdown_before_start(self):
        """Test that shutdown() on an idle server is harmless."""
        server = SocketServer(ServerConfig(host="127.0.0.1", port=0))

        server.shutdown()
        server.shutdown()

        assert server.is_running is False
        assert server.wait_until_ready(timeout=0.01) is False

    def test_bind_failure(self):
        """Test that a taken port raises."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
            taken.bind(("127.0.0.1", 0))
            taken.listen(1)
            port = taken.getsockname()[1]

            server = SocketServer(ServerConfig(host="127.0.0.1", port=port))
            with pytest.raises(OSError):
                server.start(lambda conn: None)
