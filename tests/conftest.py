"""
pytest configuration and fixtures.
"""

import os
import socket
import sys
import textwrap
import threading
from pathlib import Path
from typing import Generator, Tuple

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cgihttpd import HTTPServer, ServerConfig
from cgihttpd.config import ServerContext
from cgihttpd.http import HTTPRequest, RequestLineParser


STUB_INTERPRETER = textwrap.dedent(
    """
    import os
    import sys

    out = sys.stdout.buffer
    out.write(b"Content-Type: text/plain\\r\\n")
    out.write(b"X-Query: " + os.environ.get("QUERY_STRING", "").encode() + b"\\r\\n")
    out.write(b"X-Script: " + os.path.basename(os.environ["SCRIPT_FILENAME"]).encode() + b"\\r\\n")
    out.write(b"\\r\\n")
    out.write(b"hello")
    """
)


@pytest.fixture
def www(tmp_path: Path) -> Path:
    """
    Server root with a small tree:

        index.html
        app.php
        style.css
        data.xyz
        docs/a.html, docs/b.png
        empty/
    """
    root = Path(os.path.realpath(tmp_path / "www"))
    root.mkdir()
    (root / "index.html").write_bytes(b"<h1>home</h1>")
    (root / "app.php").write_bytes(b"<?php echo 'hello';")
    (root / "style.css").write_bytes(b"body {}")
    (root / "data.xyz").write_bytes(b"???")
    (root / "docs").mkdir()
    (root / "docs" / "a.html").write_bytes(b"<p>a</p>")
    (root / "docs" / "b.png").write_bytes(b"\x89PNG")
    (root / "empty").mkdir()
    return root


@pytest.fixture
def stub_interpreter(tmp_path: Path) -> Tuple[str, ...]:
    """
    Interpreter argv standing in for php-cgi: prints a fixed CGI response
    and echoes a couple of environment variables back as headers.
    """
    script = tmp_path / "stub_cgi.py"
    script.write_text(STUB_INTERPRETER)
    return (sys.executable, str(script))


@pytest.fixture
def context(www: Path, stub_interpreter: Tuple[str, ...]) -> ServerContext:
    """Pipeline context rooted at the `www` tree."""
    return ServerContext(root=str(www), interpreter=stub_interpreter)


@pytest.fixture
def parse():
    """Shortcut: request-line text -> HTTPRequest."""
    parser = RequestLineParser()

    def _parse(target: str) -> HTTPRequest:
        return parser.parse(f"GET {target} HTTP/1.1\r\n")

    return _parse


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes, read until the server closes the connection."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def get(self, target: str) -> bytes:
        return self.request(f"GET {target} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())


@pytest.fixture
def test_server(
    www: Path, stub_interpreter: Tuple[str, ...]
) -> Generator[TestServer, None, None]:
    """A running server on an OS-chosen port, serving `www`."""
    server = HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=0,
        root=str(www),
        interpreter=stub_interpreter,
        timeout=5.0,
        script_timeout=10.0,
        log_level="WARNING",
    ))

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def split_response():
    """Splits a raw response into (status-line, header block, body)."""

    def _split(raw: bytes) -> Tuple[str, bytes, bytes]:
        head, _, body = raw.partition(b"\r\n\r\n")
        status_line, _, headers = head.partition(b"\r\n")
        return status_line.decode("ascii"), headers, body

    return _split
