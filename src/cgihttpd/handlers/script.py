"""
=============================================================================
SCRIPT RUNNER (CGI)
=============================================================================

Runs .php files through an external interpreter (php-cgi by default)
using the CGI convention: request metadata goes in through environment
variables, the response comes back on the interpreter's stdout.

=============================================================================
THE CGI CONTRACT
=============================================================================

    ┌──────────────┐   environment              ┌─────────────────────┐
    │              │   QUERY_STRING=id=7        │                     │
    │   cgihttpd   │   REDIRECT_STATUS=200  ──► │  php-cgi            │
    │              │   SCRIPT_FILENAME=/..php   │                     │
    │              │                            │                     │
    │              │ ◄── stdout ─────────────── │  Content-Type: ..\\r\\n│
    │              │                            │  \\r\\n               │
    │              │                            │  <body bytes>       │
    └──────────────┘                            └─────────────────────┘

The interpreter's output is split at the FIRST blank line (CRLF CRLF):

    b"Content-Type: text/plain\\r\\nX-Powered-By: PHP\\r\\n\\r\\nhello"
      ──────────────────────┬───────────────────────  ──┬──
                    header block (kept with             body
                    its final CRLF, sent verbatim)

REDIRECT_STATUS=200 is what php-cgi's "force-cgi-redirect" check looks
for; without it php-cgi refuses to run the script.

=============================================================================
NO SHELL
=============================================================================

The interpreter is started from an argument vector with an explicit
environment mapping. The query string is attacker-controlled; it is
only ever an environment VALUE, never part of a command line, so there
is nothing for a shell to interpret.

=============================================================================
FAILURES
=============================================================================

    script not readable                 ──► 403
    interpreter cannot be started       ──► 500
    run exceeds script_timeout          ──► 500
    output has no CRLF CRLF boundary    ──► 500

The interpreter's exit status is not inspected: php-cgi reports script
errors in its output, and that output is forwarded as-is.

=============================================================================
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, forbidden, error_response
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)

BOUNDARY = b"\r\n\r\n"

SERVER_SOFTWARE = "cgihttpd"


class ScriptError(Exception):
    """Raised when the interpreter cannot produce a usable response."""

    def __init__(self, message: str, status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class ScriptOutput:
    """
    Interpreter stdout, split into headers and body.

    Attributes:
        headers: Everything up to and including the CRLF that ends the
                 last header line.
        body:    Everything after the blank line.
    """

    headers: bytes
    body: bytes

    @classmethod
    def parse(cls, output: bytes) -> "ScriptOutput":
        """
        Split raw interpreter output at the first CRLF CRLF.

        Raises:
            ScriptError: If there is no such boundary.
        """
        boundary = output.find(BOUNDARY)
        if boundary == -1:
            raise ScriptError("Interpreter output has no header/body boundary")
        return cls(
            headers=output[:boundary + 2],
            body=output[boundary + len(BOUNDARY):],
        )


class ScriptRunner:
    """
    Executes scripts with a configured interpreter.

    Usage:
        runner = ScriptRunner(("php-cgi",))
        response = runner.handle("/var/www/app.php", request)
    """

    def __init__(
        self,
        interpreter: Sequence[str] = ("php-cgi",),
        timeout: Optional[float] = None,
    ):
        """
        Args:
            interpreter: Argument vector; the script path is passed via
                         SCRIPT_FILENAME, not as an argument.
            timeout: Seconds before the run is abandoned, or None to wait
                     as long as it takes.
        """
        self.interpreter = list(interpreter)
        self.timeout = timeout

    def handle(self, path: str, request: HTTPRequest) -> HTTPResponse:
        """Run the script at `path` and turn its output into a response."""
        if not os.access(path, os.R_OK):
            return forbidden()

        try:
            output = ScriptOutput.parse(self.run(path, request))
        except ScriptError as e:
            logger.error(f"Script {path} failed: {e}")
            return error_response(e.status_code)

        return HTTPResponse(
            status=HTTPStatus.OK,
            raw_headers=output.headers,
            body=output.body,
        )

    def run(self, path: str, request: HTTPRequest) -> bytes:
        """
        Run the interpreter and collect everything it writes to stdout.

        Raises:
            ScriptError: If the interpreter cannot be started, the pipe
                         fails, or the run times out.
        """
        try:
            completed = subprocess.run(
                self.interpreter,
                env=self.environment(path, request),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise ScriptError(f"Interpreter timed out after {e.timeout}s") from e
        except OSError as e:
            raise ScriptError(f"Cannot run {self.interpreter[0]}: {e}") from e

        if completed.returncode != 0:
            logger.debug(f"Interpreter exited with status {completed.returncode}")

        return completed.stdout

    @staticmethod
    def environment(path: str, request: HTTPRequest) -> Dict[str, str]:
        """
        Environment for the interpreter: the server's own environment plus
        the CGI variables for this request.
        """
        env = dict(os.environ)
        env.update({
            "GATEWAY_INTERFACE": "CGI/1.1",
            "QUERY_STRING": request.query_string,
            "REDIRECT_STATUS": "200",
            "REQUEST_METHOD": request.method,
            "REQUEST_URI": request.target,
            "SCRIPT_FILENAME": path,
            "SERVER_PROTOCOL": request.version,
            "SERVER_SOFTWARE": SERVER_SOFTWARE,
        })
        return env
