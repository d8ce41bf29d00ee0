"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Two layers:

    ServerConfig   mutable, user-facing: defaults, environment, CLI
         │
         │  to_context()   validate + resolve the root directory
         ▼
    ServerContext  frozen, what the request pipeline actually sees

Nothing in the pipeline reads global state. The resolver, the lister,
the script runner and the framer are all handed the ServerContext (or
the piece of it they need) when the server starts.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    Priority (highest to lowest):

    1. Command-line arguments       cgihttpd -p 3000 ./www
    2. Environment variables        CGIHTTPD_PORT=3000 cgihttpd ./www
    3. Default values               (this dataclass)

=============================================================================
"""

import logging
import os
import shlex
from dataclasses import dataclass
from typing import Optional, Tuple

from .http.framing import FramingLimits


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ServerContext:
    """
    Immutable per-process state shared by every request.

    Attributes:
        root:           Absolute, symlink-free path of the server root.
        interpreter:    Argument vector of the script interpreter.
        limits:         Header-block size limits for the framer.
        script_timeout: Seconds before an interpreter run is abandoned,
                        or None to wait indefinitely.
    """

    root: str
    interpreter: Tuple[str, ...] = ("php-cgi",)
    limits: FramingLimits = FramingLimits()
    script_timeout: Optional[float] = None


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, timeout

    CONTENT
    - root, interpreter, script_timeout

    REQUEST LIMITS
    - request_line_limit, fields_limit, field_size_limit, chunk_size

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Address to bind to. The default listens on every interface."""

    port: int = 8080
    """Port to listen on. 0 lets the OS pick a free one."""

    backlog: int = 128
    """Maximum number of connections queued by the kernel."""

    timeout: Optional[float] = None
    """
    Client socket timeout in seconds.
    None = fully blocking. A client that connects and never sends keeps
    the (sequential) server waiting; set this to bound that.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root: str = "."
    """Directory served as "/". Resolved to a real path at startup."""

    interpreter: Tuple[str, ...] = ("php-cgi",)
    """
    Argument vector for the script interpreter. Executed directly,
    never through a shell.
    """

    script_timeout: Optional[float] = None
    """Seconds an interpreter may run before the request fails with 500."""

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LIMITS (Apache's LimitRequest* defaults)
    # ─────────────────────────────────────────────────────────────────────

    request_line_limit: int = 8190
    fields_limit: int = 50
    field_size_limit: int = 4094
    chunk_size: int = 512

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    @property
    def limits(self) -> FramingLimits:
        return FramingLimits(
            request_line=self.request_line_limit,
            fields=self.fields_limit,
            field_size=self.field_size_limit,
            chunk_size=self.chunk_size,
        )

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        CGIHTTPD_HOST         Bind address (default: 0.0.0.0)
        CGIHTTPD_PORT         Port (default: 8080)
        CGIHTTPD_ROOT         Server root (default: .)
        CGIHTTPD_INTERPRETER  Interpreter command line (default: php-cgi)
        CGIHTTPD_LOG_LEVEL    Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("CGIHTTPD_HOST", "0.0.0.0"),
            port=int(os.getenv("CGIHTTPD_PORT", "8080")),
            root=os.getenv("CGIHTTPD_ROOT", "."),
            interpreter=tuple(shlex.split(os.getenv("CGIHTTPD_INTERPRETER", "php-cgi"))),
            log_level=os.getenv("CGIHTTPD_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values (fail fast, at startup).

        Raises:
            ValueError: Describing the first invalid setting found.
        """
        if not 0 <= self.port <= 65535:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        for name in ("request_line_limit", "fields_limit", "field_size_limit", "chunk_size", "backlog"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")

        if not self.interpreter:
            raise ValueError("interpreter must not be empty")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.script_timeout is not None and self.script_timeout <= 0:
            raise ValueError("script_timeout must be > 0")

    def resolve_root(self) -> str:
        """
        Absolute, symlink-free path of the server root.

        Raises:
            ValueError: If the root is not a directory the server can traverse.
        """
        root = os.path.realpath(self.root)
        if not os.path.isdir(root):
            raise ValueError(f"Server root is not a directory: {self.root}")
        if not os.access(root, os.X_OK):
            raise ValueError(f"Server root is not traversable: {self.root}")
        return root

    def to_context(self) -> ServerContext:
        """Validate and freeze into the context the pipeline runs with."""
        self.validate()
        return ServerContext(
            root=self.resolve_root(),
            interpreter=tuple(self.interpreter),
            limits=self.limits,
            script_timeout=self.script_timeout,
        )

    @property
    def numeric_log_level(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)
