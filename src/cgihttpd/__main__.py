"""
=============================================================================
CGIHTTPD CLI ENTRY POINT
=============================================================================

    # Serve ./www on port 8080
    python -m cgihttpd ./www

    # Another port, chattier logs
    python -m cgihttpd -p 3000 -l DEBUG ./www

    # A different interpreter command line (split shell-style, never run
    # through a shell)
    python -m cgihttpd --interpreter "/usr/bin/php-cgi -d display_errors=1" ./www

Every option falls back to its CGIHTTPD_* environment variable, then to
the built-in default (see ServerConfig.from_env). ROOT may be omitted when
CGIHTTPD_ROOT is set:

    CGIHTTPD_ROOT=./www CGIHTTPD_PORT=3000 python -m cgihttpd

Exit status:
    0   clean shutdown (SIGINT/SIGTERM), or -h
    1   the server could not start (e.g. the port is taken)
    2   bad usage: missing/invalid root, port out of range, bad CGIHTTPD_* value

=============================================================================
"""

import argparse
import os
import shlex
import sys
from typing import List, Optional

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .server import HTTPServer


def build_parser(defaults: Optional[ServerConfig] = None) -> argparse.ArgumentParser:
    """Build the argument parser, taking option defaults from ``defaults``."""
    if defaults is None:
        defaults = ServerConfig()

    parser = argparse.ArgumentParser(
        prog="cgihttpd",
        description="Serve static files, directory listings and CGI scripts from ROOT.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cgihttpd ./www                           # Port 8080
  cgihttpd -p 3000 ./www                   # Custom port
  cgihttpd --interpreter php-cgi8.2 ./www  # Another interpreter
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host",
        default=defaults.host,
        help="Address to bind to (default: %(default)s, env: CGIHTTPD_HOST)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help="Port to listen on (default: %(default)s, env: CGIHTTPD_PORT)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--interpreter",
        default=shlex.join(defaults.interpreter),
        help="Script interpreter command line (default: %(default)s, env: CGIHTTPD_INTERPRETER)",
    )

    parser.add_argument(
        "root",
        nargs="?",
        default=os.getenv("CGIHTTPD_ROOT"),
        help="Directory to serve as / (env: CGIHTTPD_ROOT)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help="Logging level (default: %(default)s, env: CGIHTTPD_LOG_LEVEL)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"cgihttpd {__version__}",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns the process exit status (argparse exits by itself on usage
    errors and on -h).
    """
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        build_parser().error(f"invalid CGIHTTPD_* environment value: {e}")

    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    if args.root is None:
        parser.error("the following arguments are required: root")

    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid log level: {args.log_level}")

    if not 0 <= args.port <= 65535:
        parser.error(f"invalid port: {args.port}")

    if not os.path.isdir(args.root) or not os.access(args.root, os.X_OK):
        parser.error(f"root is not an accessible directory: {args.root}")

    interpreter = tuple(shlex.split(args.interpreter))
    if not interpreter:
        parser.error("interpreter must not be empty")

    config = ServerConfig(
        host=args.host,
        port=args.port,
        root=args.root,
        interpreter=interpreter,
        log_level=args.log_level,
    )

    try:
        server = HTTPServer(config)
        server.run()
    except (OSError, ValueError) as e:
        parser.exit(1, f"{parser.prog}: error: {e}\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
