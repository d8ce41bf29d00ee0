"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Transfers a regular file: the whole file is read into memory and sent
as the body of a 200 response with the file's Content-Type.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  not readable (os.access R_OK)  ──►  403 Forbidden                  │
    │  open()/read() fails            ──►  500 Internal Server Error      │
    │  otherwise                      ──►  200 OK + Content-Type          │
    └─────────────────────────────────────────────────────────────────────┘

Nothing is cached between requests; every request re-reads the file.

=============================================================================
"""

import logging
import os

from ..http.response import HTTPResponse, ok, forbidden, internal_error


logger = logging.getLogger(__name__)


class StaticFileHandler:
    """Serves a file that the resolver has already located and typed."""

    def handle(self, path: str, mime_type: str) -> HTTPResponse:
        """
        Build the response for the file at `path`.

        Args:
            path: Filesystem path of an existing file.
            mime_type: Content-Type from the MIME table.
        """
        if not os.access(path, os.R_OK):
            return forbidden()

        try:
            with open(path, "rb") as f:
                content = f.read()
        except OSError as e:
            logger.error(f"Error serving file {path}: {e}")
            return internal_error()

        return ok(content, mime_type)
