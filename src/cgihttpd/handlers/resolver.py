"""
=============================================================================
RESOURCE RESOLVER
=============================================================================

Maps a request path onto the filesystem and decides what kind of thing
lives there. It never reads file contents; it only classifies.

=============================================================================
DECISION TREE
=============================================================================

    decoded path
         │
         ├── contains NUL? ─────────────────────────────► MISSING (404)
         │
         ├── escapes the root? ─────────────────────────► FORBIDDEN (403)
         │
         ├── nothing there? ────────────────────────────► MISSING (404)
         │
         ├── directory?
         │      ├── request path lacks "/"? ────────────► DIRECTORY_NEEDS_SLASH (301)
         │      ├── index.php or index.html inside? ────► DIRECTORY_HAS_INDEX
         │      └── otherwise ──────────────────────────► DIRECTORY_LISTABLE
         │
         ├── extension not in MIME table? ─────────────► UNSUPPORTED_TYPE (501)
         │
         └── otherwise ─────────────────────────────────► FILE

A DIRECTORY_HAS_INDEX result carries the index file as its path and the
index file's MIME type, so it is then served exactly like a FILE (and
index.php goes to the interpreter).

=============================================================================
PATH TRAVERSAL
=============================================================================

The filesystem path is plain concatenation: root + decoded path. A
request for "/../../etc/passwd" (or its encoded form "/%2e%2e/...")
would walk out of the root, so the joined path is canonicalised with
realpath() and must still lie inside the root. If it does not, the
request is FORBIDDEN before anything else is checked.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..http.encoding import percent_decode
from ..http.mime_types import lookup
from ..http.request import HTTPRequest


logger = logging.getLogger(__name__)

INDEX_FILES = ("index.php", "index.html")


class ResourceKind(Enum):
    """Classification of a resolved request path."""

    FILE = "file"
    DIRECTORY_NEEDS_SLASH = "directory_needs_slash"
    DIRECTORY_HAS_INDEX = "directory_has_index"
    DIRECTORY_LISTABLE = "directory_listable"
    MISSING = "missing"
    UNSUPPORTED_TYPE = "unsupported_type"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class ResolvedPath:
    """
    Where a request points and what is there.

    Attributes:
        kind:      The classification.
        path:      Filesystem path (root + decoded path, or the index file).
        mime_type: Content-Type for FILE and DIRECTORY_HAS_INDEX.
        location:  Redirect target for DIRECTORY_NEEDS_SLASH.
    """

    kind: ResourceKind
    path: str
    mime_type: Optional[str] = None
    location: Optional[str] = None


class ResourceResolver:
    """
    Resolves request paths against a fixed server root.

    Usage:
        resolver = ResourceResolver("/var/www")
        resolved = resolver.resolve(request)
        if resolved.kind is ResourceKind.FILE:
            ...
    """

    def __init__(self, root: str):
        self.root = root

    def resolve(self, request: HTTPRequest) -> ResolvedPath:
        """Classify the target of `request`."""
        decoded = percent_decode(request.path)
        path = self.root + decoded

        # os.stat() and friends reject embedded NULs outright
        if "\x00" in decoded:
            return ResolvedPath(ResourceKind.MISSING, path)

        if not self._inside_root(path):
            logger.warning(f"Path traversal attempt: {request.path}")
            return ResolvedPath(ResourceKind.FORBIDDEN, path)

        if not os.path.exists(path):
            return ResolvedPath(ResourceKind.MISSING, path)

        if os.path.isdir(path):
            # Compare against the path as sent, not the decoded one
            if not request.path.endswith("/"):
                return ResolvedPath(
                    ResourceKind.DIRECTORY_NEEDS_SLASH,
                    path,
                    location=request.path + "/",
                )

            index = self.find_index(path)
            if index is None:
                return ResolvedPath(ResourceKind.DIRECTORY_LISTABLE, path)

            return ResolvedPath(
                ResourceKind.DIRECTORY_HAS_INDEX,
                index,
                mime_type=lookup(index),
            )

        mime_type = lookup(path)
        if mime_type is None:
            return ResolvedPath(ResourceKind.UNSUPPORTED_TYPE, path)

        return ResolvedPath(ResourceKind.FILE, path, mime_type=mime_type)

    @staticmethod
    def find_index(directory: str) -> Optional[str]:
        """First of index.php, index.html that exists in `directory`."""
        for name in INDEX_FILES:
            candidate = os.path.join(directory, name)
            if os.path.exists(candidate):
                return candidate
        return None

    def _inside_root(self, path: str) -> bool:
        real = os.path.realpath(path)
        return real == self.root or real.startswith(self.root.rstrip(os.sep) + os.sep)
