"""
=============================================================================
DIRECTORY LISTING
=============================================================================

Renders an HTML index for a directory that has no index.php/index.html.

    <html><head><title>/docs/</title></head><body><h1>/docs/</h1><ul>
    <li><a href="..">..</a></li>
    <li><a href="a.html">a.html</a></li>
    <li><a href="notes &amp; todo.html">notes &amp; todo.html</a></li>
    </ul></body></html>

(Shown wrapped; the real page has no newlines.)

- Entries are sorted by name.
- "." is left out; ".." is listed like any other entry, so the user can
  always navigate up.
- Every name is HTML-escaped before it goes into both the href and the
  link text. So is the title, which is the path relative to the root.

=============================================================================
SECURITY NOTE
=============================================================================

Links are relative ("a.html", not "/docs/a.html"). That only works
because directory URLs always end in "/": the resolver redirects
"/docs" to "/docs/" before a listing is ever produced.

=============================================================================
"""

import logging
import os
from typing import List

from ..http.encoding import html_escape
from ..http.response import HTTPResponse, ok, forbidden, internal_error


logger = logging.getLogger(__name__)

PAGE_TEMPLATE = (
    "<html><head><title>{title}</title></head>"
    "<body><h1>{title}</h1><ul>{items}</ul></body></html>"
)
ITEM_TEMPLATE = '<li><a href="{name}">{name}</a></li>'


class DirectoryLister:
    """
    Lists directories under a fixed server root.

    Usage:
        lister = DirectoryLister("/var/www")
        response = lister.handle("/var/www/docs/")
    """

    def __init__(self, root: str):
        self.root = root

    def handle(self, path: str) -> HTTPResponse:
        """Build the listing response for the directory at `path`."""
        if not os.access(path, os.R_OK | os.X_OK):
            return forbidden()

        try:
            names = self.entries(path)
        except PermissionError:
            return forbidden()
        except OSError as e:
            logger.error(f"Error listing directory {path}: {e}")
            return internal_error()

        return ok(self.render(path, names), "text/html")

    @staticmethod
    def entries(path: str) -> List[str]:
        """
        Names to list for `path`, sorted, with ".." and without ".".

        os.listdir() never reports "." or ".."; the parent entry is
        added back explicitly.
        """
        return sorted([".."] + os.listdir(path))

    def render(self, path: str, names: List[str]) -> str:
        """HTML page for `names`, titled with `path` relative to the root."""
        relative = path[len(self.root):]
        items = "".join(
            ITEM_TEMPLATE.format(name=html_escape(name)) for name in names
        )
        return PAGE_TEMPLATE.format(title=html_escape(relative), items=items)
