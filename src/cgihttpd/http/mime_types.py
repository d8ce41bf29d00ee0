"""
=============================================================================
MIME TYPE TABLE
=============================================================================

Maps file extensions to Content-Type values.

Unlike a general-purpose file server, this table is deliberately closed:
an extension that is not listed is NOT served as application/octet-stream.
It is a terminal condition, answered with 501 Not Implemented.

The MIME type also drives dispatch:

    ┌──────────────┬─────────────────────┬─────────────────────────────────┐
    │  Extension   │  Content-Type       │  Handling                       │
    ├──────────────┼─────────────────────┼─────────────────────────────────┤
    │  .css        │  text/css           │  static transfer                │
    │  .html       │  text/html          │  static transfer                │
    │  .gif        │  image/gif          │  static transfer                │
    │  .ico        │  image/x-ico        │  static transfer                │
    │  .jpg        │  image/jpeg         │  static transfer                │
    │  .js         │  text/javascript    │  static transfer                │
    │  .php        │  text/x-php         │  handed to the interpreter      │
    │  .png        │  image/png          │  static transfer                │
    │  (other)     │  -                  │  501 Not Implemented            │
    └──────────────┴─────────────────────┴─────────────────────────────────┘

=============================================================================
"""

import os
from typing import Optional


MIME_TYPES = {
    ".css": "text/css",
    ".html": "text/html",
    ".gif": "image/gif",
    ".ico": "image/x-ico",
    ".jpg": "image/jpeg",
    ".js": "text/javascript",
    ".php": "text/x-php",
    ".png": "image/png",
}

# Files of this type are executed, not transferred
SCRIPT_MIME_TYPE = "text/x-php"


def lookup(path: str) -> Optional[str]:
    """
    Get the MIME type for a file path, or None if the extension is unknown.

    The comparison is case-insensitive, so "LOGO.PNG" is an image/png.
    Only the final path component is inspected: a dot in a directory
    name never counts as an extension. A leading dot does count, so a
    file named ".png" is an image/png.

    Examples:
        >>> lookup("/var/www/style.css")
        'text/css'

        >>> lookup("/var/www/IMAGE.JPG")
        'image/jpeg'

        >>> lookup("/var/www/notes.txt") is None
        True

        >>> lookup("/var/www/v1.2/README") is None
        True

        >>> lookup("/var/www/.png")
        'image/png'
    """
    name = os.path.basename(path)
    dot = name.rfind(".")
    if dot == -1:
        return None
    return MIME_TYPES.get(name[dot:].lower())


def is_script(mime_type: Optional[str]) -> bool:
    """Check whether a MIME type is handed to the script interpreter."""
    return mime_type is not None and mime_type.lower() == SCRIPT_MIME_TYPE
