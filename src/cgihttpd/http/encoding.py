"""
=============================================================================
URL DECODING AND HTML ESCAPING
=============================================================================

Two small text transforms used on the way in and on the way out:

    request path ──► percent_decode() ──► filesystem path
    directory entry ──► html_escape() ──► listing page

=============================================================================
PERCENT-DECODING
=============================================================================

    "%41%20B+C"
      │   │  │
      │   │  └── "+" ─────────► " "
      │   └───── "%20" ───────► " "
      └───────── "%41" ───────► "A"

    Result: "A B C"

The decoded octets are reassembled as UTF-8 with the "surrogateescape"
error handler. That is the same convention os.fsdecode() uses on POSIX,
so "%C3%A9" becomes "é" while a stray "%FF" still round-trips to the
byte 0xFF when the path reaches the filesystem.

=============================================================================
HTML ESCAPING
=============================================================================

    &  ──►  &amp;
    "  ──►  &quot;
    '  ──►  &#039;
    <  ──►  &lt;
    >  ──►  &gt;

html.escape() from the standard library emits &#x27; for the single
quote; the listing page uses the &#039; form, so the table is explicit.

Escaping is NOT idempotent: html_escape("&amp;") == "&amp;amp;".

=============================================================================
"""

import string


_HEX_DIGITS = frozenset(string.hexdigits.encode("ascii"))

_HTML_ENTITIES = str.maketrans({
    "&": "&amp;",
    '"': "&quot;",
    "'": "&#039;",
    "<": "&lt;",
    ">": "&gt;",
})


def percent_decode(value: str) -> str:
    """
    Decode %XY escapes and "+" in a URL path component.

    - "%XY" with two hex digits becomes the octet 0xXY
    - "+" becomes a space
    - everything else passes through unchanged

    A "%" that is not followed by two hex digits (including a trailing
    "%" or "%4" at the end of the input) is left as-is. The decoder never
    reads past the end of its input, and the output is never longer
    than the input.

    Examples:
        >>> percent_decode("%41%20B+C")
        'A B C'

        >>> percent_decode("/docs/100%")
        '/docs/100%'
    """
    raw = value.encode("utf-8", "surrogateescape")
    decoded = bytearray()

    i = 0
    n = len(raw)
    while i < n:
        octet = raw[i]
        if (
            octet == 0x25  # "%"
            and i + 2 < n
            and raw[i + 1] in _HEX_DIGITS
            and raw[i + 2] in _HEX_DIGITS
        ):
            decoded.append(int(raw[i + 1:i + 3], 16))
            i += 3
            continue

        if octet == 0x2B:  # "+"
            decoded.append(0x20)
        else:
            decoded.append(octet)
        i += 1

    return decoded.decode("utf-8", "surrogateescape")


def html_escape(text: str) -> str:
    """
    Replace &, ", ', < and > with their HTML entities.

    Examples:
        >>> html_escape("<a>&\\"'</a>")
        '&lt;a&gt;&amp;&quot;&#039;&lt;/a&gt;'
    """
    return text.translate(_HTML_ENTITIES)
