"""
=============================================================================
HANDLERS PACKAGE
=============================================================================

The resource side of the pipeline: where a request points, and how each
kind of target is answered.

    resolver.py     request path ──► ResolvedPath (classification)
    static.py       regular files, read whole and sent as-is
    listing.py      HTML index of a directory
    script.py       .php files run through the CGI interpreter
    dispatcher.py   picks one of the above for a ResolvedPath

=============================================================================
"""

from .resolver import ResourceResolver, ResolvedPath, ResourceKind, INDEX_FILES
from .static import StaticFileHandler
from .listing import DirectoryLister
from .script import ScriptRunner, ScriptOutput, ScriptError
from .dispatcher import RequestDispatcher

__all__ = [
    "ResourceResolver",
    "ResolvedPath",
    "ResourceKind",
    "INDEX_FILES",
    "StaticFileHandler",
    "DirectoryLister",
    "ScriptRunner",
    "ScriptOutput",
    "ScriptError",
    "RequestDispatcher",
]
