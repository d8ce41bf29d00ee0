"""
=============================================================================
REQUEST DISPATCHER
=============================================================================

Glue between the resolver and the handlers: a parsed request goes in,
exactly one HTTPResponse comes out.

    HTTPRequest
        │
        ▼
    ResourceResolver.resolve()
        │
        ├── FILE / DIRECTORY_HAS_INDEX ── text/x-php ──► ScriptRunner
        │                              └─ other ──────► StaticFileHandler
        ├── DIRECTORY_LISTABLE ────────────────────────► DirectoryLister
        ├── DIRECTORY_NEEDS_SLASH ─────────────────────► 301 redirect
        ├── MISSING ───────────────────────────────────► 404
        ├── UNSUPPORTED_TYPE ──────────────────────────► 501
        └── FORBIDDEN ─────────────────────────────────► 403

=============================================================================
"""

import logging

from ..config import ServerContext
from ..http.mime_types import is_script
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, redirect, error_response
from ..http.status_codes import HTTPStatus
from .listing import DirectoryLister
from .resolver import ResourceResolver, ResolvedPath, ResourceKind
from .script import ScriptRunner
from .static import StaticFileHandler


logger = logging.getLogger(__name__)

_ERROR_KINDS = {
    ResourceKind.MISSING: HTTPStatus.NOT_FOUND,
    ResourceKind.UNSUPPORTED_TYPE: HTTPStatus.NOT_IMPLEMENTED,
    ResourceKind.FORBIDDEN: HTTPStatus.FORBIDDEN,
}


class RequestDispatcher:
    """
    Routes a request to the handler its resolved path calls for.

    Usage:
        dispatcher = RequestDispatcher(context)
        resolved = dispatcher.resolve(request)
        response = dispatcher.dispatch(request, resolved)
    """

    def __init__(self, context: ServerContext):
        self.context = context
        self.resolver = ResourceResolver(context.root)
        self.static = StaticFileHandler()
        self.lister = DirectoryLister(context.root)
        self.scripts = ScriptRunner(context.interpreter, timeout=context.script_timeout)

    def resolve(self, request: HTTPRequest) -> ResolvedPath:
        resolved = self.resolver.resolve(request)
        logger.debug(f"{request.path} -> {resolved.kind.value} {resolved.path}")
        return resolved

    def dispatch(self, request: HTTPRequest, resolved: ResolvedPath) -> HTTPResponse:
        """Produce the response for an already-resolved request."""
        if resolved.kind in _ERROR_KINDS:
            return error_response(_ERROR_KINDS[resolved.kind])

        if resolved.kind is ResourceKind.DIRECTORY_NEEDS_SLASH:
            return redirect(resolved.location)

        if resolved.kind is ResourceKind.DIRECTORY_LISTABLE:
            return self.lister.handle(resolved.path)

        if is_script(resolved.mime_type):
            return self.scripts.handle(resolved.path, request)

        return self.static.handle(resolved.path, resolved.mime_type)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Resolve and dispatch in one step."""
        return self.dispatch(request, self.resolve(request))
