"""Static file serving middleware.

Serves a file from the root directory when one satisfies the request
path, directly, with the default extension appended, or as a directory
index. Precompressed ``.br`` / ``.gz`` siblings are served to clients
that accept them.

Falls through to the next handler, with the request untouched, for
anything else.
"""

import logging
import os
from collections.abc import Mapping

from sluice.config import StaticConfig
from sluice.http.mime import mime_type_for
from sluice.http.request import Request
from sluice.http.response import Response
from sluice.middleware.protocol import AnyResponse, Next
from sluice.static.file_server import FileServer
from sluice.static.resolver import Resolver

logger = logging.getLogger("sluice.static")


class StaticFiles:
    """Middleware that serves static files from a directory.

    Only GET and HEAD are served; every other method, and every path
    with no matching file, goes to ``next`` unchanged.

    Security: request paths are decoded once, normalized so they can
    never climb above the root, and symlinks leading out of the root
    are refused.

    Usage::

        app.add_middleware(StaticFiles(
            "./public",
            headers={"Cache-Control": "public, max-age=3600"},
        ))

    With ``public/app.js`` and ``public/app.js.br`` on disk, a client
    sending ``Accept-Encoding: br`` receives the brotli bytes with
    ``Content-Encoding: br`` and ``Content-Type: application/javascript``.
    """

    __slots__ = ("_file_server", "_resolver")

    def __init__(
        self,
        root: str | os.PathLike[str],
        *,
        index: str = "index",
        headers: Mapping[str, str] | None = None,
        config: StaticConfig | None = None,
    ) -> None:
        self._resolver = Resolver(root, index=index, config=config)
        self._file_server = FileServer(self._resolver.root, headers)

    @property
    def resolver(self) -> Resolver:
        """The resolver deciding which paths are served."""
        return self._resolver

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        """Serve a static file or fall through."""
        # Only serve GET and HEAD
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        path = _strip_trailing_slash(request.path)
        match = await self._resolver.match(path)
        if match is None:
            return await next(request)

        return await self.serve(request.with_path(match), path)

    async def serve(self, request: Request, requested: str) -> Response:
        """Serve the resolved file in ``request.path``.

        *requested* is the path as the client asked for it, before the
        extension/index tiers expanded it. Precompressed siblings and the
        content type of a compressed response are taken from it.
        """
        variants = await self._resolver.compressed_variants(requested)
        asset = self._resolver.negotiate(variants, request)

        if asset is not None:
            response = await self._file_server(request.with_path(asset.path))
            if response.status == 304:
                return response
            response = response.with_header_set(
                "Content-Encoding", asset.encoding
            ).with_content_type(mime_type_for(variants.original))
        else:
            response = await self._file_server(request)

        if response.status == 404:
            logger.warning("Static asset %s disappeared before it was read", request.path)

        if variants:
            response = response.with_header_set("Vary", "Accept-Encoding")

        logger.debug(
            "Served %s as %s (%s)",
            requested,
            asset.path if asset else request.path,
            response.status,
        )
        return response


def _strip_trailing_slash(path: str) -> str:
    """Drop one trailing ``/``; the root path ``/`` stays as it is."""
    if len(path) > 1 and path.endswith("/"):
        return path[:-1]
    return path
