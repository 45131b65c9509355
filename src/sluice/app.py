"""ASGI application that serves static files in front of another app.

Wraps any ASGI 3 application. Requests for files that exist under the
root are answered here; everything else, including non-HTTP scopes, is
passed to the wrapped application with the original scope, receive, and
send untouched.
"""

import os
from collections.abc import Mapping

from sluice._internal.asgi import ASGIApp, Receive, Scope, Send
from sluice.config import StaticConfig
from sluice.http.request import Request
from sluice.http.response import FORWARDED, Forwarded
from sluice.middleware.protocol import AnyResponse
from sluice.middleware.static import StaticFiles
from sluice.server.sender import send_response


class Static:
    """Serve files from *root*, delegating misses to *app*.

    Usage::

        application = Static(api_app, "./public", headers={"Cache-Control": "no-cache"})

    Run ``application`` under any ASGI server.
    """

    __slots__ = ("_app", "_static")

    def __init__(
        self,
        app: ASGIApp,
        root: str | os.PathLike[str],
        *,
        index: str = "index",
        headers: Mapping[str, str] | None = None,
        config: StaticConfig | None = None,
    ) -> None:
        self._app = app
        self._static = StaticFiles(root, index=index, headers=headers, config=config)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self._app(scope, receive, send)
            return

        request = Request.from_asgi(scope)

        async def downstream(_request: Request) -> AnyResponse:
            await self._app(scope, receive, send)
            return FORWARDED

        response = await self._static(request, downstream)
        if isinstance(response, Forwarded):
            return
        await send_response(response, send)
