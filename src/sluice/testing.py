"""Async test client for ASGI applications.

Sends requests through the ASGI interface directly (no HTTP involved)
and returns the same ``Response`` type used in production.
"""

from typing import Any

from sluice._internal.asgi import ASGIApp
from sluice.http.response import Response


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for ASGI applications.

    Usage::

        async with TestClient(Static(app, "public")) as client:
            response = await client.get("/app.js", headers={"Accept-Encoding": "br"})
            assert response.header("content-encoding") == "br"
    """

    __slots__ = ("app",)

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __aenter__(self) -> "TestClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def get(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
    ) -> Response:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def head(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
    ) -> Response:
        """Send a HEAD request."""
        return await self.request("HEAD", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send a POST request."""
        return await self.request("POST", path, headers=headers, body=body)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app.

        *path* goes on the wire as written: percent-escapes are kept in
        ``raw_path`` and decoded only in ``path``, as ASGI servers do.
        """
        from urllib.parse import unquote

        # Split path and query string
        if "?" in path:
            path_part, query_string = path.split("?", 1)
        else:
            path_part = path
            query_string = ""

        # Build raw ASGI headers
        raw_headers: list[tuple[bytes, bytes]] = []
        for name, value in (headers or {}).items():
            raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

        # Build ASGI scope
        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": unquote(path_part, errors="replace"),
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        # Build receive callable
        request_body = body or b""
        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            # After body is sent, wait for disconnect (simplified)
            return {"type": "http.disconnect"}

        # Capture response via send
        response_status = 200
        response_headers: list[tuple[bytes, bytes]] = []
        response_body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal response_status, response_headers
            if message["type"] == "http.response.start":
                response_status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                response_body_parts.append(message.get("body", b""))

        # Call the ASGI app
        await self.app(scope, receive, send)

        # Extract content-type from headers
        content_type = "text/plain"
        extra_headers: list[tuple[str, str]] = []
        for name_b, value_b in response_headers:
            name_str = name_b.decode("latin-1")
            value_str = value_b.decode("latin-1")
            if name_str == "content-type":
                content_type = value_str
            else:
                extra_headers.append((name_str, value_str))

        return Response(
            body=b"".join(response_body_parts),
            status=response_status,
            content_type=content_type,
            headers=tuple(extra_headers),
        )
