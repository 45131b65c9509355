"""Tests for static file serving: the StaticFiles middleware and Static app."""

import pytest

from sluice.app import Static
from sluice.config import StaticConfig
from sluice.http.headers import Headers
from sluice.http.request import Request
from sluice.http.response import Response
from sluice.middleware.static import StaticFiles
from sluice.testing import TestClient


def _request(path: str, *, method: str = "GET", **headers: str) -> Request:
    pairs = {name.replace("_", "-"): value for name, value in headers.items()}
    return Request(method=method, path=path, headers=Headers.from_pairs(pairs))


class Fallback:
    """A ``next`` that records what reached it."""

    def __init__(self) -> None:
        self.requests: list[Request] = []

    async def __call__(self, request: Request) -> Response:
        self.requests.append(request)
        return Response(body="fallback", status=404)


# ------------------------------------------------------------------
# Middleware: resolution and fallthrough
# ------------------------------------------------------------------


class TestStaticFileServing:
    async def test_serves_exact_file(self, public) -> None:
        response = await StaticFiles(public)(_request("/about.html"), Fallback())
        assert response.status == 200
        assert response.text == "<h1>About</h1>"
        assert response.content_type == "text/html"

    async def test_serves_with_default_extension(self, public) -> None:
        response = await StaticFiles(public)(_request("/about"), Fallback())
        assert response.text == "<h1>About</h1>"

    async def test_serves_directory_index(self, public) -> None:
        response = await StaticFiles(public)(_request("/docs"), Fallback())
        assert response.text == "<h1>Docs</h1>"

    async def test_trailing_slash_is_stripped(self, public) -> None:
        static = StaticFiles(public)
        assert (await static(_request("/docs/"), Fallback())).text == "<h1>Docs</h1>"
        assert (await static(_request("/about/"), Fallback())).text == "<h1>About</h1>"

    async def test_root_serves_index(self, public) -> None:
        response = await StaticFiles(public)(_request("/"), Fallback())
        assert response.text == "<h1>Home</h1>"

    async def test_head(self, public) -> None:
        response = await StaticFiles(public)(_request("/about.html", method="HEAD"), Fallback())
        assert response.status == 200
        assert response.body_bytes == b""
        assert response.header("content-length") == str(len("<h1>About</h1>"))

    async def test_configured_headers(self, public) -> None:
        static = StaticFiles(public, headers={"Cache-Control": "public, max-age=3600"})
        response = await static(_request("/about"), Fallback())
        assert response.header("cache-control") == "public, max-age=3600"

    async def test_custom_index(self, public) -> None:
        (public / "docs" / "home.htm").write_text("<h1>Docs home</h1>")
        static = StaticFiles(
            public, index="home", config=StaticConfig(default_extension=".htm")
        )
        response = await static(_request("/docs/"), Fallback())
        assert response.text == "<h1>Docs home</h1>"


class TestStaticFileFallthrough:
    async def test_missing_file_falls_through(self, public) -> None:
        fallback = Fallback()
        request = _request("/missing/")
        response = await StaticFiles(public)(request, fallback)

        assert response.text == "fallback"
        # Downstream sees the request exactly as it arrived
        assert fallback.requests == [request]
        assert fallback.requests[0].path == "/missing/"

    async def test_directory_without_index_falls_through(self, public) -> None:
        fallback = Fallback()
        await StaticFiles(public)(_request("/empty/"), fallback)
        assert len(fallback.requests) == 1

    @pytest.mark.parametrize("path", ["/../secret.txt", "/%2e%2e/secret", "/..%5csecret.txt"])
    async def test_traversal_falls_through(self, public, path: str) -> None:
        response = await StaticFiles(public)(_request(path), Fallback())
        assert response.text == "fallback"

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "OPTIONS", "PATCH"])
    async def test_other_methods_skip_the_filesystem(self, public, method: str) -> None:
        class NoFilesystem:
            async def match(self, path: str) -> str | None:
                raise AssertionError("filesystem consulted")

        static = StaticFiles(public)
        static._resolver = NoFilesystem()  # type: ignore[assignment]
        fallback = Fallback()

        response = await static(_request("/about.html", method=method), fallback)

        assert response.text == "fallback"
        assert fallback.requests[0].method == method


# ------------------------------------------------------------------
# Middleware: precompressed variants
# ------------------------------------------------------------------


class TestCompressedAssets:
    async def test_brotli(self, public) -> None:
        response = await StaticFiles(public)(
            _request("/app.js", accept_encoding="br, gzip"), Fallback()
        )
        assert response.body_bytes == b"BR-APP"
        assert response.header("content-encoding") == "br"
        assert response.content_type == "application/javascript"
        assert response.header("vary") == "Accept-Encoding"

    async def test_gzip(self, public) -> None:
        response = await StaticFiles(public)(
            _request("/app.js", accept_encoding="gzip"), Fallback()
        )
        assert response.body_bytes == b"GZ-APP"
        assert response.header("content-encoding") == "gzip"
        assert response.content_type == "application/javascript"
        assert response.header("vary") == "Accept-Encoding"

    async def test_no_acceptable_encoding(self, public) -> None:
        response = await StaticFiles(public)(
            _request("/app.js", accept_encoding="deflate"), Fallback()
        )
        assert response.text == "console.log('hello');"
        assert response.header("content-encoding") is None
        assert response.content_type == "application/javascript"
        assert response.header("vary") == "Accept-Encoding"

    async def test_gzip_only_sibling(self, public) -> None:
        response = await StaticFiles(public)(
            _request("/style.css", accept_encoding="br, gzip"), Fallback()
        )
        assert response.body_bytes == b"GZ-STYLE"
        assert response.header("content-encoding") == "gzip"
        assert response.content_type == "text/css"

    async def test_no_siblings_no_vary(self, public) -> None:
        response = await StaticFiles(public)(
            _request("/plain.js", accept_encoding="br, gzip"), Fallback()
        )
        assert response.text == "var plain = true;"
        assert response.header("vary") is None
        assert response.header("content-encoding") is None

    async def test_binary_never_negotiated(self, public) -> None:
        response = await StaticFiles(public)(
            _request("/logo.png", accept_encoding="br"), Fallback()
        )
        assert response.body_bytes == b"\x89PNG\r\n\x1a\n"
        assert response.content_type == "image/png"
        assert response.header("content-encoding") is None
        assert response.header("vary") == "Accept-Encoding"

    async def test_siblings_follow_requested_path(self, public) -> None:
        """Siblings sit next to the path the client asked for, not the expanded file."""
        static = StaticFiles(public)

        expanded = await static(_request("/page", accept_encoding="gzip"), Fallback())
        assert expanded.text == "<h1>Page</h1>"
        assert expanded.header("content-encoding") is None

        literal = await static(_request("/page.html", accept_encoding="gzip"), Fallback())
        assert literal.body_bytes == b"GZ-PAGE"
        assert literal.header("content-encoding") == "gzip"

    async def test_not_modified_passes_through(self, public) -> None:
        static = StaticFiles(public)
        first = await static(_request("/app.js", accept_encoding="br"), Fallback())

        response = await static(
            _request("/app.js", accept_encoding="br", if_none_match=first.header("etag")),
            Fallback(),
        )

        assert response.status == 304
        assert response.header("content-encoding") is None
        assert response.header("vary") is None
        assert response.content_type == "application/x-brotli"

    async def test_escaped_binary_path_never_negotiated(self, public) -> None:
        response = await StaticFiles(public)(
            _request("/logo%2Epng", accept_encoding="br"), Fallback()
        )
        assert response.body_bytes == b"\x89PNG\r\n\x1a\n"
        assert response.content_type == "image/png"
        assert response.header("content-encoding") is None

    async def test_escaped_path_keeps_content_type(self, public) -> None:
        response = await StaticFiles(public)(
            _request("/app%2Ejs", accept_encoding="br"), Fallback()
        )
        assert response.body_bytes == b"BR-APP"
        assert response.header("content-encoding") == "br"
        assert response.content_type == "application/javascript"

    async def test_header_values_replaced_not_duplicated(self, public) -> None:
        static = StaticFiles(public, headers={"Vary": "Origin"})
        response = await static(_request("/app.js", accept_encoding="gzip"), Fallback())
        assert [v for k, v in response.headers if k.lower() == "vary"] == ["Accept-Encoding"]


class TestRequestUnchanged:
    async def test_matched_request_untouched(self, public) -> None:
        request = _request("/docs/", accept_encoding="br")
        await StaticFiles(public)(request, Fallback())
        assert request.path == "/docs/"

    async def test_request_untouched_when_file_server_fails(self, public) -> None:
        async def broken(request: Request) -> Response:
            raise OSError("disk on fire")

        static = StaticFiles(public)
        static._file_server = broken  # type: ignore[assignment]
        request = _request("/app.js", accept_encoding="br")

        with pytest.raises(OSError, match="disk on fire"):
            await static(request, Fallback())
        assert request.path == "/app.js"


# ------------------------------------------------------------------
# ASGI application
# ------------------------------------------------------------------


class TestStaticApp:
    async def test_serves_file(self, public, downstream) -> None:
        async with TestClient(Static(downstream, public)) as client:
            response = await client.get("/app.js", headers={"Accept-Encoding": "br"})

        assert response.status == 200
        assert response.body_bytes == b"BR-APP"
        assert response.content_type == "application/javascript"
        assert response.header("content-encoding") == "br"
        assert response.header("vary") == "Accept-Encoding"
        assert response.header("content-length") == "6"
        assert downstream.scopes == []

    async def test_head_keeps_content_length(self, public, downstream) -> None:
        async with TestClient(Static(downstream, public)) as client:
            response = await client.head("/about")

        assert response.status == 200
        assert response.body_bytes == b""
        assert response.header("content-length") == str(len("<h1>About</h1>"))

    async def test_escaped_path(self, public, downstream) -> None:
        async with TestClient(Static(downstream, public)) as client:
            response = await client.get("/with%20space.txt")
        assert response.text == "spaced"

    async def test_miss_reaches_downstream_untouched(self, public, downstream) -> None:
        async with TestClient(Static(downstream, public)) as client:
            response = await client.get("/api/items/?page=2")

        assert response.status == 404
        assert response.text == "downstream GET /api/items/"
        assert response.header("x-downstream") == "yes"
        assert downstream.scopes[0]["query_string"] == b"page=2"

    async def test_post_reaches_downstream(self, public, downstream) -> None:
        async with TestClient(Static(downstream, public)) as client:
            response = await client.post("/about.html", body=b"x")
        assert response.text == "downstream POST /about.html"

    async def test_traversal_reaches_downstream(self, public, downstream) -> None:
        async with TestClient(Static(downstream, public)) as client:
            response = await client.get("/%2e%2e/secret.txt")
        assert response.text == "downstream GET /%2e%2e/secret.txt"

    async def test_range_through_app(self, public, downstream) -> None:
        async with TestClient(Static(downstream, public)) as client:
            response = await client.get("/about.html", headers={"Range": "bytes=0-3"})
        assert response.status == 206
        assert response.text == "<h1>"

    async def test_not_modified_through_app(self, public, downstream) -> None:
        async with TestClient(Static(downstream, public)) as client:
            first = await client.get("/about.html")
            response = await client.get(
                "/about.html", headers={"If-None-Match": first.header("etag")}
            )
        assert response.status == 304
        assert response.body_bytes == b""
        assert response.header("content-length") is None

    async def test_non_http_scope_passes_through(self, public, downstream) -> None:
        app = Static(downstream, public)

        async def receive() -> dict:
            return {"type": "lifespan.startup"}

        async def send(message: dict) -> None:
            pass

        await app({"type": "lifespan"}, receive, send)
        assert downstream.scopes == [{"type": "lifespan"}]
