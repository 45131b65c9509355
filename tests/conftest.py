"""Shared fixtures: an on-disk site and a recording downstream app."""

from typing import Any

import pytest


@pytest.fixture
def public(tmp_path):
    """A static root with originals, precompressed siblings, and indexes."""
    root = tmp_path / "public"
    root.mkdir()

    (root / "index.html").write_text("<h1>Home</h1>")
    (root / "about.html").write_text("<h1>About</h1>")
    (root / "page.html").write_text("<h1>Page</h1>")
    (root / "page.html.gz").write_bytes(b"GZ-PAGE")

    # Script with both siblings, stylesheet with gzip only
    (root / "app.js").write_text("console.log('hello');")
    (root / "app.js.br").write_bytes(b"BR-APP")
    (root / "app.js.gz").write_bytes(b"GZ-APP")
    (root / "style.css").write_text("body { color: red; }")
    (root / "style.css.gz").write_bytes(b"GZ-STYLE")
    (root / "plain.js").write_text("var plain = true;")

    # Binary asset that happens to have a brotli sibling
    (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (root / "logo.png.br").write_bytes(b"BR-LOGO")

    (root / "with space.txt").write_text("spaced")

    docs = root / "docs"
    docs.mkdir()
    (docs / "index.html").write_text("<h1>Docs</h1>")
    (docs / "guide.html").write_text("<h1>Guide</h1>")

    (root / "empty").mkdir()

    # Outside the root: must never be reachable
    (tmp_path / "secret.txt").write_text("top secret")
    (tmp_path / "secret.html").write_text("top secret")

    return root


class Downstream:
    """ASGI app that records the scopes it receives and answers 404."""

    def __init__(self) -> None:
        self.scopes: list[dict[str, Any]] = []

    async def __call__(self, scope, receive, send) -> None:
        self.scopes.append(scope)
        if scope["type"] != "http":
            return
        body = f"downstream {scope['method']} {scope['raw_path'].decode('latin-1')}"
        await send(
            {
                "type": "http.response.start",
                "status": 404,
                "headers": [(b"content-type", b"text/plain"), (b"x-downstream", b"yes")],
            }
        )
        await send({"type": "http.response.body", "body": body.encode("latin-1")})


@pytest.fixture
def downstream() -> Downstream:
    return Downstream()
