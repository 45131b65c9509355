"""Immutable HTTP request.

Frozen metadata only: a static handler never reads the body. The path is
kept exactly as the client sent it (percent-encoded); decoding and
normalization belong to the resolver, which treats it as untrusted.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import quote, quote_from_bytes

from sluice.http.headers import Headers

# Characters left as-is when re-quoting a raw path. "%" keeps existing
# escapes intact so the resolver decodes exactly once.
_PATH_SAFE = "/%!$&'()*+,;=:@~"


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Handlers that need a different path derive a new request with
    ``with_path()``; the original is never modified.
    """

    method: str
    path: str
    headers: Headers
    query_string: bytes = b""
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # -- Computed properties --

    @property
    def accept_encoding(self) -> list[tuple[str, float]]:
        """``Accept-Encoding`` as ``(coding, quality)`` pairs, in header order."""
        return parse_quality_values(self.headers.get("accept-encoding", ""))

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string.decode('latin-1')}"
        return self.path

    # -- Derivation --

    def with_path(self, path: str) -> Request:
        """Return a copy of this request addressed to *path*."""
        return replace(self, path=path)

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any]) -> Request:
        """Create a Request from an ASGI HTTP scope.

        Prefers ``raw_path`` (undecoded bytes). Servers that omit it get
        ``path`` re-quoted so ``Request.path`` is always percent-encoded.
        """
        raw_path = scope.get("raw_path")
        if raw_path:
            path = quote_from_bytes(raw_path.split(b"?", 1)[0], safe=_PATH_SAFE)
        else:
            path = quote(scope.get("path", "/"), safe="/")
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=path,
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
        )


def parse_quality_values(value: str) -> list[tuple[str, float]]:
    """Parse a comma-separated header with optional ``;q=`` weights.

    ``"br, gzip;q=0.5"`` -> ``[("br", 1.0), ("gzip", 0.5)]``. A weight
    that is not a number reads as ``0.0``; the entry is still listed.
    """
    result: list[tuple[str, float]] = []
    for part in value.split(","):
        coding, _, params = part.partition(";")
        coding = coding.strip()
        if not coding:
            continue
        quality = 1.0
        for param in params.split(";"):
            key, _, raw = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    quality = float(raw.strip())
                except ValueError:
                    quality = 0.0
        result.append((coding, quality))
    return result
