"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status and headers. Each call returns a new ``Response``.

    ``Content-Type`` lives in ``content_type``, never in ``headers``.
    """

    body: str | bytes = b""
    status: int = 200
    content_type: str = "text/plain"
    headers: tuple[tuple[str, str], ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def with_header_set(self, name: str, value: str) -> Response:
        """Return a new Response where *name* has exactly one value."""
        lowered = name.lower()
        kept = tuple((k, v) for k, v in self.headers if k.lower() != lowered)
        return replace(self, headers=(*kept, (name, value)))

    def with_content_type(self, content_type: str) -> Response:
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    # -- Lookup --

    def header(self, name: str, default: str | None = None) -> str | None:
        """First value of header *name* (case-insensitive), or *default*."""
        lowered = name.lower()
        if lowered == "content-type":
            return self.content_type
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return default

    # -- Body helpers --

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


@dataclass(frozen=True, slots=True)
class Forwarded:
    """Sentinel response for a request handed to a downstream ASGI app.

    The downstream app already talked to ASGI ``send`` itself, so there
    is nothing left to transmit. Provides no-op ``.with_*()`` methods so
    middleware chains don't crash.
    """

    def with_status(self, status: int) -> Forwarded:  # noqa: ARG002
        """No-op: the downstream app chose its own status."""
        return self

    def with_header(self, name: str, value: str) -> Forwarded:  # noqa: ARG002
        """No-op: headers were already sent downstream."""
        return self

    def with_headers(self, headers: Mapping[str, str]) -> Forwarded:  # noqa: ARG002
        """No-op: headers were already sent downstream."""
        return self

    def with_header_set(self, name: str, value: str) -> Forwarded:  # noqa: ARG002
        """No-op: headers were already sent downstream."""
        return self

    def with_content_type(self, content_type: str) -> Forwarded:  # noqa: ARG002
        """No-op: headers were already sent downstream."""
        return self


FORWARDED = Forwarded()
