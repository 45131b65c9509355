"""File transfer: read one file under a root and build its response.

Handles what a plain file download needs and nothing more:
``Content-Length``, ``Last-Modified`` / ``ETag`` validators, conditional
requests (``If-None-Match``, ``If-Modified-Since`` -> 304), and single
byte ranges (206 / 416). HEAD gets the headers without the body.

Knows nothing about index files, default extensions, or compression;
the request path must already name the exact file.
"""

import logging
import os
from collections.abc import Mapping
from datetime import UTC
from email.utils import formatdate, parsedate_to_datetime
from pathlib import Path

import anyio

from sluice.errors import ConfigurationError
from sluice.http.headers import Headers
from sluice.http.mime import mime_type_for
from sluice.http.request import Request
from sluice.http.response import Response
from sluice.static.resolver import clean_path, file_stat, unescape_path

logger = logging.getLogger("sluice.static")

_DERIVED_HEADERS = frozenset({"content-type", "content-length"})


class FileServer:
    """Serve the file named by ``request.path`` from *root*.

    *headers* are added to every successful (200, 206, 304) response.
    ``Content-Type`` and ``Content-Length`` are derived from the file and
    may not be configured.

    Usage::

        server = FileServer("./public", {"Cache-Control": "public, max-age=3600"})
        response = await server(request)
    """

    __slots__ = ("_headers", "_root")

    def __init__(
        self,
        root: str | os.PathLike[str],
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._root = Path(root).resolve()
        self._headers: dict[str, str] = dict(headers or {})
        for name in self._headers:
            if name.lower() in _DERIVED_HEADERS:
                msg = f"{name} is set from the served file and cannot be configured"
                raise ConfigurationError(msg)

    async def __call__(self, request: Request) -> Response:
        """Build the response for the file at ``request.path``."""
        decoded = unescape_path(request.path)
        if decoded is None:
            return _not_found(request.path)
        cleaned = clean_path(decoded)
        target = self._root / cleaned.lstrip("/")
        info = await anyio.to_thread.run_sync(file_stat, target, self._root)
        if info is None:
            return _not_found(cleaned)

        content_type = mime_type_for(cleaned)
        etag = f'W/"{info.st_size:x}-{info.st_mtime_ns:x}"'
        validators = {
            "Last-Modified": formatdate(info.st_mtime, usegmt=True),
            "ETag": etag,
        }

        if not_modified(request.headers, etag, info.st_mtime):
            return (
                Response(status=304, content_type=content_type)
                .with_headers(validators)
                .with_headers(self._headers)
            )

        size = info.st_size
        start, length, status = 0, size, 200
        ranges = byte_ranges(request.headers.get("range"), size)
        if ranges is not None and len(ranges) == 1:
            first, last = ranges[0]
            start, length, status = first, last - first + 1, 206
        elif ranges == []:
            return Response(
                body="Byte range unsatisfiable\n",
                status=416,
                content_type="text/plain",
            ).with_header("Content-Range", f"bytes */{size}")

        body = b"" if request.method == "HEAD" else await _read(target, start, length)

        response = (
            Response(body=body, status=status, content_type=content_type)
            .with_headers(validators)
            .with_header("Accept-Ranges", "bytes")
            .with_header("Content-Length", str(length))
        )
        if status == 206:
            response = response.with_header(
                "Content-Range", f"bytes {start}-{start + length - 1}/{size}"
            )
        return response.with_headers(self._headers)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def not_modified(headers: Headers, etag: str, mtime: float) -> bool:
    """Whether the client's cached copy is still current.

    ``If-None-Match`` wins over ``If-Modified-Since`` when both are sent.
    Entity tags compare weakly (``W/`` prefixes ignored).
    """
    if_none_match = headers.get("if-none-match")
    if if_none_match is not None:
        tags = {tag.strip().removeprefix("W/") for tag in if_none_match.split(",")}
        return "*" in tags or etag.removeprefix("W/") in tags

    if_modified_since = headers.get("if-modified-since")
    if not if_modified_since:
        return False
    try:
        since = parsedate_to_datetime(if_modified_since)
    except (TypeError, ValueError):
        return False
    if since.tzinfo is None:
        since = since.replace(tzinfo=UTC)
    return int(mtime) <= since.timestamp()


def byte_ranges(header: str | None, size: int) -> list[tuple[int, int]] | None:
    """Parse a ``Range`` header into inclusive ``(first, last)`` pairs.

    Returns ``None`` when the header is absent or malformed (serve the
    whole file) and an empty list when no range overlaps the file (416).
    """
    if not header:
        return None
    unit, _, spec = header.partition("=")
    if unit.strip().lower() != "bytes" or not spec.strip():
        return None

    ranges: list[tuple[int, int]] = []
    for part in spec.split(","):
        first, sep, last = part.strip().partition("-")
        first, last = first.strip(), last.strip()
        if not sep:
            return None
        if not first:
            # Suffix range: the final N bytes
            if not last.isdigit():
                return None
            suffix = int(last)
            if suffix == 0:
                continue
            start, end = max(size - suffix, 0), size - 1
        else:
            if not first.isdigit() or (last and not last.isdigit()):
                return None
            start = int(first)
            if last:
                end = int(last)
                if end < start:
                    return None
                end = min(end, size - 1)
            else:
                end = size - 1
        if start < size:
            ranges.append((start, end))
    return ranges


async def _read(path: Path, start: int, length: int) -> bytes:
    async with await anyio.open_file(path, "rb") as handle:
        if start:
            await handle.seek(start)
        return await handle.read(length)


def _not_found(path: str) -> Response:
    logger.debug("File not found: %s", path)
    return Response(
        body=f"File not found: {path}\n",
        status=404,
        content_type="text/plain",
    ).with_header("X-Cascade", "pass")
