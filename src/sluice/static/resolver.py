"""Static asset resolution.

Turns an untrusted, percent-encoded request path into a safe path naming
a readable regular file under the root, and picks which encoding of that
file to serve.

Matching tries three tiers and stops at the first readable file::

    /app.js     -> /app.js            (exact)
    /about      -> /about.html        (default extension)
    /docs       -> /docs/index.html   (index file)

Precompressed siblings live next to the asset as ``<asset>.br`` and
``<asset>.gz``. They are looked up fresh on every request; the
filesystem is the only source of truth.
"""

from __future__ import annotations

import os
import re
import stat
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote, unquote_to_bytes

import anyio

from sluice.config import StaticConfig
from sluice.errors import ConfigurationError
from sluice.http.mime import mime_type_for
from sluice.http.request import Request

_SEPARATORS = re.compile(r"[/\\]")
_BROTLI = re.compile(r"\bbr\b", re.IGNORECASE)
_GZIP = re.compile(r"\bgzip\b", re.IGNORECASE)


# ------------------------------------------------------------------
# Path safety
# ------------------------------------------------------------------


def unescape_path(path: str) -> str | None:
    """Percent-decode *path*, or ``None`` if the result is not a legal path.

    Rejects bytes that are not UTF-8 and embedded NUL characters.
    """
    try:
        decoded = unquote_to_bytes(path).decode("utf-8")
    except UnicodeDecodeError:
        return None
    if "\x00" in decoded:
        return None
    return decoded


def clean_path(path: str) -> str:
    """Collapse *path* to a canonical absolute form that cannot climb above ``/``.

    Both ``/`` and ``\\`` separate segments. Empty and ``.`` segments are
    dropped; ``..`` removes the previous segment and is ignored at the top.
    """
    parts: list[str] = []
    for segment in _SEPARATORS.split(path):
        if not segment or segment == ".":
            continue
        if segment == "..":
            if parts:
                parts.pop()
            continue
        parts.append(segment)
    return "/" + "/".join(parts)


def escape_path(path: str) -> str:
    """Percent-encode a clean path for use as a request path."""
    return quote(path, safe="/")


def file_stat(path: Path, root: Path) -> os.stat_result | None:
    """Stat *path* if it is a readable regular file inside *root*.

    Every filesystem failure (missing, permission denied, a directory,
    a symlink leading out of *root*, a loop) reads as ``None``.
    Blocking; call through ``anyio.to_thread``.
    """
    try:
        resolved = path.resolve(strict=True)
        if not resolved.is_relative_to(root):
            return None
        result = resolved.stat()
        if not stat.S_ISREG(result.st_mode) or not os.access(resolved, os.R_OK):
            return None
    except (OSError, RuntimeError, ValueError):
        return None
    return result


# ------------------------------------------------------------------
# Negotiation results
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CompressedVariants:
    """Precompressed siblings found on disk for one requested path.

    ``original`` is the decoded, cleaned request path; the sibling paths
    are escaped and ready to use as request paths.

    Truthy when at least one sibling exists, which is what decides
    whether the response varies on ``Accept-Encoding``.
    """

    original: str
    br_path: str | None = None
    gz_path: str | None = None

    def __bool__(self) -> bool:
        return self.br_path is not None or self.gz_path is not None


@dataclass(frozen=True, slots=True)
class CompressedAsset:
    """The variant chosen for a request: an encoding label and its path."""

    encoding: str
    path: str


# ------------------------------------------------------------------
# Resolver
# ------------------------------------------------------------------


class Resolver:
    """Decides whether a request path names a servable file under *root*.

    Stateless after construction and safe to share between concurrent
    requests. Filesystem checks run in a worker thread; everything else
    is pure computation.
    """

    __slots__ = ("_compressible", "_config", "_index", "_root")

    def __init__(
        self,
        root: str | os.PathLike[str],
        *,
        index: str = "index",
        config: StaticConfig | None = None,
    ) -> None:
        if not index or _SEPARATORS.search(index) or index in (".", ".."):
            msg = f"index must be a bare file name, got {index!r}"
            raise ConfigurationError(msg)
        self._root = Path(root).resolve()
        if self._root.is_file():
            msg = f"Static root {self._root} is a file, not a directory"
            raise ConfigurationError(msg)
        self._index = index
        self._config = config or StaticConfig()
        self._compressible = re.compile(self._config.compressible_types)

    @property
    def root(self) -> Path:
        """The directory every resolved path lives under."""
        return self._root

    async def match(self, path: str) -> str | None:
        """Return the escaped path of the file serving *path*, or ``None``.

        *path* is the raw request path, still percent-encoded.
        """
        decoded = unescape_path(path)
        if decoded is None:
            return None
        cleaned = clean_path(decoded)
        for candidate in self._candidates(cleaned):
            if await self._readable(candidate):
                return escape_path(candidate)
        return None

    async def compressed_variants(self, path: str) -> CompressedVariants:
        """Look up ``.br`` and ``.gz`` siblings of *path* under the root.

        Siblings are checked against the decoded, cleaned path, not re-run
        through the matching tiers.
        """
        decoded = unescape_path(path)
        if decoded is None:
            return CompressedVariants(path)
        cleaned = clean_path(decoded)
        br_path = gz_path = None
        if await self._readable(cleaned + ".br"):
            br_path = escape_path(cleaned + ".br")
        if await self._readable(cleaned + ".gz"):
            gz_path = escape_path(cleaned + ".gz")
        return CompressedVariants(cleaned, br_path, gz_path)

    def negotiate(self, variants: CompressedVariants, request: Request) -> CompressedAsset | None:
        """Pick the variant to serve; ``None`` means serve the original.

        Brotli beats gzip beats the original. Quality values are not
        consulted: any listed coding counts as accepted, ``q=0`` included.
        """
        if not variants or not self.is_compressible(variants.original):
            return None
        codings = [coding for coding, _ in request.accept_encoding]
        if variants.br_path is not None and any(_BROTLI.search(c) for c in codings):
            return CompressedAsset("br", variants.br_path)
        if variants.gz_path is not None and any(_GZIP.search(c) for c in codings):
            return CompressedAsset("gzip", variants.gz_path)
        return None

    def is_compressible(self, path: str) -> bool:
        """Whether the MIME type of *path* may be served precompressed."""
        return self._compressible.match(mime_type_for(path)) is not None

    # -- Helpers --

    def _candidates(self, cleaned: str) -> list[str]:
        ext = self._config.default_extension
        candidates = [cleaned]
        if ext:
            candidates.append(cleaned + ext)
        candidates.append(f"{cleaned.rstrip('/')}/{self._index}{ext}")
        return candidates

    async def _readable(self, cleaned: str) -> bool:
        target = self._root / cleaned.lstrip("/")
        return await anyio.to_thread.run_sync(file_stat, target, self._root) is not None
