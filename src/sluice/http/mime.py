"""MIME type lookup by file extension.

Backed by a private ``mimetypes.MimeTypes`` table (the interpreter's
built-in defaults, not the host's /etc/mime.types) plus a few pinned
entries, so a given extension maps to the same type everywhere.
"""

import mimetypes
import posixpath

DEFAULT_TYPE = "text/plain"

_PINNED = {
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".gz": "application/gzip",
    ".br": "application/x-brotli",
    ".wasm": "application/wasm",
    ".webmanifest": "application/manifest+json",
}

_table = mimetypes.MimeTypes()
for _ext, _type in _PINNED.items():
    _table.add_type(_type, _ext)


def mime_type(ext: str, fallback: str = DEFAULT_TYPE) -> str:
    """Content type for *ext* (``".css"``), or *fallback* when unknown."""
    ext = ext.lower()
    loose, strict = _table.types_map
    return strict.get(ext) or loose.get(ext) or fallback


def mime_type_for(path: str, fallback: str = DEFAULT_TYPE) -> str:
    """Content type for the extension of *path*."""
    return mime_type(posixpath.splitext(path)[1], fallback)
