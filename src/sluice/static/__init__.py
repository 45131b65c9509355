"""Static asset resolution and file transfer.

    Resolver -- safe matching of request paths to files, encoding negotiation
    FileServer -- reads a resolved file, handles validators and byte ranges
"""

from sluice.static.file_server import FileServer
from sluice.static.resolver import (
    CompressedAsset,
    CompressedVariants,
    Resolver,
    clean_path,
    escape_path,
    unescape_path,
)

__all__ = [
    "CompressedAsset",
    "CompressedVariants",
    "FileServer",
    "Resolver",
    "clean_path",
    "escape_path",
    "unescape_path",
]
