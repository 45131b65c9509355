"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    StaticFiles -- Serve files (and their precompressed siblings) from a directory
"""

from sluice.middleware.protocol import AnyResponse, Middleware, Next
from sluice.middleware.static import StaticFiles

__all__ = [
    "AnyResponse",
    "Middleware",
    "Next",
    "StaticFiles",
]
