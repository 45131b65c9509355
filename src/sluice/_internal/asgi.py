"""Raw ASGI type aliases.

Only ``sluice.app`` and ``sluice.server`` touch these; everything else
works with Request and Response.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

# Raw ASGI 3 types
Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]

# A downstream ASGI 3 application
ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]
