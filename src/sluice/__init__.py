"""Sluice: static asset resolution for ASGI stacks.

Serves files from a directory in front of another ASGI application:
exact paths, extensionless paths (``/about`` -> ``about.html``),
directory indexes, and precompressed ``.br`` / ``.gz`` siblings for
clients that accept them. Everything else is passed through untouched.

Basic usage::

    from sluice import Static

    application = Static(app, "public", headers={"Cache-Control": "public, max-age=3600"})

As middleware in a ``(request, next)`` pipeline::

    from sluice import StaticFiles

    static = StaticFiles("public")
    response = await static(request, next)
"""

__version__ = "0.1.0"
__all__ = [
    "AnyResponse",
    "ConfigurationError",
    "FileServer",
    "Middleware",
    "Next",
    "Request",
    "Resolver",
    "Response",
    "SluiceError",
    "Static",
    "StaticConfig",
    "StaticFiles",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "AnyResponse": ("sluice.middleware.protocol", "AnyResponse"),
    "ConfigurationError": ("sluice.errors", "ConfigurationError"),
    "FileServer": ("sluice.static.file_server", "FileServer"),
    "Middleware": ("sluice.middleware.protocol", "Middleware"),
    "Next": ("sluice.middleware.protocol", "Next"),
    "Request": ("sluice.http.request", "Request"),
    "Resolver": ("sluice.static.resolver", "Resolver"),
    "Response": ("sluice.http.response", "Response"),
    "SluiceError": ("sluice.errors", "SluiceError"),
    "Static": ("sluice.app", "Static"),
    "StaticConfig": ("sluice.config", "StaticConfig"),
    "StaticFiles": ("sluice.middleware.static", "StaticFiles"),
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import sluice`` fast while providing a clean top-level API.
    """
    target = _LAZY_IMPORTS.get(name)
    if target is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    import importlib

    module_name, attr = target
    return getattr(importlib.import_module(module_name), attr)
