"""Sluice exception hierarchy.

Shared across the resolver, file server, and middleware so every module
raises and catches the same types.
"""


class SluiceError(Exception):
    """Base for all sluice-specific errors."""


class ConfigurationError(SluiceError):
    """Raised when static-file configuration is invalid.

    Typically raised from a constructor or ``__post_init__`` so a bad
    root, index name, or extension fails at startup, not per request.
    """
