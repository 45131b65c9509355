"""Static-file configuration.

StaticConfig is a frozen dataclass: immutable after creation, shared
read-only across concurrent requests, no global lookups at request time.
"""

import re
from dataclasses import dataclass

from sluice.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class StaticConfig:
    """Settings shared by every static handler built from it.

    All fields have sensible defaults. Override what you need::

        config = StaticConfig(default_extension=".htm")
    """

    # Appended to extensionless request paths (``/about`` -> ``about.html``)
    # and to the index name (``/docs`` -> ``docs/index.html``).
    default_extension: str = ".html"

    # Only assets whose MIME type matches are served from .br/.gz siblings.
    compressible_types: str = r"\A(?:text/|application/javascript)"

    def __post_init__(self) -> None:
        ext = self.default_extension
        if ext and (not ext.startswith(".") or "/" in ext or "\\" in ext):
            msg = f"default_extension must start with '.' and name no directory: {ext!r}"
            raise ConfigurationError(msg)
        try:
            re.compile(self.compressible_types)
        except re.error as exc:
            msg = f"compressible_types is not a valid pattern: {exc}"
            raise ConfigurationError(msg) from exc
