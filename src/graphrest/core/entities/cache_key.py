"""Response cache key value object."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheKey:
    """Immutable response cache key.

    The pair is used literally: query-string order and casing are part of
    the key, so reordered but equivalent URLs are distinct entries.
    """

    method: str
    url: str

    def __str__(self) -> str:
        """Return the key as ``METHOD:url``."""
        return f"{self.method}:{self.url}"
