"""Response cache entry entity."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cached REST response.

    Represents the parsed JSON payload of a successful GET response along
    with the headers it was sent with and the timer value at capture.
    """

    payload: Any
    captured_at: float
    headers: Mapping[str, str] = field(default_factory=dict)

    def age(self, now: float) -> float:
        """Return the entry age in seconds.

        Args:
            now: Current timer value.

        Returns:
            Seconds elapsed since capture, never negative.
        """
        return max(0.0, now - self.captured_at)

    @classmethod
    def create(
        cls,
        payload: Any,
        captured_at: float,
        headers: Mapping[str, str] | None = None,
    ) -> "CacheEntry":
        """Factory method to create a new cache entry.

        Args:
            payload: The parsed response body.
            captured_at: Timer value at capture.
            headers: Response headers to replay on a hit.

        Returns:
            A new CacheEntry instance.
        """
        return cls(payload=payload, captured_at=captured_at, headers=dict(headers or {}))
