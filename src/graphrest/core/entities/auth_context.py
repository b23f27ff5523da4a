"""Authentication context entity."""

from dataclasses import dataclass
from typing import Literal

AuthMode = Literal["edit", "ext_preview", "public"]

AUTH_MODES: tuple[str, ...] = ("edit", "ext_preview", "public")


@dataclass(frozen=True)
class AuthContext:
    """How a request authenticates against the upstream content API.

    Attributes:
        mode: ``edit`` (preview token), ``ext_preview`` (basic auth with
            app key and secret) or ``public`` (single key).
        preview_token: Bearer token for ``edit`` mode.
        auth_method: Short label of how the mode was detected.
        use_stored_queries: Whether the upstream stored-query cache is used.
    """

    mode: AuthMode = "public"
    preview_token: str | None = None
    auth_method: str = "single-key"
    use_stored_queries: bool = False

    @classmethod
    def public(cls, use_stored_queries: bool = False) -> "AuthContext":
        """Create a public (single key) context."""
        return cls(mode="public", auth_method="single-key", use_stored_queries=use_stored_queries)
