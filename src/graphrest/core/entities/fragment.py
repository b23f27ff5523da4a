"""Fragment definition entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FragmentDefinition:
    """A statically authored GraphQL fragment bound to one concrete type.

    Attributes:
        name: Registry name (e.g. ``"Hero"``).
        type_name: The type condition of the fragment.
        text: The full ``fragment X on T { ... }`` document text.
    """

    name: str
    type_name: str
    text: str
