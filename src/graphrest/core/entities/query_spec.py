"""Query intent entities."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

JSONValue = Union[str, int, float, bool, None, list[Any], dict[str, Any]]

# Fixed variable vocabulary, in declaration order
VARIABLE_NAMES: tuple[str, ...] = (
    "cursor",
    "ids",
    "limit",
    "locale",
    "orderBy",
    "skip",
    "track",
    "usePinned",
    "variation",
    "where",
)

MIN_DEPTH = 0
MAX_DEPTH = 3


class ExpandMode(Enum):
    """Auto-expansion mode.

    AUTO: expand fields but leave out ``_fulltext``.
    AUTO_WITH_FULLTEXT: expand fields including ``_fulltext``.
    FULL: expand every field.
    """

    AUTO = "auto"
    AUTO_WITH_FULLTEXT = "auto_with_fulltext"
    FULL = "full"

    @classmethod
    def parse(cls, value: "str | ExpandMode | None") -> "ExpandMode | None":
        """Parse an ``expand`` parameter, returning None when unrecognized."""
        if value is None or isinstance(value, ExpandMode):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Envelope(Enum):
    """Lookup shape wrapped around the field selection."""

    ITEMS = "items"
    ITEM = "item"


class SelectionStrategy(Enum):
    """Field-selection strategy, in priority order."""

    EXPLICIT = "explicit"
    AUTO_EXPAND = "auto_expand"
    FRAGMENTS = "fragments"
    DEFAULT = "default"


@dataclass(frozen=True)
class QuerySpec:
    """Assembled intent for one content query."""

    content_type: str
    variables: Mapping[str, JSONValue] = field(default_factory=dict)
    fields: tuple[str, ...] = ()
    fragments: tuple[str, ...] = ()
    expand: ExpandMode | None = None
    depth: int = 0
    envelope: Envelope = Envelope.ITEMS

    @property
    def variable_names(self) -> tuple[str, ...]:
        """Return the vocabulary variables present, in declaration order."""
        return tuple(
            name
            for name in VARIABLE_NAMES
            if self.variables.get(name) is not None
        )

    @property
    def strategy(self) -> SelectionStrategy:
        """Return the field-selection strategy this spec resolves to."""
        if self.fields:
            return SelectionStrategy.EXPLICIT
        if self.expand is not None:
            return SelectionStrategy.AUTO_EXPAND
        if self.fragments:
            return SelectionStrategy.FRAGMENTS
        return SelectionStrategy.DEFAULT
