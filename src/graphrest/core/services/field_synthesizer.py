"""Field selection synthesizer.

Builds a GraphQL selection set for an arbitrary schema type by walking
introspected type shapes. The walk is bounded by a caller-supplied depth
and guarded against cycles along the current path, since content schemas
are graphs (a page references a component that references pages).
"""

import logging

from graphrest.core.entities.query_spec import ExpandMode
from graphrest.core.entities.type_shape import FieldDescriptor, TypeShape
from graphrest.core.services.introspection import SchemaIntrospectionCache

logger = logging.getLogger(__name__)

MINIMAL_FIELDS: tuple[str, ...] = ("_id", "__typename")
MINIMAL_SELECTION = "\n".join(MINIMAL_FIELDS)

FULLTEXT_FIELD = "_fulltext"
INDENT = "  "


def indent_selection(selection: str, prefix: str = INDENT) -> str:
    """Indent every line of a selection set."""
    return "\n".join(f"{prefix}{line}" for line in selection.split("\n"))


class FieldSelectionSynthesizer:
    """Expands a schema type into a selection set using introspection."""

    def __init__(self, introspection: SchemaIntrospectionCache) -> None:
        """Initialize the synthesizer.

        Args:
            introspection: Source of type shapes.
        """
        self._introspection = introspection

    async def expand_fields(
        self,
        type_name: str,
        depth: int = 0,
        visited: frozenset[str] = frozenset(),
        mode: ExpandMode = ExpandMode.AUTO,
    ) -> str:
        """Build the selection set of a type.

        Scalar and enum fields and lists of them are always selected
        (``_fulltext`` only outside AUTO mode). Object fields are expanded
        recursively while ``depth`` is positive. Polymorphic fields are
        left to explicit fragments.

        Depth must already be within 0-3; no clamping happens here.

        Args:
            type_name: The schema type to expand.
            depth: Remaining object nesting levels.
            visited: Types on the path from the root to this type.
            mode: The expansion mode.

        Returns:
            Newline separated selection lines. ``_id`` and ``__typename``
            when the type is already on the path or cannot be introspected.
        """
        if type_name in visited:
            logger.debug(
                "Circular reference detected for %s, returning minimal fields",
                type_name,
            )
            return MINIMAL_SELECTION

        shape = await self._introspection.get_type_shape(type_name)
        if shape is None:
            return MINIMAL_SELECTION

        lines = self._leaf_fields(shape, mode)

        if depth > 0:
            path = visited | {type_name}
            for obj in shape.objects:
                block = await self._object_block(obj, depth - 1, path, mode)
                if block:
                    lines.append(block)

        if shape.interfaces:
            logger.debug(
                "Type %s has %d interface/union fields - these require explicit fragments",
                type_name,
                len(shape.interfaces),
            )

        return "\n".join(lines)

    def _leaf_fields(self, shape: TypeShape, mode: ExpandMode) -> list[str]:
        skip_fulltext = mode == ExpandMode.AUTO
        lines: list[str] = []

        for scalar in shape.scalars:
            if skip_fulltext and scalar.name == FULLTEXT_FIELD:
                continue
            lines.append(scalar.name)

        for list_field in shape.lists:
            of_kind = list_field.of_kind
            if of_kind is not None and of_kind.is_leaf:
                if skip_fulltext and list_field.name == FULLTEXT_FIELD:
                    continue
                lines.append(list_field.name)
            elif of_kind is not None and of_kind.is_polymorphic:
                logger.debug(
                    "Skipping polymorphic list field %s - requires fragments",
                    list_field.name,
                )

        return lines

    async def _object_block(
        self,
        obj: FieldDescriptor,
        depth: int,
        path: frozenset[str],
        mode: ExpandMode,
    ) -> str | None:
        if not obj.type_name:
            return None

        nested = await self.expand_fields(obj.type_name, depth, path, mode)
        if not nested.strip():
            logger.debug(
                "Skipping object field %s (%s) - no accessible fields",
                obj.name,
                obj.type_name,
            )
            return None

        return f"{obj.name} {{\n{indent_selection(nested)}\n}}"
