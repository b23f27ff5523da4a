"""Introspected schema type entities."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FieldKind(Enum):
    """Kind of the named type a schema field resolves to."""

    SCALAR = "SCALAR"
    OBJECT = "OBJECT"
    INTERFACE = "INTERFACE"
    UNION = "UNION"
    LIST = "LIST"
    ENUM = "ENUM"

    @classmethod
    def parse(cls, kind: str | None) -> "FieldKind | None":
        """Parse an introspection ``kind`` value.

        Args:
            kind: The raw kind string (e.g. ``"OBJECT"``).

        Returns:
            The matching FieldKind, or None for wrapper or unknown kinds.
        """
        if kind is None:
            return None
        try:
            return cls(kind)
        except ValueError:
            return None

    @property
    def is_leaf(self) -> bool:
        """Check if values of this kind need no sub-selection."""
        return self in (FieldKind.SCALAR, FieldKind.ENUM)

    @property
    def is_polymorphic(self) -> bool:
        """Check if values of this kind need type-conditional fragments."""
        return self in (FieldKind.INTERFACE, FieldKind.UNION)


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of an introspected schema type.

    Attributes:
        name: The field name.
        kind: Kind of the field type after stripping a NON_NULL wrapper.
        type_name: Name of that type (None for LIST).
        of_kind: Element kind for LIST fields, None if unresolved.
        of_type_name: Element type name for LIST fields.
    """

    name: str
    kind: FieldKind
    type_name: str | None = None
    of_kind: FieldKind | None = None
    of_type_name: str | None = None


def _strip_non_null(type_ref: dict[str, Any]) -> dict[str, Any]:
    # Only strips when the wrapped type was part of the introspected depth
    if type_ref.get("kind") == "NON_NULL" and type_ref.get("ofType"):
        return type_ref["ofType"]
    return type_ref


@dataclass(frozen=True)
class TypeShape:
    """Categorized field shape of one named schema type.

    Only ever built complete from an introspection payload; the
    introspection cache never stores a partially categorized shape.
    """

    type_name: str
    scalars: tuple[FieldDescriptor, ...] = ()
    objects: tuple[FieldDescriptor, ...] = ()
    interfaces: tuple[FieldDescriptor, ...] = ()
    lists: tuple[FieldDescriptor, ...] = ()
    fetched_at: float = 0.0

    @property
    def field_count(self) -> int:
        """Return the number of categorized fields."""
        return (
            len(self.scalars) + len(self.objects) + len(self.interfaces) + len(self.lists)
        )

    @classmethod
    def from_introspection(
        cls,
        type_name: str,
        type_payload: dict[str, Any],
        fetched_at: float,
    ) -> "TypeShape":
        """Build a shape from the ``__type`` payload of an introspection query.

        Each field type is inspected after stripping a single NON_NULL
        wrapper. LIST fields additionally record the element kind, seen
        through one more NON_NULL wrapper when the payload is deep enough;
        anything nested deeper is classified at the deepest level present.

        Args:
            type_name: The requested type name.
            type_payload: The ``__type`` object returned by the schema.
            fetched_at: Timer value at which the payload was fetched.

        Returns:
            The categorized TypeShape.
        """
        scalars: list[FieldDescriptor] = []
        objects: list[FieldDescriptor] = []
        interfaces: list[FieldDescriptor] = []
        lists: list[FieldDescriptor] = []

        for field_payload in type_payload.get("fields") or []:
            name = field_payload.get("name")
            type_ref = field_payload.get("type") or {}
            if not name:
                continue

            unwrapped = _strip_non_null(type_ref)
            kind = FieldKind.parse(unwrapped.get("kind"))
            if kind is None:
                continue

            if kind == FieldKind.LIST:
                element = _strip_non_null(unwrapped.get("ofType") or {})
                lists.append(
                    FieldDescriptor(
                        name=name,
                        kind=kind,
                        of_kind=FieldKind.parse(element.get("kind")),
                        of_type_name=element.get("name"),
                    )
                )
                continue

            descriptor = FieldDescriptor(
                name=name, kind=kind, type_name=unwrapped.get("name")
            )
            if kind.is_leaf:
                scalars.append(descriptor)
            elif kind == FieldKind.OBJECT:
                objects.append(descriptor)
            else:
                interfaces.append(descriptor)

        return cls(
            type_name=type_name,
            scalars=tuple(scalars),
            objects=tuple(objects),
            interfaces=tuple(interfaces),
            lists=tuple(lists),
            fetched_at=fetched_at,
        )
