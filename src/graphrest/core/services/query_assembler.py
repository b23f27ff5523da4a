"""Query assembler.

Composes variable declarations, a field selection and fragment
definitions into one executable GraphQL document for a content type.
Documents are not validated here; a malformed document surfaces as an
upstream error.
"""

import logging
from collections.abc import Iterable, Mapping

from graphrest.core.entities.query_spec import (
    MAX_DEPTH,
    MIN_DEPTH,
    Envelope,
    ExpandMode,
    JSONValue,
    QuerySpec,
    SelectionStrategy,
)
from graphrest.core.errors import BadRequestError
from graphrest.core.services.field_synthesizer import (
    MINIMAL_SELECTION,
    FieldSelectionSynthesizer,
    indent_selection,
)
from graphrest.core.services.fragment_registry import FragmentRegistry

logger = logging.getLogger(__name__)

# Upstream input types per variable; where/orderBy follow the
# <ContentType>WhereInput / <ContentType>OrderByInput naming convention
VARIABLE_TYPES: Mapping[str, str] = {
    "cursor": "String",
    "ids": "[String]",
    "limit": "Int",
    "locale": "[Locales]",
    "orderBy": "{content_type}OrderByInput",
    "skip": "Int",
    "track": "String",
    "usePinned": "usePinnedInput",
    "variation": "VariationInput",
    "where": "{content_type}WhereInput",
}

CONTENT_ROOT_TYPE = "_Content"

BASE_ITEM_FIELDS: tuple[str, ...] = ("__typename", "_id")

CONTENT_BY_PATH_FIELDS = """__typename
_id
_metadata {
  key
  version
  locale
  displayName
  types
  url {
    default
    hierarchical
    base
  }
}"""

_CONTENT_BY_PATH_HEAD = """query contentByPath($base: String, $url: String!, $urlNoSlash: String!) {
  _Content(
    where: {
      _metadata: { url: { base: { eq: $base } } }
      _and: [
        {
          _or: [
            { _metadata: { url: { default: { eq: $url } } } }
            { _metadata: { url: { default: { eq: $urlNoSlash } } } }
            { _metadata: { url: { hierarchical: { eq: $url } } } }
            { _metadata: { url: { hierarchical: { eq: $urlNoSlash } } } }
          ]
        }
      ]
    }
  ) {
    item {
"""

_CONTENT_BY_PATH_TAIL = """
    }
  }
}"""


def variable_type(name: str, content_type: str) -> str:
    """Return the GraphQL input type of a vocabulary variable."""
    return VARIABLE_TYPES[name].format(content_type=content_type)


def wrap_envelope(selection: str, envelope: Envelope) -> str:
    """Wrap an item selection in the list or single-item envelope."""
    block = f"{envelope.value} {{\n{indent_selection(selection)}\n}}"
    if envelope == Envelope.ITEMS:
        return f"{block}\ntotal\ncursor"
    return block


def _dedupe(fields: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(field for field in fields if field))


class QueryAssembler:
    """Builds GraphQL documents from REST-derived query intents."""

    def __init__(
        self,
        synthesizer: FieldSelectionSynthesizer,
        fragments: FragmentRegistry,
    ) -> None:
        """Initialize the assembler.

        Args:
            synthesizer: Used for auto-expanded selections.
            fragments: Used for fragment definitions and inline fragments.
        """
        self._synthesizer = synthesizer
        self._fragments = fragments

    async def assemble(
        self,
        content_type: str,
        variables: Mapping[str, JSONValue],
        fields: Iterable[str] | None = None,
        fragments: Iterable[str] | None = None,
        expand: ExpandMode | str | None = None,
        depth: int = 0,
        envelope: Envelope = Envelope.ITEMS,
    ) -> str:
        """Build the document for a content-type query.

        Args:
            content_type: Root query field, e.g. ``ArticlePage``.
            variables: GraphQL variables; present vocabulary members are
                declared and bound.
            fields: Explicit item fields, used verbatim.
            fragments: Fragment names for polymorphic content.
            expand: Auto-expansion mode.
            depth: Object nesting for auto-expansion, 0-3.
            envelope: ``items`` list lookup or ``item`` single lookup.

        Returns:
            The GraphQL document text.
        """
        spec = QuerySpec(
            content_type=content_type,
            variables=variables,
            fields=tuple(fields or ()),
            fragments=tuple(fragments or ()),
            expand=ExpandMode.parse(expand),
            depth=depth,
            envelope=envelope,
        )
        return await self.assemble_spec(spec)

    async def assemble_spec(self, spec: QuerySpec) -> str:
        """Build the document for an assembled QuerySpec.

        Raises:
            BadRequestError: If the depth is outside 0-3.
        """
        if not MIN_DEPTH <= spec.depth <= MAX_DEPTH:
            raise BadRequestError(
                f"depth must be between {MIN_DEPTH} and {MAX_DEPTH}, got {spec.depth}"
            )

        content_type = spec.content_type
        names = spec.variable_names

        header = f"query {content_type}Query"
        arguments = ""
        if names:
            declarations = ", ".join(
                f"${name}: {variable_type(name, content_type)}" for name in names
            )
            header = f"{header}({declarations})"
            arguments = "(" + ", ".join(f"{name}: ${name}" for name in names) + ")"

        selection = await self._selection(spec)
        document = (
            f"{header} {{\n"
            f"  {content_type}{arguments} {{\n"
            f"{indent_selection(selection, '    ')}\n"
            "  }\n"
            "}"
        )

        # Fragment declarations must be top-level siblings of the operation
        if spec.strategy in (SelectionStrategy.AUTO_EXPAND, SelectionStrategy.FRAGMENTS):
            definitions = self._fragments.definitions(spec.fragments)
            if definitions:
                document = f"{definitions}\n\n{document}"

        logger.debug("Assembled %s query (%s):\n%s", content_type, spec.strategy.value, document)
        return document

    async def _selection(self, spec: QuerySpec) -> str:
        strategy = spec.strategy

        if strategy == SelectionStrategy.EXPLICIT:
            return wrap_envelope("\n".join(_dedupe(spec.fields)), spec.envelope)

        if strategy == SelectionStrategy.AUTO_EXPAND:
            selection = await self._synthesizer.expand_fields(
                spec.content_type,
                spec.depth,
                frozenset(),
                spec.expand or ExpandMode.AUTO,
            )
            if not selection.strip():
                selection = MINIMAL_SELECTION
            inline = self._fragments.compile_inline_fragments(spec.fragments)
            if inline:
                selection = f"{selection}\n{inline}"
            return wrap_envelope(selection, spec.envelope)

        if strategy == SelectionStrategy.FRAGMENTS:
            inline = self._fragments.compile_inline_fragments(spec.fragments)
            selection = f"{MINIMAL_SELECTION}\n{inline}" if inline else MINIMAL_SELECTION
            block = indent_selection(selection)
            return f"items {{\n{block}\n}}\nitem {{\n{block}\n}}\ntotal\ncursor"

        return wrap_envelope(MINIMAL_SELECTION, spec.envelope)

    async def assemble_content_by_path(
        self,
        fields: Iterable[str] | None = None,
        expand: ExpandMode | str | None = None,
        depth: int = 0,
    ) -> str:
        """Build the document resolving one content item by URL path.

        Variables: ``base``, ``url`` (with trailing slash) and
        ``urlNoSlash``. Explicit fields are combined with ``__typename``
        and ``_id``; ``expand`` auto-expands the ``_Content`` type.
        """
        explicit = _dedupe(fields or ())
        mode = ExpandMode.parse(expand)

        if explicit:
            item_fields = "\n".join(_dedupe([*BASE_ITEM_FIELDS, *explicit]))
        elif mode is not None:
            item_fields = await self._synthesizer.expand_fields(
                CONTENT_ROOT_TYPE, depth, frozenset(), mode
            )
            if not item_fields.strip():
                item_fields = CONTENT_BY_PATH_FIELDS
        else:
            item_fields = CONTENT_BY_PATH_FIELDS

        document = (
            _CONTENT_BY_PATH_HEAD
            + indent_selection(item_fields, " " * 6)
            + _CONTENT_BY_PATH_TAIL
        )
        logger.debug("Assembled contentByPath query:\n%s", document)
        return document
