"""Fragment registry.

A fixed catalog of field fragments for the content types of the upstream
schema, plus a compiler that turns them into inline fragments for use
inside polymorphic selections such as content areas.
"""

import logging
from collections.abc import Iterable, Mapping
from textwrap import dedent, indent

from graphql import FragmentDefinitionNode, GraphQLSyntaxError, parse

from graphrest.core.entities.fragment import FragmentDefinition

logger = logging.getLogger(__name__)


def _fragment(name: str, body: str, metadata: str) -> FragmentDefinition:
    lines = [dedent(body).strip(), dedent(metadata).strip()]
    selection = indent("\n".join(lines), "  ")
    text = f"fragment {name}Fields on {name} {{\n{selection}\n}}"
    return FragmentDefinition(name=name, type_name=name, text=text)


_METADATA = """
  _metadata {
    displayName
    key
    types
  }
"""

_PAGE_METADATA = """
  _metadata {
    displayName
    key
    url {
      default
    }
    types
  }
"""

FRAGMENTS: Mapping[str, FragmentDefinition] = {
    fragment.name: fragment
    for fragment in (
        # Components
        _fragment(
            "Hero",
            """
              _id
              Heading
              SubHeading
              Body
              Image {
                key
                url {
                  default
                }
              }
              Video {
                key
                url {
                  default
                }
              }
              Links {
                text
                url {
                  default
                }
              }
            """,
            _METADATA,
        ),
        _fragment(
            "Card",
            """
              _id
              Heading
              SubHeading
              Body
              Asset {
                key
                url {
                  default
                }
              }
              Links {
                text
                url {
                  default
                }
              }
            """,
            _METADATA,
        ),
        _fragment(
            "Button",
            """
              _id
              ButtonLabel
              ButtonLink {
                text
                url {
                  default
                }
              }
            """,
            _METADATA,
        ),
        _fragment(
            "ArticleList",
            """
              _id
              Title
              NumberOfArticles
            """,
            _METADATA,
        ),
        _fragment(
            "Paragraph",
            """
              _id
              Body
            """,
            _METADATA,
        ),
        _fragment(
            "Image",
            """
              _id
              AltText
              Image {
                key
                url {
                  default
                }
              }
            """,
            _METADATA,
        ),
        _fragment(
            "Video",
            """
              _id
              Title
              Video {
                key
                url {
                  default
                }
              }
            """,
            _METADATA,
        ),
        _fragment(
            "Carousel",
            """
              _id
              Heading
              Assets {
                text
                url {
                  default
                }
              }
              Link {
                text
                url {
                  default
                }
              }
            """,
            _METADATA,
        ),
        _fragment(
            "Grid",
            """
              _id
              Items {
                _id
                __typename
              }
              RichText
            """,
            _METADATA,
        ),
        _fragment(
            "CallToAction",
            """
              _id
              Links {
                text
                url {
                  default
                }
              }
            """,
            _METADATA,
        ),
        _fragment(
            "Collapse",
            """
              _id
              Heading
              Body
            """,
            _METADATA,
        ),
        _fragment(
            "Divider",
            """
              _id
              DividerDirection
              DividerText
            """,
            _METADATA,
        ),
        _fragment(
            "Text",
            """
              _id
              Body
            """,
            _METADATA,
        ),
        _fragment(
            "Iframe",
            """
              _id
              Title
              IframePageUrl
              Width
              ManualHeight
            """,
            _METADATA,
        ),
        # Pages
        _fragment(
            "ArticlePage",
            """
              _id
              Heading
              SubHeading
              Author
              AuthorEmail
              Body
              PromoImage {
                key
                url {
                  default
                }
              }
            """,
            _PAGE_METADATA,
        ),
        _fragment(
            "LandingPage",
            """
              _id
              MainContentArea {
                _id
                __typename
              }
              TopContentArea {
                _id
                __typename
              }
            """,
            _PAGE_METADATA,
        ),
        _fragment(
            "Product",
            """
              _id
              Title
              Description
              Price
              Image {
                key
                url {
                  default
                }
              }
            """,
            _METADATA,
        ),
    )
}


def to_inline_fragment(text: str) -> str | None:
    """Rewrite ``fragment X on T { body }`` into ``... on T { body }``.

    The body is copied verbatim from the source text.

    Args:
        text: A fragment definition document.

    Returns:
        The inline fragment, or None if the text is not exactly one
        fragment definition.
    """
    try:
        document = parse(text)
    except GraphQLSyntaxError:
        return None

    if len(document.definitions) != 1:
        return None
    definition = document.definitions[0]
    if not isinstance(definition, FragmentDefinitionNode):
        return None

    loc = definition.selection_set.loc
    if loc is None:
        return None
    body = text[loc.start + 1 : loc.end - 1]
    return f"... on {definition.type_condition.name.value} {{{body}}}"


class FragmentRegistry:
    """Lookup of fragment definitions by content-type name.

    Unknown names are dropped silently: callers may pass a superset of
    the names the registry knows.
    """

    def __init__(
        self, fragments: Mapping[str, FragmentDefinition] | None = None
    ) -> None:
        """Initialize the registry.

        Args:
            fragments: Fragment table; defaults to the built-in FRAGMENTS.
        """
        self._fragments = dict(FRAGMENTS if fragments is None else fragments)
        self._inline: dict[str, str | None] = {}

    def get(self, name: str) -> FragmentDefinition | None:
        """Get a fragment definition by name."""
        return self._fragments.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._fragments

    def available(self) -> list[str]:
        """Return all registered fragment names."""
        return list(self._fragments)

    def resolve(self, names: Iterable[str]) -> list[FragmentDefinition]:
        """Resolve fragment names to definitions.

        Args:
            names: Requested fragment names.

        Returns:
            Known definitions in request order, each at most once.
        """
        resolved: list[FragmentDefinition] = []
        seen: set[str] = set()
        for name in names:
            fragment = self._fragments.get(name)
            if fragment is None or name in seen:
                continue
            seen.add(name)
            resolved.append(fragment)
        return resolved

    def definitions(self, names: Iterable[str]) -> str:
        """Return the resolved definition texts separated by blank lines."""
        return "\n\n".join(fragment.text for fragment in self.resolve(names))

    def compile_inline_fragments(self, names: Iterable[str]) -> str:
        """Build inline fragments for a polymorphic selection.

        Malformed fragment texts are skipped and contribute nothing.

        Args:
            names: Requested fragment names.

        Returns:
            Newline separated ``... on T { ... }`` blocks.
        """
        blocks: list[str] = []
        for fragment in self.resolve(names):
            if fragment.name not in self._inline:
                inline = to_inline_fragment(fragment.text)
                if inline is None:
                    logger.warning(
                        "Skipping malformed fragment %s: expected "
                        "'fragment <name> on <Type> { ... }'",
                        fragment.name,
                    )
                self._inline[fragment.name] = inline
            inline = self._inline[fragment.name]
            if inline:
                blocks.append(inline)
        return "\n".join(blocks)
