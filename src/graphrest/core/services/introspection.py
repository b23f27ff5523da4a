"""Schema introspection cache.

Looks up the field shape of a named schema type through the upstream
``__type`` introspection field and memoizes successful results for a
long TTL. Failed lookups are never memoized.
"""

import logging
import time
from collections.abc import Callable
from datetime import timedelta

from cachetools import TTLCache  # type: ignore[import-untyped]

from graphrest.core.entities.type_shape import TypeShape
from graphrest.core.errors import GatewayError
from graphrest.core.interfaces.executor import IGraphQLExecutor

logger = logging.getLogger(__name__)

# Three levels of wrapper unwrapping (NON_NULL / LIST) are requested
INTROSPECT_TYPE_QUERY = """
query IntrospectType($name: String!) {
  __type(name: $name) {
    name
    kind
    fields {
      name
      type {
        name
        kind
        ofType {
          name
          kind
          ofType {
            name
            kind
          }
        }
      }
    }
  }
}
""".strip()


class SchemaIntrospectionCache:
    """TTL cache of introspected type shapes.

    One instance is shared by every request of a process. Concurrent
    misses for the same type may both query the schema; the last
    successful write wins.
    """

    def __init__(
        self,
        executor: IGraphQLExecutor,
        ttl: timedelta = timedelta(hours=24),
        maxsize: int = 1024,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the introspection cache.

        Args:
            executor: Executor used to run the introspection query.
            ttl: Age after which a shape is re-fetched.
            maxsize: Maximum number of cached shapes.
            timer: Clock used for fetch timestamps and expiry.
        """
        self._executor = executor
        self._ttl = ttl
        self._timer = timer
        self._shapes: TTLCache[str, TypeShape] = TTLCache(
            maxsize=maxsize,
            ttl=ttl.total_seconds(),
            timer=timer,
        )
        self._fetch_count = 0

    @property
    def fetch_count(self) -> int:
        """Return the number of introspection queries issued."""
        return self._fetch_count

    async def get_type_shape(self, type_name: str) -> TypeShape | None:
        """Get the shape of a schema type.

        Args:
            type_name: The schema type name.

        Returns:
            The TypeShape, or None when the type could not be introspected.
            None means "use the minimal fallback selection", never "the
            type has no fields".
        """
        cached = self._shapes.get(type_name)
        if cached is not None:
            logger.debug("Using cached introspection for %s", type_name)
            return cached

        shape = await self._fetch(type_name)
        if shape is not None:
            self._shapes[type_name] = shape
        return shape

    async def _fetch(self, type_name: str) -> TypeShape | None:
        self._fetch_count += 1
        try:
            response = await self._executor.execute(
                INTROSPECT_TYPE_QUERY, {"name": type_name}
            )
        except GatewayError as exc:
            logger.warning("Failed to introspect type %s: %s", type_name, exc)
            return None

        type_payload = (response.get("data") or {}).get("__type")
        if not type_payload:
            if response.get("errors"):
                logger.warning(
                    "Introspection of %s failed: %s", type_name, response["errors"]
                )
            else:
                logger.warning("Type %s not found in schema", type_name)
            return None

        shape = TypeShape.from_introspection(
            type_name, type_payload, fetched_at=self._timer()
        )
        logger.info(
            "Introspected %s: %d scalars, %d objects, %d interfaces, %d lists",
            type_name,
            len(shape.scalars),
            len(shape.objects),
            len(shape.interfaces),
            len(shape.lists),
        )
        return shape

    def clear(self) -> None:
        """Clear all cached shapes."""
        self._shapes.clear()
        logger.info("Introspection cache cleared")

    def __len__(self) -> int:
        """Return the number of cached shapes."""
        return len(self._shapes)
