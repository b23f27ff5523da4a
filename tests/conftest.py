"""Pytest configuration for graphrest tests."""

from collections.abc import Mapping
from typing import Any

import pytest

from graphrest.core.entities.auth_context import AuthContext
from graphrest.core.interfaces.executor import GraphQLResponse
from graphrest.core.services.introspection import INTROSPECT_TYPE_QUERY


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def named(kind: str, name: str) -> dict[str, Any]:
    return {"kind": kind, "name": name, "ofType": None}


def non_null(of_type: dict[str, Any]) -> dict[str, Any]:
    return {"kind": "NON_NULL", "name": None, "ofType": of_type}


def list_of(of_type: dict[str, Any]) -> dict[str, Any]:
    return {"kind": "LIST", "name": None, "ofType": of_type}


def type_payload(name: str, **fields: dict[str, Any]) -> dict[str, Any]:
    """Build a ``__type`` payload with fields in keyword order."""
    return {
        "name": name,
        "kind": "OBJECT",
        "fields": [{"name": field, "type": ref} for field, ref in fields.items()],
    }


STRING = named("SCALAR", "String")

SCHEMA: dict[str, dict[str, Any]] = {
    "ArticlePage": type_payload(
        "ArticlePage",
        _id=non_null(STRING),
        Heading=STRING,
        _fulltext=list_of(STRING),
        Tags=list_of(non_null(STRING)),
        _metadata=named("OBJECT", "ContentMetadata"),
        PromoImage=named("OBJECT", "ContentReference"),
        MainContentArea=list_of(non_null(named("INTERFACE", "_IContent"))),
        Status=named("ENUM", "Status"),
    ),
    "ContentMetadata": type_payload(
        "ContentMetadata",
        key=STRING,
        displayName=STRING,
        url=named("OBJECT", "ContentUrl"),
    ),
    "ContentUrl": type_payload("ContentUrl", default=STRING, hierarchical=STRING),
    "ContentReference": type_payload(
        "ContentReference",
        key=STRING,
        url=named("OBJECT", "ContentUrl"),
    ),
    "Node": type_payload("Node", id=named("SCALAR", "ID"), parent=named("OBJECT", "Node")),
    "Empty": type_payload("Empty", owner=named("OBJECT", "Hollow")),
    "Hollow": type_payload("Hollow", related=named("UNION", "Related")),
    "_Content": type_payload(
        "_Content",
        _id=STRING,
        __typename=non_null(STRING),
        _metadata=named("OBJECT", "ContentMetadata"),
    ),
}


class StubExecutor:
    """In-memory executor serving introspection from a schema table.

    Every other document gets ``response`` (or raises ``error``).
    """

    def __init__(self, schema: Mapping[str, dict[str, Any]] | None = None) -> None:
        self.schema = dict(SCHEMA if schema is None else schema)
        self.response: GraphQLResponse = {"data": {}}
        self.error: Exception | None = None
        self.introspection_error: Exception | None = None
        self.calls: list[tuple[str, dict[str, Any], AuthContext | None]] = []

    async def execute(
        self,
        document: str,
        variables: Mapping[str, Any] | None = None,
        auth: AuthContext | None = None,
    ) -> GraphQLResponse:
        variables = dict(variables or {})
        self.calls.append((document, variables, auth))
        if document == INTROSPECT_TYPE_QUERY:
            if self.introspection_error is not None:
                raise self.introspection_error
            return {"data": {"__type": self.schema.get(variables["name"])}}
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def introspected(self) -> list[str]:
        """Type names introspected, in call order."""
        return [
            variables["name"]
            for document, variables, _ in self.calls
            if document == INTROSPECT_TYPE_QUERY
        ]

    @property
    def documents(self) -> list[str]:
        """Non-introspection documents executed, in call order."""
        return [document for document, _, _ in self.calls if document != INTROSPECT_TYPE_QUERY]


@pytest.fixture
def clock() -> FakeClock:
    """Create a manually advanced clock for testing."""
    return FakeClock()


@pytest.fixture
def executor() -> StubExecutor:
    """Create a stub executor over the default schema for testing."""
    return StubExecutor()


@pytest.fixture
def make_executor():
    """Factory for executors over a custom schema table."""
    return StubExecutor
