"""Infrastructure layer implementations for graphrest."""

from graphrest.infrastructure.http_executor import HttpGraphQLExecutor
from graphrest.infrastructure.query_params import decode_query_string, parse_query_string
from graphrest.infrastructure.serializers import JsonSerializer, SerializationError

__all__ = [
    "HttpGraphQLExecutor",
    "JsonSerializer",
    "SerializationError",
    "decode_query_string",
    "parse_query_string",
]
