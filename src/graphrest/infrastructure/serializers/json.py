"""JSON serializer for REST response bodies."""

import json
from typing import Any


class SerializationError(Exception):
    """Raised when a body cannot be encoded or decoded."""

    pass


class JsonSerializer:
    """Encodes and decodes JSON response bodies.

    Used by the response cache middleware to read a captured body and
    to replay a cached payload.
    """

    media_type = "application/json"

    def __init__(self, encoding: str = "utf-8") -> None:
        """Initialize the JSON serializer.

        Args:
            encoding: Character encoding of the bodies.
        """
        self._encoding = encoding

    def serialize(self, value: Any) -> bytes:
        """Encode a payload as a compact JSON body.

        Raises:
            SerializationError: If the payload is not JSON compatible.
        """
        try:
            return json.dumps(value, separators=(",", ":")).encode(self._encoding)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to serialize body: {e}") from e

    def deserialize(self, data: bytes) -> Any:
        """Decode a JSON body.

        Args:
            data: Raw body bytes.

        Returns:
            The decoded payload.

        Raises:
            SerializationError: If the body is not valid JSON.
        """
        try:
            return json.loads(data.decode(self._encoding))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SerializationError(f"Failed to deserialize body: {e}") from e
