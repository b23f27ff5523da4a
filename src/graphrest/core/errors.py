"""Gateway error taxonomy.

Every failure that reaches a client is a GatewayError subclass carrying
the HTTP status and the error category rendered in the JSON body.
"""

from typing import Any


class GatewayError(Exception):
    """Base class for errors surfaced to REST callers."""

    status_code: int = 500
    error_type: str = "InternalServerError"
    # Whether details are rendered outside debug mode
    expose_details: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self, include_details: bool = False) -> dict[str, Any]:
        """Render the error as a JSON-serializable body.

        Args:
            include_details: Whether to include ``details`` when present.

        Returns:
            Dictionary with error, message and statusCode.
        """
        body: dict[str, Any] = {
            "error": self.error_type,
            "message": self.message,
            "statusCode": self.status_code,
        }
        if (include_details or self.expose_details) and self.details:
            body["details"] = self.details
        return body


class BadRequestError(GatewayError):
    """A required parameter is missing or invalid."""

    status_code = 400
    error_type = "BadRequest"


class InvalidContentTypeError(GatewayError):
    """The upstream rejected a field of the assembled document."""

    status_code = 400
    error_type = "InvalidContentType"


class InvalidVariableError(GatewayError):
    """The upstream rejected a variable of the assembled document."""

    status_code = 400
    error_type = "InvalidVariable"


class UnauthorizedError(GatewayError):
    status_code = 401
    error_type = "Unauthorized"
    expose_details = True


class NotFoundError(GatewayError):
    """The upstream returned no data for the requested envelope."""

    status_code = 404
    error_type = "NotFound"


class ConfigurationError(GatewayError):
    status_code = 500
    error_type = "Configuration Error"


class InternalServerError(GatewayError):
    status_code = 500
    error_type = "InternalServerError"


class ServiceUnavailableError(GatewayError):
    """The upstream could not be reached."""

    status_code = 503
    error_type = "ServiceUnavailable"


class GatewayTimeoutError(GatewayError):
    """The upstream did not answer within the configured timeout."""

    status_code = 504
    error_type = "GatewayTimeout"


# Substring rules applied to error messages, first match wins
_MESSAGE_RULES: tuple[tuple[tuple[str, ...], type[GatewayError]], ...] = (
    (("Cannot query field",), InvalidContentTypeError),
    (("Variable",), InvalidVariableError),
    (("No data returned",), NotFoundError),
    (("timeout", "ETIMEDOUT"), GatewayTimeoutError),
    (("ECONNREFUSED", "fetch failed"), ServiceUnavailableError),
)


def classify_error(message: str | None) -> GatewayError:
    """Map a failure message to its gateway error category.

    Matching is by substring of the message text, which is how the
    upstream reports schema violations; it does not inspect ``extensions``.

    Args:
        message: The upstream or exception message.

    Returns:
        A GatewayError instance of the matching category.
    """
    text = message or "An unexpected error occurred"
    for needles, error_class in _MESSAGE_RULES:
        if any(needle in text for needle in needles):
            return error_class(text)
    return InternalServerError(text)
