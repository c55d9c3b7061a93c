"""Domain exceptions for the organization console.

Every failure surfaced by this package, whether it comes from the network,
the GraphQL server or client-side validation, is an ``OrgDashError`` so that
callers have a single error-handling path.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError


class OrgDashError(Exception):
    """Base exception for all console errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        status_code: HTTP status of the failed exchange (0 when nothing was received)
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class TransportError(OrgDashError):
    """Raised when a request could not be sent or no response was received.

    Example:
        raise TransportError("Connection refused", details={"url": url})
    """

    message = "Network error: the API could not be reached"
    error_code = "transport_error"
    status_code = 0


class GraphQLResponseError(OrgDashError):
    """Raised for non-2xx responses and GraphQL top-level errors.

    The message is the first entry of the response's ``errors`` list, or a
    generic fallback when the response is malformed.
    """

    message = "The API returned an error"
    error_code = "graphql_error"
    status_code = 502


class EmptyDataError(GraphQLResponseError):
    """Raised when a well-formed response carries neither data nor errors."""

    message = "The API returned no data"
    error_code = "empty_data"


class UnauthorizedError(OrgDashError):
    """Raised when no bearer token is available or the server rejects it."""

    message = "Authentication required"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(OrgDashError):
    """Raised when the authenticated user lacks permission."""

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


class NotFoundError(OrgDashError):
    """Raised when a requested organization or membership does not exist.

    Example:
        raise NotFoundError("Organization not found", resource="organization", resource_id=org_id)
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(OrgDashError):
    """Raised when a write is rejected because the record changed underneath it.

    Example:
        raise ConflictError(
            "Organization was modified by someone else",
            details={"expected_updated_at": expected, "actual_updated_at": actual},
        )
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ValidationError(OrgDashError):
    """Raised when input fails client-side validation, before any network call.

    Example:
        raise ValidationError(
            "Invalid organization data",
            errors=[{"field": "name", "message": "Name is required"}]
        )
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 422

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        """Convert a pydantic validation failure into a console error.

        The message is taken from the first failing field so it can be shown
        inline next to a form.
        """
        errors = [
            {
                "field": ".".join(str(loc) for loc in err.get("loc", ())) or "body",
                "message": err.get("msg", "Invalid value"),
                "type": err.get("type"),
            }
            for err in exc.errors()
        ]
        first = errors[0] if errors else None
        message = f"{first['field']}: {first['message']}" if first else None
        return cls(message, errors=errors)
