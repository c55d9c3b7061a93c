"""Error hierarchy shared by the transport client and the organization service."""

from orgdash.core.errors.exceptions import (
    ConflictError,
    EmptyDataError,
    ForbiddenError,
    GraphQLResponseError,
    NotFoundError,
    OrgDashError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)


__all__ = [
    "ConflictError",
    "EmptyDataError",
    "ForbiddenError",
    "GraphQLResponseError",
    "NotFoundError",
    "OrgDashError",
    "TransportError",
    "UnauthorizedError",
    "ValidationError",
]
