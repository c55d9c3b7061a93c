"""Async GraphQL client for the admin API.

Sends a query or mutation document plus variables to a single endpoint with a
bearer token and returns the ``data`` payload. Every failure is raised as an
``OrgDashError`` subclass:

- no token: ``UnauthorizedError`` before any request is made
- request never answered: ``TransportError`` (status 0)
- non-2xx or GraphQL ``errors``: ``GraphQLResponseError`` with the first message
- answered without ``data``: ``EmptyDataError``

There is no retry or backoff here; callers decide whether to try again.
"""

import re
from types import TracebackType
from typing import Any, ClassVar

import httpx
import structlog

from orgdash.config import Settings
from orgdash.core.constants import (
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    GRAPHQL_FALLBACK_ERROR,
)
from orgdash.core.errors import (
    ConflictError,
    EmptyDataError,
    ForbiddenError,
    GraphQLResponseError,
    NotFoundError,
    OrgDashError,
    TransportError,
    UnauthorizedError,
)


logger = structlog.get_logger()

_OPERATION_NAME = re.compile(r"^\s*(?:query|mutation)\s+(\w+)")


def operation_name(document: str) -> str | None:
    """Extract the operation name from a GraphQL document, if it has one."""
    match = _OPERATION_NAME.match(document)
    return match.group(1) if match else None


class GraphQLClient:
    """Bearer-token GraphQL client over ``httpx.AsyncClient``."""

    # GraphQL ``extensions.code`` values with a dedicated error class
    ERROR_CODES: ClassVar[dict[str, type[OrgDashError]]] = {
        "CONFLICT": ConflictError,
        "UNAUTHENTICATED": UnauthorizedError,
        "FORBIDDEN": ForbiddenError,
        "NOT_FOUND": NotFoundError,
    }

    def __init__(
        self,
        endpoint: str,
        token: str | None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: Absolute URL of the GraphQL endpoint
            token: Bearer token; may be None, in which case every call fails
            timeout: Request timeout in seconds (ignored for an injected client)
            http_client: Optional pre-built client, e.g. one with a mock transport
        """
        self.endpoint = endpoint
        self.token = token
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GraphQLClient":
        """Build a client from console settings."""
        return cls(
            endpoint=str(settings.graphql_url),
            token=settings.api_token,
            timeout=settings.request_timeout,
        )

    async def __aenter__(self) -> "GraphQLClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        if not self.token or not self.token.strip():
            raise UnauthorizedError("No API token configured")
        return {
            "Authorization": f"Bearer {self.token.strip()}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def execute(
        self,
        document: str,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Run a query or mutation and return its ``data`` object.

        Args:
            document: GraphQL query or mutation text
            variables: Variables for the document

        Returns:
            The response's ``data`` mapping

        Raises:
            UnauthorizedError: If no token is configured
            TransportError: If the request could not be completed
            GraphQLResponseError: On non-2xx status or GraphQL errors
            EmptyDataError: If the response has no data payload
        """
        headers = self._headers()
        name = operation_name(document)
        payload: dict[str, Any] = {"query": document, "variables": variables or {}}
        if name:
            payload["operationName"] = name

        try:
            response = await self._http.post(self.endpoint, json=payload, headers=headers)
        except httpx.RequestError as exc:
            logger.warning("graphql_transport_failed", operation=name, error=str(exc))
            raise TransportError(
                f"Network error: {exc}" if str(exc) else None,
                details={"operation": name},
            ) from exc

        body = self._parse_body(response)

        if not response.is_success:
            error = self._error_from_body(body, response.status_code)
            logger.warning(
                "graphql_request_failed",
                operation=name,
                status_code=response.status_code,
                error=error.message,
            )
            raise error

        if body is None:
            logger.warning("graphql_malformed_response", operation=name)
            raise GraphQLResponseError(
                GRAPHQL_FALLBACK_ERROR, status_code=response.status_code
            )

        if body.get("errors"):
            error = self._error_from_body(body, response.status_code)
            logger.warning("graphql_errors", operation=name, error=error.message)
            raise error

        data = body.get("data")
        if not data:
            logger.warning("graphql_empty_data", operation=name)
            raise EmptyDataError(status_code=response.status_code)

        logger.debug("graphql_request_completed", operation=name)
        return data

    @staticmethod
    def _parse_body(response: httpx.Response) -> dict[str, Any] | None:
        try:
            body = response.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None

    def _error_from_body(
        self, body: dict[str, Any] | None, status_code: int
    ) -> OrgDashError:
        errors = (body or {}).get("errors")
        first = errors[0] if isinstance(errors, list) and errors else None

        if not isinstance(first, dict) or not first.get("message"):
            if status_code >= 400:
                return GraphQLResponseError(
                    f"{GRAPHQL_FALLBACK_ERROR} (HTTP {status_code})",
                    status_code=status_code,
                )
            return GraphQLResponseError(GRAPHQL_FALLBACK_ERROR, status_code=status_code)

        extensions = first.get("extensions") or {}
        code = extensions.get("code") if isinstance(extensions, dict) else None
        error_cls = self.ERROR_CODES.get(str(code).upper(), GraphQLResponseError)
        if status_code == 401:
            error_cls = UnauthorizedError
        elif status_code == 403:
            error_cls = ForbiddenError
        details = {"errors": errors}
        if error_cls is GraphQLResponseError:
            return GraphQLResponseError(
                first["message"], status_code=status_code, details=details
            )
        return error_cls(first["message"], details=details)
