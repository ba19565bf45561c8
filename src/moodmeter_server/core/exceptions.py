"""HTTP error types and the uniform error response.

Every error body has the shape ``{"status": "error", "message": ...}``.
Privacy-gated lookups and missing credentials share the 401 status code
but carry different messages.
"""

from typing import Any

import structlog
from litestar import Request, Response
from litestar.exceptions import (
    ClientException,
    HTTPException,
    NotAuthorizedException,
    NotFoundException,
    ValidationException,
)
from litestar.status_codes import HTTP_409_CONFLICT
from litestar.types import Scope

logger = structlog.get_logger()


class ServiceError(HTTPException):
    """HTTP exception with a per-class default message."""

    default_detail = "Internal Server Error"

    def __init__(self, detail: str | None = None, **kwargs: Any) -> None:
        """Initialize with the given or default message."""
        super().__init__(detail=detail or self.default_detail, **kwargs)


class ValidationError(ServiceError, ValidationException):
    """Malformed or out-of-range input."""

    default_detail = "Invalid request"


class AuthenticationFailure(ServiceError, NotAuthorizedException):
    """Missing or unknown token, or a password that does not match."""

    default_detail = "Unauthorized"


class AuthorizationDenied(ServiceError, NotAuthorizedException):
    """Lookup by name refused by the subject's privacy settings."""

    default_detail = "User not found"


class ConflictError(ServiceError, ClientException):
    """Unique value already taken."""

    status_code = HTTP_409_CONFLICT
    default_detail = "Conflict"


class NotFoundError(ServiceError, NotFoundException):
    """No route matches the request."""

    default_detail = "Route not found"


def error_body(message: str) -> dict[str, str]:
    """Build the error response payload."""
    return {"status": "error", "message": message}


def http_exception_handler(request: Request[Any, Any, Any], exc: HTTPException) -> Response[Any]:
    """Render any HTTP exception as the uniform error body."""
    return Response(
        content=error_body(exc.detail),
        status_code=exc.status_code,
        headers=exc.headers,
    )


def not_found_handler(request: Request[Any, Any, Any], exc: HTTPException) -> Response[Any]:
    """Render unmatched routes as ``NotFoundError``."""
    return http_exception_handler(request, NotFoundError())


async def log_exception(exception: Exception, scope: Scope) -> None:
    """Log unexpected failures before the generic 500 response goes out."""
    if isinstance(exception, HTTPException):
        return
    logger.error(
        "Unhandled error",
        path=scope.get("path"),
        method=scope.get("method"),
        exc_info=exception,
    )
