"""Error handling middleware for mapping exceptions to HTTP responses."""

from collections.abc import Callable
from datetime import UTC, datetime

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from talentwatch.api.schemas.errors import APIError, ErrorCode
from talentwatch.config.settings import get_settings
from talentwatch.core.exceptions import (
    AuthExpiredError,
    ConsentDeniedError,
    ConsentExpiredError,
    NotFoundError,
    RegistryUnavailableError,
)
from talentwatch.core.logging import get_logger

logger = get_logger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware that catches exceptions and returns standardized error responses.

    Maps domain exceptions to HTTP status codes and formats all errors
    using the APIError schema.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return self._handle_exception(request, exc)

    def _handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        status_code, error_code, message, details = self._map_exception(exc)

        if status_code >= 500:
            logger.exception("request_failed", path=request.url.path, error_type=type(exc).__name__)
        else:
            logger.info("request_rejected", path=request.url.path, error_code=error_code, status_code=status_code)

        error = APIError(
            error_code=error_code,
            message=message,
            details=details,
            request_id=request_id,
            timestamp=datetime.now(UTC),
        )
        return JSONResponse(
            status_code=status_code,
            content=error.model_dump(mode="json"),
            headers={"X-Request-ID": request_id},
        )

    def _map_exception(self, exc: Exception) -> tuple[int, str, str, dict | None]:
        """Map exception to (status_code, error_code, message, details)."""
        # Consent errors
        if isinstance(exc, ConsentExpiredError):
            return (
                403,
                ErrorCode.CONSENT_EXPIRED.value,
                str(exc),
                {"subject_id": exc.subject_id, "expiry": exc.expiry.isoformat()},
            )

        if isinstance(exc, ConsentDeniedError):
            return (
                403,
                ErrorCode.CONSENT_DENIED.value,
                str(exc),
                {"subject_id": exc.subject_id, "purpose": exc.purpose, "reason": exc.reason},
            )

        if isinstance(exc, NotFoundError):
            return (
                404,
                ErrorCode.NOT_FOUND.value,
                str(exc),
                {"resource": exc.resource, "resource_id": exc.resource_id},
            )

        # Registry errors
        if isinstance(exc, AuthExpiredError):
            return (401, ErrorCode.UNAUTHORIZED.value, str(exc), None)

        if isinstance(exc, RegistryUnavailableError):
            return (
                502,
                ErrorCode.REGISTRY_UNAVAILABLE.value,
                str(exc),
                {"operation": exc.operation, "status_code": exc.status_code},
            )

        # Validation errors (Pydantic before ValueError, which it subclasses)
        if isinstance(exc, ValidationError):
            return (
                422,
                ErrorCode.VALIDATION_ERROR.value,
                "Request validation failed",
                {"errors": exc.errors(include_url=False, include_context=False)},
            )

        if isinstance(exc, ValueError):
            return (422, ErrorCode.VALIDATION_ERROR.value, str(exc), None)

        return (
            500,
            ErrorCode.INTERNAL_ERROR.value,
            "Internal server error",
            {"type": type(exc).__name__} if get_settings().DEBUG else None,
        )
