"""Custom exceptions and error handling.

Every error leaves the API as ``{"error": "<message>"}`` with the matching
HTTP status, optionally followed by extra keys (e.g. validation details).
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("continuum.errors")

_PYDANTIC_PREFIXES = ("Value error, ", "Assertion failed, ")


class AppError(Exception):
    """Base application error carrying an HTTP status."""

    def __init__(
        self,
        title: str,
        detail: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.title = title
        self.detail = detail
        self.status_code = status_code
        self.extra = extra or {}
        super().__init__(detail)

    def to_error_body(self) -> dict[str, Any]:
        """Convert to the ``{error: string}`` response body."""
        body: dict[str, Any] = {"error": self.detail}
        body.update(self.extra)
        return body


class ValidationError(AppError):
    """Invalid input."""

    def __init__(
        self,
        detail: str,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(
            title="Validation Error",
            detail=detail,
            status_code=status.HTTP_400_BAD_REQUEST,
            extra={"details": errors} if errors else None,
        )


class NotFoundError(AppError):
    """Resource not found error."""

    def __init__(
        self,
        resource: str,
        resource_id: str | None = None,
        detail: str | None = None,
    ) -> None:
        if detail is None:
            detail = f"{resource} not found"
            if resource_id:
                detail = f"{resource} with id '{resource_id}' not found"
        super().__init__(
            title="Not Found",
            detail=detail,
            status_code=status.HTTP_404_NOT_FOUND,
        )


class UnauthorizedError(AppError):
    """Authentication required error."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(
            title="Unauthorized",
            detail=detail,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class ForbiddenError(AppError):
    """Permission denied error."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(
            title="Forbidden",
            detail=detail,
            status_code=status.HTTP_403_FORBIDDEN,
        )


class EmailNotVerifiedError(ForbiddenError):
    """Portal login before the email address was confirmed."""

    def __init__(self) -> None:
        super().__init__("Please verify your email address before logging in.")
        self.extra = {"requiresVerification": True}


class ConflictError(AppError):
    """Resource conflict error."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            title="Conflict",
            detail=detail,
            status_code=status.HTTP_409_CONFLICT,
        )


class RateLimitError(AppError):
    """Rate limit exceeded error."""

    def __init__(
        self,
        detail: str = "Too many requests. Please try again later.",
        retry_after: int | None = None,
    ) -> None:
        extra = {}
        if retry_after:
            extra["retryAfter"] = retry_after
        super().__init__(
            title="Too Many Requests",
            detail=detail,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            extra=extra,
        )


class ServiceUnavailableError(AppError):
    """A downstream service failed and the request cannot be completed."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            title="Service Unavailable",
            detail=detail,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )


def first_error_message(errors: list[dict[str, Any]]) -> str:
    """Human-readable message of the first pydantic error."""
    if not errors:
        return "Invalid request"
    message = str(errors[0].get("msg", "Invalid request"))
    for prefix in _PYDANTIC_PREFIXES:
        if message.startswith(prefix):
            return message[len(prefix):]
    return message


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:  # noqa: ARG001
    """Handle AppError exceptions."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_error_body())


async def request_validation_handler(
    request: Request,  # noqa: ARG001
    exc: RequestValidationError,
) -> JSONResponse:
    """Report schema failures as 400 with the first message."""
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": first_error_message(errors), "details": errors},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(
        "Unhandled error",
        extra={"path": request.url.path, "method": request.method},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "An unexpected error occurred"},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
