"""Error taxonomy and global exception handlers for the API."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger()


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        code: str = "API_ERROR",
        status_code: int = 400,
        details: dict = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(APIError):
    """Resource not found, or not owned by the caller."""

    def __init__(self, resource: str, identifier: str | int):
        super().__init__(
            message=f"{resource} not found",
            code="NOT_FOUND",
            status_code=404,
            details={"resource": resource, "id": identifier},
        )


class ValidationAPIError(APIError):
    """Malformed filters, identity data or request payload."""

    def __init__(self, message: str, field: str = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=422,
            details={"field": field} if field else {},
        )


class ConflictError(APIError):
    """Resource already exists."""

    def __init__(self, message: str, field: str = None):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=409,
            details={"field": field} if field else {},
        )


class AuthenticationError(APIError):
    """Missing or invalid credentials."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=401,
        )


class ForbiddenError(APIError):
    """Access forbidden."""

    def __init__(self, message: str = "You don't have permission to access this resource"):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
        )


class UpstreamUnavailableError(APIError):
    """The random identity source failed or returned an unusable payload."""

    def __init__(self, message: str = "Identity source unavailable", details: dict = None):
        super().__init__(
            message=message,
            code="UPSTREAM_UNAVAILABLE",
            status_code=503,
            details=details,
        )


class RetryExhaustedError(APIError):
    """Age constraints could not be met within the attempt cap."""

    def __init__(self, attempts: int, min_age: int | None, max_age: int | None):
        super().__init__(
            message=f"No identity matching the age filter after {attempts} attempts",
            code="RETRY_EXHAUSTED",
            status_code=422,
            details={"attempts": attempts, "min_age": min_age, "max_age": max_age},
        )


class PersistenceFailedError(APIError):
    """A bundle write failed and was rolled back."""

    def __init__(self, message: str = "Failed to store identity bundle", details: dict = None):
        super().__init__(
            message=message,
            code="PERSISTENCE_FAILED",
            status_code=500,
            details=details,
        )


def _error_body(code: str, message: str, details: dict) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
        }
    }


def setup_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        """Handle custom API errors."""
        log_method = logger.error if exc.status_code >= 500 else logger.warning
        log_method(
            "API error",
            code=exc.code,
            message=exc.message,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = exc.errors()
        first_error = errors[0] if errors else {}
        field = ".".join(str(loc) for loc in first_error.get("loc", []))
        message = first_error.get("msg", "Validation error")

        logger.warning(
            "Validation error",
            field=field,
            message=message,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=422,
            content=_error_body(
                "VALIDATION_ERROR",
                message,
                {"field": field, "errors": [
                    {"loc": list(e.get("loc", [])), "msg": e.get("msg"), "type": e.get("type")}
                    for e in errors
                ]},
            ),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """Handle database errors."""
        logger.error(
            "Database error",
            error=str(exc),
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("DATABASE_ERROR", "A database error occurred", {}),
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors."""
        logger.exception(
            "Unexpected error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred", {}),
        )
