"""Authentication middleware for JWT validation."""

import re
from typing import Optional

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from jose import JWTError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from personaforge.config.settings import settings
from personaforge.services.token import IssuedToken, decode_token, refresh_if_stale

logger = structlog.get_logger()


# Paths that don't require authentication
SKIP_AUTH_PATHS = [
    r"^/api/v1/auth/(login|register)$",
    r"^/api/v1/health",
    r"^/health",
    r"^/$",
    r"^/api/docs",
    r"^/api/openapi\.json",
    r"^/api/redoc",
]

SKIP_AUTH_PATTERNS = [re.compile(p) for p in SKIP_AUTH_PATHS]

# Logging out must not re-issue the cookie it clears
LOGOUT_PATH = "/api/v1/auth/logout"


def should_skip_auth(path: str) -> bool:
    """Check if path should skip authentication."""
    return any(pattern.match(path) for pattern in SKIP_AUTH_PATTERNS)


def get_token_from_request(request: Request) -> Optional[str]:
    """Extract JWT token from request (cookie or Authorization header)."""
    token = request.cookies.get(settings.COOKIE_NAME)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]

    return None


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"error": {"code": "UNAUTHORIZED", "message": message, "details": {}}},
    )


def set_auth_cookie(response: Response, issued: IssuedToken) -> None:
    """Store an access token in the HTTP-only auth cookie."""
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=issued.access_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        domain=settings.COOKIE_DOMAIN,
        path="/",
        max_age=issued.expires_in,
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that validates operator tokens on protected routes."""

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and validate authentication."""
        if request.method == "OPTIONS" or should_skip_auth(request.url.path):
            return await call_next(request)

        token = get_token_from_request(request)
        if not token:
            return _unauthorized("Not authenticated")

        try:
            payload = decode_token(token)
        except JWTError as e:
            logger.info("Token rejected", path=request.url.path, reason=str(e))
            return _unauthorized(str(e))

        # Principal info for downstream dependencies
        request.state.user = payload
        request.state.user_id = int(payload["sub"])
        request.state.user_language = payload.get("language")

        # Every event logged while serving this request names the operator
        structlog.contextvars.bind_contextvars(operator_id=request.state.user_id)

        response = await call_next(request)

        refreshed = refresh_if_stale(payload)
        if refreshed and request.url.path != LOGOUT_PATH:
            set_auth_cookie(response, refreshed)

        return response
