"""
Admin API key middleware.

When ``settings.admin_api_key`` is set, requests to the admin-only API
paths must carry ``Authorization: Bearer <key>``. With no key
configured every request passes through.
"""

import hmac

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.core.config import get_settings

ADMIN_PREFIXES = (
    "/api/v1/users",
    "/api/v1/export",
    "/api/v1/stats",
    "/api/v1/corpus",
)


def _unauthorized() -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"detail": "Invalid admin API key", "code": "AUTH_REQUIRED"},
    )


class AdminKeyMiddleware(BaseHTTPMiddleware):
    """Enforce Bearer token auth on admin paths when ``admin_api_key`` is set."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        key = get_settings().admin_api_key
        if not key or not request.url.path.startswith(ADMIN_PREFIXES):
            return await call_next(request)

        # CORS preflight carries no credentials
        if request.method == "OPTIONS":
            return await call_next(request)

        auth_header = request.headers.get("authorization", "")
        if not auth_header.startswith("Bearer "):
            return _unauthorized()
        token = auth_header[len("Bearer ") :]
        if not hmac.compare_digest(token, key):
            return _unauthorized()

        return await call_next(request)
