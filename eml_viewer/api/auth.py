"""
eml_viewer/api/auth.py
----------------------
Bearer-token check shared by the protected routes.
"""

import secrets
from typing import Optional

from fastapi import Header, Request
from fastapi.responses import JSONResponse

from eml_viewer.utils.logging_utils import get_logger

logger = get_logger()

AUTH_HINT = "Include Authorization header: Bearer YOUR_TOKEN"


class AuthError(Exception):
    def __init__(self, status_code: int, error: str, hint: str):
        self.status_code = status_code
        self.error = error
        self.hint = hint
        super().__init__(error)


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc.error}")
    return JSONResponse(
        content={"error": exc.error, "hint": exc.hint},
        status_code=exc.status_code,
    )


def _bearer_token(authorization: Optional[str]) -> str:
    scheme, _, token = (authorization or "").strip().partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def require_token(request: Request, authorization: Optional[str] = Header(None)) -> None:
    """
    FastAPI dependency: 401 when no bearer token is sent, 403 when it does
    not match the configured API_TOKEN. An unset API_TOKEN rejects every
    token.
    """
    token = _bearer_token(authorization)
    if not token:
        raise AuthError(401, "Access denied. API token required.", AUTH_HINT)

    expected = request.app.state.settings.API_TOKEN
    if not expected or not secrets.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        raise AuthError(403, "Invalid API token.", "Check your API token and try again")
