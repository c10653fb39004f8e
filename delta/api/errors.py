"""
delta.api.errors — API Error Taxonomy
=======================================

Every failure a route can report to the caller.  Each class fixes its HTTP
status and a generic message; provider payloads and stack traces are only
ever logged, never returned.

Rendered by :func:`api_error_handler` as::

    {"error": "<code>", "message": "<message>"}
"""

from __future__ import annotations

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ApiError(Exception):
    """Base class; subclasses set ``status_code`` and ``message``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    @property
    def code(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


# ---------------------------------------------------------------------------
# 400 — caller input
# ---------------------------------------------------------------------------
class InvalidRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Request body must be a JSON object"


class MissingCode(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Code not provided"


class InvalidSettings(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid input for economy settings."


# ---------------------------------------------------------------------------
# 401 — authentication
# ---------------------------------------------------------------------------
class MissingCredential(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authorization header missing"


class MalformedCredential(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Token missing"


class InvalidCredential(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired Discord token"


# ---------------------------------------------------------------------------
# 403 — authorization
# ---------------------------------------------------------------------------
class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "You must be an administrator of this guild"


# ---------------------------------------------------------------------------
# 500 — downstream dependency failures
# ---------------------------------------------------------------------------
class OAuthExchangeFailed(ApiError):
    message = "Failed to authenticate with Discord"


class GuildFetchFailed(ApiError):
    message = "Failed to fetch user guilds"


class GuildInfoFailed(ApiError):
    message = "Failed to fetch guild info"


class SettingsFetchFailed(ApiError):
    message = "Failed to fetch economy settings"


class PersistenceFailed(ApiError):
    message = "Failed to save economy settings"


# ---------------------------------------------------------------------------
# Handlers — registered on the app in delta.api.main
# ---------------------------------------------------------------------------
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies are a 400 like every other input error, not a 422."""
    return await api_error_handler(request, InvalidRequest())
