"""
delta.api.deps — FastAPI dependency injection
===============================================

Process-scoped resources (engine, HTTP client) are created in the app
lifespan and stored on ``app.state``; the providers below hand them to
routes so tests can swap them via ``app.dependency_overrides``.

:func:`get_auth_context` is the Discord identity gate used by every
authenticated route.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Any

import httpx
from fastapi import Depends, Header, Request
from sqlalchemy import Engine

from delta.api.errors import InvalidCredential, MalformedCredential, MissingCredential
from delta.config import DeltaConfig, load_config
from delta.services.discord_service import DiscordAPIError, DiscordClient

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_config() -> DeltaConfig:
    return load_config()


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http


def get_discord(
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> DiscordClient:
    return DiscordClient(http, bot_token=os.getenv("BOT_TOKEN", "").strip() or None)


# ---------------------------------------------------------------------------
# Identity gate
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class AuthContext:
    """Who is calling, resolved fresh from Discord for this request only."""

    user: dict[str, Any]
    access_token: str

    @property
    def user_id(self) -> str:
        return str(self.user.get("id"))


def bearer_token(authorization: str | None) -> str:
    """Extract the credential from an ``Authorization: <scheme> <token>`` header."""
    if not authorization:
        raise MissingCredential()
    parts = authorization.split(" ")
    if len(parts) < 2 or not parts[1]:
        raise MalformedCredential()
    return parts[1]


async def get_auth_context(
    discord: Annotated[DiscordClient, Depends(get_discord)],
    authorization: Annotated[str | None, Header()] = None,
) -> AuthContext:
    """Validate the caller's Discord token against ``/users/@me``.

    Raises 401 if the header is missing or malformed (no Discord call is
    made) or if Discord rejects the token.
    """
    token = bearer_token(authorization)
    try:
        user = await discord.get_current_user(f"Bearer {token}")
    except DiscordAPIError as exc:
        logger.warning(
            "Discord token verification failed (%s): %s", exc.status_code, exc.payload or exc
        )
        raise InvalidCredential() from exc
    return AuthContext(user=user, access_token=token)
