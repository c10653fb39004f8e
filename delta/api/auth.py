"""
delta.api.auth — Discord OAuth2 code exchange
===============================================

The dashboard front-end runs the Discord consent screen itself and posts
the resulting one-time ``code`` here.  We trade it for an access token,
resolve the user, and hand both back.  The token is not stored; the
front-end presents it as a Bearer credential on every later request.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import APIRouter, Body, Depends

from delta.api.deps import AuthContext, get_auth_context, get_discord
from delta.api.errors import MissingCode, OAuthExchangeFailed
from delta.services.discord_service import DiscordAPIError, DiscordClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _oauth_env() -> tuple[str, str, str]:
    """Return the OAuth env vars or fail the exchange with a logged reason."""
    client_id = os.getenv("DISCORD_CLIENT_ID", "").strip()
    client_secret = os.getenv("DISCORD_CLIENT_SECRET", "").strip()
    redirect_uri = os.getenv("DISCORD_REDIRECT_URI", "").strip()

    missing = []
    if not client_id:
        missing.append("DISCORD_CLIENT_ID")
    if not client_secret:
        missing.append("DISCORD_CLIENT_SECRET")
    if not redirect_uri:
        missing.append("DISCORD_REDIRECT_URI")

    if missing:
        logger.error("Discord OAuth is not configured: missing %s", ", ".join(missing))
        raise OAuthExchangeFailed()

    return client_id, client_secret, redirect_uri


@router.post("/discord")
async def exchange_code(
    body: dict[str, Any] | None = Body(None),
    discord: DiscordClient = Depends(get_discord),
):
    """Exchange an OAuth ``code`` for ``{access_token, user}``."""
    code = (body or {}).get("code")
    if not code or not isinstance(code, str):
        raise MissingCode()

    client_id, client_secret, redirect_uri = _oauth_env()

    try:
        token = await discord.exchange_code(
            code,
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
        )
        access_token = token["access_token"]
        token_type = token.get("token_type") or "Bearer"
        user = await discord.get_current_user(f"{token_type} {access_token}")
    except DiscordAPIError as exc:
        logger.error("Discord OAuth error (%s): %s", exc.status_code, exc.payload or exc)
        raise OAuthExchangeFailed() from exc

    logger.info("Discord login for user %s", user.get("id"))
    return {"access_token": access_token, "user": user}


@router.get("/me")
async def me(ctx: AuthContext = Depends(get_auth_context)):
    """Return the Discord identity behind the caller's token."""
    return ctx.user
