"""
delta.services.discord_service — Discord REST API Client
==========================================================

Thin async wrapper around the handful of Discord endpoints the dashboard
needs.  One :class:`httpx.AsyncClient` is shared for the whole process
(opened in the API lifespan) and handed to :class:`DiscordClient`.

Every failure (transport error, non-2xx status, undecodable or
wrongly shaped body) is raised as :class:`DiscordAPIError`.  The
provider's status and payload are kept on the exception for server-side
logging only.  Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from delta.constants import DISCORD_API, OAUTH_SCOPE

logger = logging.getLogger(__name__)


class DiscordAPIError(Exception):
    """A call to the Discord API did not produce a usable response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


def _payload(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _expect_object(data: Any, what: str) -> dict[str, Any]:
    """*data* must be a JSON object carrying an ``id``."""
    if not isinstance(data, dict) or "id" not in data:
        raise DiscordAPIError(f"Unexpected {what} payload", payload=data)
    return data


def _expect_guild_list(data: Any) -> list[dict[str, Any]]:
    if not isinstance(data, list):
        raise DiscordAPIError("Unexpected guild list payload", payload=data)
    for guild in data:
        _expect_object(guild, "guild")
    return data


class DiscordClient:
    """Calls the Discord REST API on behalf of users and the bot.

    Parameters
    ----------
    http:
        Shared async HTTP client.  Its timeout is the only per-call limit.
    bot_token:
        The bot's static secret, used for ``Bot`` authorization.
    api_base:
        Base URL of the REST API (overridable for tests).
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        bot_token: str | None = None,
        api_base: str = DISCORD_API,
    ) -> None:
        self.http = http
        self.bot_token = bot_token
        self.api_base = api_base.rstrip("/")

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------
    async def _request(
        self,
        method: str,
        path: str,
        *,
        authorization: str | None = None,
        **kwargs: Any,
    ) -> Any:
        headers = {"Authorization": authorization} if authorization else {}
        try:
            resp = await self.http.request(
                method, f"{self.api_base}{path}", headers=headers, **kwargs
            )
        except httpx.HTTPError as exc:
            raise DiscordAPIError(f"{method} {path}: {exc!r}") from exc

        if not resp.is_success:
            raise DiscordAPIError(
                f"{method} {path} returned {resp.status_code}",
                status_code=resp.status_code,
                payload=_payload(resp),
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise DiscordAPIError(
                f"{method} {path} returned a non-JSON body",
                status_code=resp.status_code,
                payload=resp.text,
            ) from exc

    def _bot_authorization(self) -> str:
        if not self.bot_token:
            raise DiscordAPIError("BOT_TOKEN is not configured")
        return f"Bot {self.bot_token}"

    # ------------------------------------------------------------------
    # OAuth2
    # ------------------------------------------------------------------
    async def exchange_code(
        self,
        code: str,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
    ) -> dict[str, Any]:
        """Trade a one-time authorization *code* for an access token.

        Returns the token response (``access_token``, ``token_type``, …).
        """
        data = await self._request(
            "POST",
            "/oauth2/token",
            data={
                "client_id": client_id,
                "client_secret": client_secret,
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "scope": OAUTH_SCOPE,
            },
        )
        if not isinstance(data, dict) or not data.get("access_token"):
            raise DiscordAPIError("Token response has no access_token", payload=data)
        return data

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    async def get_current_user(self, authorization: str) -> dict[str, Any]:
        """``GET /users/@me`` with a full Authorization header value."""
        data = await self._request("GET", "/users/@me", authorization=authorization)
        return _expect_object(data, "user")

    async def get_user_guilds(self, access_token: str) -> list[dict[str, Any]]:
        """Guilds of the user owning *access_token*, with permission bitmasks."""
        data = await self._request(
            "GET", "/users/@me/guilds", authorization=f"Bearer {access_token}"
        )
        return _expect_guild_list(data)

    async def get_bot_guilds(self) -> list[dict[str, Any]]:
        """Guilds the bot has joined."""
        data = await self._request(
            "GET", "/users/@me/guilds", authorization=self._bot_authorization()
        )
        return _expect_guild_list(data)

    # ------------------------------------------------------------------
    # Guilds
    # ------------------------------------------------------------------
    async def get_guild(self, guild_id: str) -> dict[str, Any]:
        """Public metadata of one guild, read with the bot's credential."""
        data = await self._request(
            "GET", f"/guilds/{guild_id}", authorization=self._bot_authorization()
        )
        return _expect_object(data, "guild")
