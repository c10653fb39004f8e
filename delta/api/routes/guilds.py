"""
delta.api.routes.guilds — Guild listing & guild info
======================================================
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from delta.api.deps import AuthContext, get_auth_context, get_discord
from delta.api.errors import GuildFetchFailed, GuildInfoFailed
from delta.engine.guilds import common_admin_guilds, guild_summary
from delta.services.discord_service import DiscordAPIError, DiscordClient

router = APIRouter(tags=["guilds"])
logger = logging.getLogger(__name__)


@router.get("/user/guilds")
async def list_user_guilds(
    ctx: AuthContext = Depends(get_auth_context),
    discord: DiscordClient = Depends(get_discord),
):
    """Guilds the caller administers that the bot has also joined."""
    try:
        user_guilds = await discord.get_user_guilds(ctx.access_token)
        bot_guilds = await discord.get_bot_guilds()
    except DiscordAPIError as exc:
        logger.error(
            "Error fetching guilds for user %s (%s): %s",
            ctx.user_id, exc.status_code, exc.payload or exc,
        )
        raise GuildFetchFailed() from exc

    return common_admin_guilds(user_guilds, bot_guilds)


@router.get("/guilds/{guild_id}")
async def get_guild_info(
    guild_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    discord: DiscordClient = Depends(get_discord),
):
    """Public metadata of one guild, read with the bot's credential.

    A guild Discord doesn't know about is reported like any other provider
    failure.
    """
    try:
        guild = await discord.get_guild(guild_id)
    except DiscordAPIError as exc:
        logger.error(
            "Error fetching guild %s info (%s): %s",
            guild_id, exc.status_code, exc.payload or exc,
        )
        raise GuildInfoFailed() from exc

    return guild_summary(guild)
