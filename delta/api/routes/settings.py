"""
delta.api.routes.settings — Per-guild economy settings
========================================================

Both routes re-check on every request that the caller holds the
Administrator bit in the target guild, using the caller's own guild list.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field, StrictInt, ValidationError
from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from delta.api.deps import AuthContext, get_auth_context, get_discord, get_engine
from delta.api.errors import (
    Forbidden,
    GuildFetchFailed,
    InvalidSettings,
    PersistenceFailed,
    SettingsFetchFailed,
)
from delta.constants import MAX_SETTING_VALUE
from delta.database.engine import run_db
from delta.engine.guilds import is_guild_admin
from delta.services import settings_service
from delta.services.discord_service import DiscordAPIError, DiscordClient
from delta.services.settings_service import EconomySettings

router = APIRouter(prefix="/guilds/{guild_id}/settings", tags=["settings"])
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class EconomySettingsUpdate(BaseModel):
    """All three fields are required and must fit the INTEGER columns.

    min > max is accepted as given.
    """

    work_cooldown: StrictInt = Field(ge=0, le=MAX_SETTING_VALUE)
    work_min_amount: StrictInt = Field(ge=0, le=MAX_SETTING_VALUE)
    work_max_amount: StrictInt = Field(ge=0, le=MAX_SETTING_VALUE)


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------
async def require_guild_admin(
    guild_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    discord: DiscordClient = Depends(get_discord),
) -> AuthContext:
    """Fail with 403 unless the caller administers *guild_id*."""
    try:
        user_guilds = await discord.get_user_guilds(ctx.access_token)
    except DiscordAPIError as exc:
        logger.error(
            "Admin check for guild %s failed (%s): %s",
            guild_id, exc.status_code, exc.payload or exc,
        )
        raise GuildFetchFailed() from exc

    if not is_guild_admin(user_guilds, guild_id):
        logger.warning("User %s is not an administrator of guild %s", ctx.user_id, guild_id)
        raise Forbidden()
    return ctx


# ---------------------------------------------------------------------------
# Economy
# ---------------------------------------------------------------------------
@router.get("/economy")
async def get_economy_settings(
    guild_id: str,
    ctx: AuthContext = Depends(require_guild_admin),
    engine: Engine = Depends(get_engine),
):
    try:
        settings = await run_db(
            settings_service.get_effective_economy_settings, engine, guild_id
        )
    except SQLAlchemyError:
        logger.exception("Error fetching economy settings for guild %s", guild_id)
        raise SettingsFetchFailed()
    return settings.to_dict()


@router.post("/economy")
async def update_economy_settings(
    guild_id: str,
    body: dict[str, Any] | None = Body(None),
    ctx: AuthContext = Depends(get_auth_context),
    discord: DiscordClient = Depends(get_discord),
    engine: Engine = Depends(get_engine),
):
    """Overwrite all three economy settings for *guild_id*."""
    try:
        update = EconomySettingsUpdate.model_validate(body or {})
    except ValidationError as exc:
        logger.info("Rejected economy settings for guild %s: %s", guild_id, exc.errors())
        raise InvalidSettings() from exc

    await require_guild_admin(guild_id, ctx, discord)

    settings = EconomySettings(**update.model_dump())
    try:
        await run_db(settings_service.upsert_economy_settings, engine, guild_id, settings)
    except SQLAlchemyError:
        logger.exception("Error saving economy settings for guild %s", guild_id)
        raise PersistenceFailed()

    return {"message": "Economy settings updated successfully!"}
