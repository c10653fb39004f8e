"""
delta.engine.guilds — Guild Filtering & Presentation
======================================================

Pure functions over the guild objects returned by the Discord API.  No I/O
happens here, so everything is unit-testable with plain dicts.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from delta.constants import ADMINISTRATOR_PERMISSION, DISCORD_CDN


def has_administrator(permissions: int | str | None) -> bool:
    """True iff the Administrator bit is set in *permissions*.

    Discord sends ``permissions`` as a decimal string on user guild objects;
    anything that doesn't parse counts as no permissions.
    """
    try:
        value = int(permissions or 0)
    except (TypeError, ValueError):
        return False
    return value & ADMINISTRATOR_PERMISSION == ADMINISTRATOR_PERMISSION


def icon_url(guild_id: str, icon: str | None) -> str | None:
    """CDN URL for a guild icon, or ``None`` when the guild has no icon."""
    if not icon:
        return None
    return f"{DISCORD_CDN}/icons/{guild_id}/{icon}.png"


def guild_summary(guild: dict[str, Any]) -> dict[str, Any]:
    """Project a Discord guild object onto ``{id, name, icon_url}``."""
    return {
        "id": guild["id"],
        "name": guild.get("name"),
        "icon_url": icon_url(guild["id"], guild.get("icon")),
    }


def common_admin_guilds(
    user_guilds: Iterable[dict[str, Any]],
    bot_guilds: Iterable[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Guilds the user administers that the bot is also a member of.

    Keeps the order of *user_guilds*.
    """
    bot_ids = {g["id"] for g in bot_guilds}
    return [
        guild_summary(g)
        for g in user_guilds
        if g["id"] in bot_ids and has_administrator(g.get("permissions"))
    ]


def is_guild_admin(user_guilds: Iterable[dict[str, Any]], guild_id: str) -> bool:
    """True if *guild_id* is in *user_guilds* with the Administrator bit."""
    return any(
        g["id"] == guild_id and has_administrator(g.get("permissions"))
        for g in user_guilds
    )
