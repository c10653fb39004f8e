"""
delta.constants — Shared Constants
====================================

Discord endpoints, permission bits and economy defaults.  Import from here
instead of repeating literals in routes and services.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Discord REST API
# ---------------------------------------------------------------------------
DISCORD_API = "https://discord.com/api"
DISCORD_CDN = "https://cdn.discordapp.com"

OAUTH_SCOPE = "identify guilds"

# Bit 3 of the guild permission bitmask.
ADMINISTRATOR_PERMISSION = 0x8

# ---------------------------------------------------------------------------
# Economy defaults — returned when a guild has no server_settings row.
# Never written back to the database.
# ---------------------------------------------------------------------------
DEFAULT_WORK_COOLDOWN = 3600
DEFAULT_WORK_MIN_AMOUNT = 10
DEFAULT_WORK_MAX_AMOUNT = 100

# server_settings columns are 32-bit signed INTEGER.
MAX_SETTING_VALUE = 2**31 - 1

# Backends with an atomic insert-or-update statement for server_settings.
UPSERT_DIALECTS = frozenset({"postgresql", "mysql", "mariadb", "sqlite"})

# ---------------------------------------------------------------------------
# Cross-origin allow-list
# ---------------------------------------------------------------------------
DEFAULT_ALLOWED_ORIGINS: tuple[str, ...] = (
    "http://127.0.0.1:5500",
    "https://project-delta.fr",
)
