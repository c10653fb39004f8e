"""
delta.services.settings_service — Economy Settings Store
==========================================================

Typed read/write access to the ``server_settings`` table, one row per
guild.  Reads never create rows; a guild with no row gets
:data:`DEFAULT_ECONOMY`.  Writes are a single atomic upsert keyed by
``guild_id`` that overwrites all three fields (last write wins).

All functions are synchronous; call them through
:func:`delta.database.engine.run_db` from async code.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from sqlalchemy import Engine
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.orm import Session

from delta.constants import (
    DEFAULT_WORK_COOLDOWN,
    DEFAULT_WORK_MAX_AMOUNT,
    DEFAULT_WORK_MIN_AMOUNT,
)
from delta.database.engine import get_session
from delta.database.models import ServerSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EconomySettings:
    """The three economy knobs the dashboard can edit."""

    work_cooldown: int
    work_min_amount: int
    work_max_amount: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


DEFAULT_ECONOMY = EconomySettings(
    work_cooldown=DEFAULT_WORK_COOLDOWN,
    work_min_amount=DEFAULT_WORK_MIN_AMOUNT,
    work_max_amount=DEFAULT_WORK_MAX_AMOUNT,
)

_FIELDS = ("work_cooldown", "work_min_amount", "work_max_amount")


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def get_economy_settings(engine: Engine, guild_id: str) -> EconomySettings | None:
    """Return the stored settings for *guild_id*, or ``None`` if no row exists."""
    with Session(engine) as session:
        row = session.get(ServerSettings, guild_id)
        if row is None:
            return None
        return EconomySettings(
            work_cooldown=row.work_cooldown,
            work_min_amount=row.work_min_amount,
            work_max_amount=row.work_max_amount,
        )


def get_effective_economy_settings(engine: Engine, guild_id: str) -> EconomySettings:
    """Stored settings for *guild_id*, falling back to :data:`DEFAULT_ECONOMY`.

    The defaults are only returned, never persisted.
    """
    stored = get_economy_settings(engine, guild_id)
    return stored if stored is not None else DEFAULT_ECONOMY


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def _upsert_statement(dialect_name: str, values: dict):
    """Build an insert-or-overwrite statement for the engine's dialect."""
    if dialect_name in ("mysql", "mariadb"):
        stmt = mysql.insert(ServerSettings).values(**values)
        return stmt.on_duplicate_key_update(
            {field: stmt.inserted[field] for field in _FIELDS}
        )

    if dialect_name == "postgresql":
        stmt = postgresql.insert(ServerSettings).values(**values)
    elif dialect_name == "sqlite":
        stmt = sqlite.insert(ServerSettings).values(**values)
    else:
        raise NotImplementedError(f"No upsert support for dialect {dialect_name!r}")

    return stmt.on_conflict_do_update(
        index_elements=[ServerSettings.guild_id],
        set_={field: stmt.excluded[field] for field in _FIELDS},
    )


def upsert_economy_settings(
    engine: Engine,
    guild_id: str,
    settings: EconomySettings,
) -> None:
    """Insert or fully overwrite the settings row for *guild_id*.

    Raises whatever SQLAlchemy raises on failure; the transaction is rolled
    back so no partial row is ever left behind.
    """
    values = {"guild_id": guild_id, **settings.to_dict()}
    stmt = _upsert_statement(engine.dialect.name, values)
    with get_session(engine) as session:
        session.execute(stmt)
    logger.info(
        "Economy settings saved for guild %s: cooldown=%d min=%d max=%d",
        guild_id,
        settings.work_cooldown,
        settings.work_min_amount,
        settings.work_max_amount,
    )
