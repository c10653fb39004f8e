"""
delta.database.models — SQLAlchemy 2.0 Data Models
====================================================

Tables:
- server_settings — Per-guild economy tuning (one row per guild at most)
"""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Delta ORM models."""


# ---------------------------------------------------------------------------
# ServerSettings — per-guild economy configuration
# ---------------------------------------------------------------------------
class ServerSettings(Base):
    """Economy settings for one guild.

    Rows are only created by an explicit write from the dashboard.  A guild
    without a row uses the defaults in :mod:`delta.constants`.
    """
    __tablename__ = "server_settings"

    # Discord snowflake, kept as a string exactly as the API returns it.
    guild_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    work_cooldown: Mapped[int] = mapped_column(Integer, nullable=False)
    work_min_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    work_max_amount: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<ServerSettings guild={self.guild_id!r} "
            f"cooldown={self.work_cooldown} "
            f"amount={self.work_min_amount}..{self.work_max_amount}>"
        )
