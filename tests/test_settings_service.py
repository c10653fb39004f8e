"""
tests/test_settings_service.py — Economy Settings Store Tests
===============================================================

Uses an in-memory SQLite database via the shared conftest fixtures; the
PostgreSQL and MySQL upsert statements are checked by compiling them.
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.dialects import mysql, postgresql
from sqlalchemy.orm import Session

from delta.database.models import ServerSettings
from delta.services.settings_service import (
    DEFAULT_ECONOMY,
    EconomySettings,
    _upsert_statement,
    get_economy_settings,
    get_effective_economy_settings,
    upsert_economy_settings,
)


def _row_count(engine) -> int:
    with Session(engine) as session:
        return session.scalar(select(func.count()).select_from(ServerSettings))


class TestReads:
    def test_missing_row_is_none(self, db_engine):
        assert get_economy_settings(db_engine, "1") is None

    def test_defaults(self, db_engine):
        settings = get_effective_economy_settings(db_engine, "1")
        assert settings == DEFAULT_ECONOMY
        assert settings.to_dict() == {
            "work_cooldown": 3600,
            "work_min_amount": 10,
            "work_max_amount": 100,
        }

    def test_defaults_are_not_persisted(self, db_engine):
        get_effective_economy_settings(db_engine, "1")
        assert _row_count(db_engine) == 0


class TestUpsert:
    def test_insert_then_read(self, db_engine):
        settings = EconomySettings(120, 5, 50)
        upsert_economy_settings(db_engine, "1", settings)
        assert get_economy_settings(db_engine, "1") == settings

    def test_overwrite_is_full(self, db_engine):
        upsert_economy_settings(db_engine, "1", EconomySettings(120, 5, 50))
        upsert_economy_settings(db_engine, "1", EconomySettings(60, 0, 1))

        assert get_economy_settings(db_engine, "1") == EconomySettings(60, 0, 1)
        assert _row_count(db_engine) == 1

    def test_one_row_per_guild(self, db_engine):
        upsert_economy_settings(db_engine, "1", EconomySettings(1, 2, 3))
        upsert_economy_settings(db_engine, "2", EconomySettings(4, 5, 6))

        assert _row_count(db_engine) == 2
        assert get_economy_settings(db_engine, "1") == EconomySettings(1, 2, 3)
        assert get_economy_settings(db_engine, "2") == EconomySettings(4, 5, 6)


class TestUpsertDialects:
    VALUES = {"guild_id": "1", "work_cooldown": 1, "work_min_amount": 2, "work_max_amount": 3}

    def test_postgresql_on_conflict(self):
        stmt = _upsert_statement("postgresql", self.VALUES)
        sql = str(stmt.compile(dialect=postgresql.dialect()))
        assert "ON CONFLICT (guild_id) DO UPDATE" in sql
        assert "work_max_amount = excluded.work_max_amount" in sql

    def test_mysql_on_duplicate_key(self):
        stmt = _upsert_statement("mysql", self.VALUES)
        sql = str(stmt.compile(dialect=mysql.dialect()))
        assert "ON DUPLICATE KEY UPDATE" in sql
        assert "work_cooldown" in sql.split("ON DUPLICATE KEY UPDATE")[1]

    def test_unknown_dialect(self):
        with pytest.raises(NotImplementedError):
            _upsert_statement("oracle", self.VALUES)
