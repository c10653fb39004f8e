"""
delta.database.engine — Database Connection & Async Helper
============================================================

The API runs on an ``asyncio`` event loop while SQLAlchemy + psycopg2 is
**synchronous**.  Calling the DB directly from a route would stall every
other in-flight request until the query returns.

Every DB call therefore goes through :func:`run_db`, which ships the
synchronous function to a worker thread with ``asyncio.to_thread()`` and
awaits the result.  The engine's connection pool is the only state shared
between requests; its size is fixed (no overflow), so under load callers
queue for a connection instead of opening new ones.

Usage::

    from delta.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    # Inside an async route:
    row = await run_db(get_economy_settings, engine, guild_id)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine, make_url
from sqlalchemy.orm import Session

from delta.constants import UPSERT_DIALECTS
from delta.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine(pool_size: int = 5) -> Engine:
    """Build a SQLAlchemy :class:`Engine` from the ``DATABASE_URL`` env var.

    * ``pool_size`` — persistent connections, also the hard upper bound
      (``max_overflow=0``).
    * ``pool_timeout=30`` — how long a request waits for a free connection.
    * ``pool_recycle=3600`` — recycle connections after 1 hour.

    Raises
    ------
    RuntimeError
        If ``DATABASE_URL`` is not set, or names a backend the settings
        upsert does not support.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a valid database URL."
        )

    backend = make_url(url).get_backend_name()
    if backend not in UPSERT_DIALECTS:
        supported = ", ".join(sorted(UPSERT_DIALECTS))
        raise RuntimeError(
            f"DATABASE_URL backend {backend!r} is not supported; use one of: {supported}"
        )

    if backend == "sqlite":
        # SQLite has no server-side pool to bound.
        engine = create_engine(url, echo=False)
    else:
        engine = create_engine(
            url,
            echo=False,
            pool_size=pool_size,
            max_overflow=0,
            pool_pre_ping=True,   # Reconnect stale connections automatically
            pool_timeout=30,
            pool_recycle=3600,
        )
    logger.info("Database engine created → %s", engine.url.host or engine.url.database)
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create all tables defined in :mod:`delta.database.models`.

    Safe to call on every startup: ``CREATE TABLE IF NOT EXISTS`` under
    the hood.  No default rows are seeded.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Yield a :class:`Session` that auto-commits on success and rolls back
    on exception.

    Usage::

        with get_session(engine) as session:
            session.execute(stmt)
            # commit happens automatically on block exit
    """
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** database function on a background thread.

    Every DB call in a route should go through this wrapper::

        result = await run_db(my_sync_db_function, engine, guild_id)

    Parameters
    ----------
    func:
        Any sync callable (typically a function that opens a session and
        runs queries).
    *args, **kwargs:
        Forwarded to *func*.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
