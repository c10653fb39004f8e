"""
delta.config — YAML Configuration Loader
==========================================

Reads ``config.yaml`` for the **non-secret** settings of the dashboard API
(port, CORS allow-list, timeouts, pool size).  Secrets (Discord client
credentials, the bot token and ``DATABASE_URL``) stay in the environment
(``.env``) and are never read from YAML.

Usage::

    from delta.config import load_config

    cfg = load_config()             # reads ./config.yaml by default
    print(cfg.dashboard_port)       # 3000
    print(cfg.allowed_origins)      # ('http://127.0.0.1:5500', ...)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from delta.constants import DEFAULT_ALLOWED_ORIGINS


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class DeltaConfig:
    """Immutable configuration loaded from ``config.yaml``.

    Every field has a default so the API can start without a config file.
    """

    # HTTP
    dashboard_port: int = 3000
    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS

    # Outbound Discord calls
    http_timeout_seconds: float = 10.0

    # Database
    db_pool_size: int = 5


def _origins_from_env() -> tuple[str, ...] | None:
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if not raw:
        return None
    return tuple(o.strip().rstrip("/") for o in raw.split(",") if o.strip())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> DeltaConfig:
    """Read *path* and return a :class:`DeltaConfig` instance.

    A missing file yields the defaults.  ``CORS_ALLOW_ORIGINS``
    (comma-separated) in the environment overrides ``allowed_origins``.

    Raises
    ------
    ValueError
        If the YAML document is not a mapping.
    """
    config_path = Path(path)
    raw: dict = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
        if loaded is not None and not isinstance(loaded, dict):
            raise ValueError(
                f"{config_path.resolve()} must contain a YAML mapping, "
                f"got {type(loaded).__name__}"
            )
        raw = loaded or {}

    defaults = DeltaConfig()
    origins = _origins_from_env()
    if origins is None:
        origins = tuple(raw.get("allowed_origins", defaults.allowed_origins))

    return DeltaConfig(
        dashboard_port=int(raw.get("dashboard_port", defaults.dashboard_port)),
        allowed_origins=origins,
        http_timeout_seconds=float(
            raw.get("http_timeout_seconds", defaults.http_timeout_seconds)
        ),
        db_pool_size=int(raw.get("db_pool_size", defaults.db_pool_size)),
    )
