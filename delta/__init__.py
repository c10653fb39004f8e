"""
Delta — Dashboard Backend for the Delta Discord Bot
=====================================================
Lets the web dashboard sign users in with Discord OAuth2, list the guilds
they administer alongside the bot, and edit per-guild economy settings.

Package layout::

    delta/
    ├── __main__.py        # ``python -m delta`` → uvicorn
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Discord endpoints, permission bits, defaults
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # server_settings table
    ├── engine/
    │   └── guilds.py      # Admin-bit filter, icon URLs, common guilds
    ├── services/
    │   ├── discord_service.py   # httpx client for the Discord REST API
    │   └── settings_service.py  # Economy settings read / upsert
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Dependency providers + Discord identity gate
        ├── errors.py      # Error taxonomy → JSON bodies
        ├── auth.py        # Discord OAuth2 code exchange
        └── routes/        # Guild + settings endpoints
"""

__version__ = "0.1.0"
