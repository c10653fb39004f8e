"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Discord credentials must be present before the app reads them.
# ---------------------------------------------------------------------------
os.environ.setdefault("DISCORD_CLIENT_ID", "client-id")
os.environ.setdefault("DISCORD_CLIENT_SECRET", "client-secret")
os.environ.setdefault("DISCORD_REDIRECT_URI", "http://127.0.0.1:5500/callback")
os.environ.setdefault("BOT_TOKEN", "bot-secret")

from dataclasses import dataclass, field  # noqa: E402
from typing import Any  # noqa: E402
from urllib.parse import parse_qs  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from delta.database.models import Base  # noqa: E402


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with all Delta tables.

    Uses StaticPool so every thread (``run_db`` uses ``asyncio.to_thread``)
    shares the same in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


# ---------------------------------------------------------------------------
# Fake Discord API
# ---------------------------------------------------------------------------
def make_guild(
    guild_id: str,
    name: str | None = None,
    *,
    icon: str | None = None,
    permissions: int = 0,
) -> dict[str, Any]:
    return {
        "id": guild_id,
        "name": name or f"Guild {guild_id}",
        "icon": icon,
        "permissions": str(permissions),
    }


@dataclass
class FakeDiscord:
    """In-process stand-in for the Discord REST API.

    Served through :class:`httpx.MockTransport`; every request is recorded
    in ``calls`` so tests can assert what was (not) sent.
    """

    bot_token: str = "bot-secret"
    codes: dict[str, dict[str, Any]] = field(default_factory=dict)
    users: dict[str, dict[str, Any]] = field(default_factory=dict)
    user_guilds: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    bot_guilds: list[dict[str, Any]] = field(default_factory=list)
    guilds: dict[str, dict[str, Any]] = field(default_factory=dict)
    down: bool = False
    calls: list[httpx.Request] = field(default_factory=list)

    def add_user(self, token: str, user: dict[str, Any], guilds=()) -> None:
        self.users[token] = user
        self.user_guilds[token] = list(guilds)

    def _token(self, request: httpx.Request, scheme: str) -> str | None:
        header = request.headers.get("Authorization", "")
        prefix = f"{scheme} "
        return header[len(prefix):] if header.startswith(prefix) else None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.down:
            raise httpx.ConnectError("Discord is down", request=request)

        path = request.url.path
        unauthorized = httpx.Response(401, json={"message": "401: Unauthorized", "code": 0})

        if request.method == "POST" and path == "/api/oauth2/token":
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            token = self.codes.get(form.get("code", ""))
            if token is None:
                return httpx.Response(400, json={"error": "invalid_grant"})
            return httpx.Response(200, json=token)

        if path == "/api/users/@me":
            token = self._token(request, "Bearer")
            if token not in self.users:
                return unauthorized
            return httpx.Response(200, json=self.users[token])

        if path == "/api/users/@me/guilds":
            if self._token(request, "Bot") == self.bot_token:
                return httpx.Response(200, json=self.bot_guilds)
            token = self._token(request, "Bearer")
            if token not in self.user_guilds:
                return unauthorized
            return httpx.Response(200, json=self.user_guilds[token])

        if path.startswith("/api/guilds/"):
            if self._token(request, "Bot") != self.bot_token:
                return unauthorized
            guild = self.guilds.get(path.rsplit("/", 1)[-1])
            if guild is None:
                return httpx.Response(404, json={"message": "Unknown Guild", "code": 10004})
            return httpx.Response(200, json=guild)

        return httpx.Response(404, json={"message": "404: Not Found", "code": 0})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def discord_api() -> FakeDiscord:
    return FakeDiscord()


@pytest.fixture
def client(db_engine, discord_api):
    """FastAPI TestClient wired to the SQLite engine and the fake Discord API."""
    from fastapi.testclient import TestClient

    from delta.api.deps import get_engine, get_http_client
    from delta.api.main import app

    async def _http():
        async with discord_api.client() as http:
            yield http

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_http_client] = _http
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
