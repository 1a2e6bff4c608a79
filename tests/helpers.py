"""Request helpers and settings shared by the API tests."""

from contextlib import asynccontextmanager

import httpx
from asgi_lifespan import LifespanManager

from config.settings import Settings
from main import create_app

BASE = "/v1/accounts"
TEST_SECRET = "test-secret"


def make_settings(**overrides) -> Settings:
    values = dict(
        env="development",
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret=TEST_SECRET,
        jwt_expiry_seconds=3600,
        session_cookie_enabled=True,
        argon2_time_cost=1,
        argon2_memory_cost=8,
        argon2_parallelism=1,
    )
    values.update(overrides)
    return Settings(**values)


@asynccontextmanager
async def running_app(settings: Settings):
    app = create_app(settings)
    async with LifespanManager(app):
        yield app


def client_for(app) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://testserver")


@asynccontextmanager
async def running_client(settings: Settings):
    async with running_app(settings) as app:
        async with client_for(app) as client:
            yield client


async def register(client, **overrides) -> httpx.Response:
    body = {"username": "alice", "email": "alice@x.com", "password": "secret123"}
    body.update(overrides)
    return await client.post(f"{BASE}/auth/register", json=body)


async def login(client, username_or_email="alice", password="secret123") -> httpx.Response:
    return await client.post(
        f"{BASE}/auth/login",
        json={"usernameOrEmail": username_or_email, "password": password},
    )


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def set_cookie_attributes(response: httpx.Response) -> list:
    header = response.headers["set-cookie"]
    return [part.strip().lower() for part in header.split(";")[1:]]
