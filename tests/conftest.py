"""
Shared fixtures: an isolated in-memory database per test and an HTTP client
bound to a freshly built application.
"""

import pytest
import pytest_asyncio

from database.migrations import run_migrations
from database.session import build_engine, build_session_factory
from helpers import client_for, make_settings, running_app


@pytest.fixture
def settings():
    return make_settings()


@pytest_asyncio.fixture
async def app(settings):
    async with running_app(settings) as application:
        yield application


@pytest_asyncio.fixture
async def client(app):
    async with client_for(app) as c:
        yield c


@pytest_asyncio.fixture
async def engine():
    eng = build_engine("sqlite+aiosqlite:///:memory:")
    await run_migrations(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)
