"""Shared fixtures: fake pool wired into the app + an ASGI test client.

The pool dependency is overridden, so the lifespan (real asyncpg pool) never runs.
"""

from __future__ import annotations

import pytest

from core import db
from core.config import Settings
from main import create_app

from fakes import FakePool, build_client, make_rows


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def fake_pool() -> FakePool:
    return FakePool(make_rows(25))


@pytest.fixture
def app(settings, fake_pool):
    application = create_app(settings)
    application.dependency_overrides[db.get_pool] = lambda: fake_pool
    return application


@pytest.fixture
async def client(app):
    async with build_client(app) as ac:
        yield ac
