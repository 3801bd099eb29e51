"""
tests/conftest.py -- Shared test fixtures for Stavba integration tests.

This module provides:
  - make_test_engine(): an isolated named shared-memory SQLite engine with tables
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus a valid JWT for the pre-created test user

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the process.

The DEBUG env var must be set before any api import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: Set DEBUG before any api/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.pool import SingletonThreadPool

from api.main import app
from auth.store import UserStore
from auth.store import create_tables as create_user_tables
from auth.tokens import TokenService, hash_password
from billing.store import RecordStore, create_tables as create_billing_tables
from billing.store import invoice_store, zakazka_store
from core.db import create_db_engine

TEST_SECRET = "test-secret-key-0123456789abcdef0123456789abcdef"
TEST_USERNAME = "testuser"
TEST_PASSWORD = "testpass123"


def make_test_engine(db_name: str) -> Engine:
    """Create an engine on a named shared-memory SQLite DB with all tables."""
    engine = create_db_engine(
        f"sqlite:///file:stavba_{db_name}?mode=memory&cache=shared&uri=true",
        poolclass=SingletonThreadPool,
    )
    create_user_tables(engine)
    create_billing_tables(engine)
    return engine


@dataclass
class ApiContext:
    client: TestClient
    token: str
    user_id: int
    users: UserStore
    invoices: RecordStore
    zakazky: RecordStore
    tokens: TokenService

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def _patch_lifespan(engine: Engine, users: UserStore, invoices: RecordStore, zakazky: RecordStore, tokens: TokenService):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.engine = engine
        app.state.user_store = users
        app.state.invoices = invoices
        app.state.zakazky = zakazky
        app.state.tokens = tokens
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[ApiContext, None, None]:
    """Yield an ApiContext backed by a DB private to the requesting test module.

    The test user is created before the client starts and a token is issued
    for it with the same TokenService the app uses.
    """
    engine = make_test_engine(request.module.__name__.rsplit(".", 1)[-1])
    users = UserStore(engine)
    invoices = invoice_store(engine)
    zakazky = zakazka_store(engine)
    tokens = TokenService(TEST_SECRET)

    user = users.create_user(TEST_USERNAME, hash_password(TEST_PASSWORD))
    token = tokens.issue(user.id, user.username)

    app.router.lifespan_context = _patch_lifespan(engine, users, invoices, zakazky, tokens)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiContext(
            client=client,
            token=token,
            user_id=user.id,
            users=users,
            invoices=invoices,
            zakazky=zakazky,
            tokens=tokens,
        )

    engine.dispose()


@pytest.fixture
def memory_engine() -> Generator[Engine, None, None]:
    """Plain single-connection in-memory engine for store unit tests."""
    engine = create_db_engine("sqlite:///:memory:")
    create_user_tables(engine)
    create_billing_tables(engine)
    yield engine
    engine.dispose()
