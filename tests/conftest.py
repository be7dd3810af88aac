"""
tests/conftest.py -- Shared test fixtures for ReliefMap.

This module provides:
  - user_store / resource_store: fresh in-memory stores for unit tests
  - _make_test_stores(): isolated named shared-memory DBs for API tests
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient over the real app with isolated stores
  - make_token: mints a session token for an arbitrary identity

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for API tests because TestClient runs route handlers in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

DEBUG and BCRYPT_ROUNDS must be set before any auth/core import:
get_settings() auto-generates SECRET_KEY in dev mode instead of raising, and
the minimum bcrypt cost keeps the suite fast.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set before any auth/core import (settings are read at import time).
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.store import UserStore
from auth.tokens import create_access_token
from directory.store import ResourceStore

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, ResourceStore]:
    """Create named shared-memory SQLite stores unique to db_suffix."""
    url = f"sqlite:///file:test_reliefmap_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(url), ResourceStore(url)


def _patch_lifespan(user_store: UserStore, resource_store: ResourceStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.resource_store = resource_store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Unit-test stores
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def resource_store() -> Generator[ResourceStore, None, None]:
    store = ResourceStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def make_token():
    """Return a factory for valid session tokens (no user row required)."""

    def _make(user_id: str = "a" * 32, email: str = "volunteer@example.org") -> str:
        return create_access_token(user_id, email)

    return _make


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


@pytest.fixture
def api_client() -> Generator[tuple[TestClient, UserStore, ResourceStore], None, None]:
    """Yield (client, user_store, resource_store) over fresh, isolated databases.

    The stores are returned alongside the client so tests can play the
    moderator, who writes status directly rather than through HTTP.
    """
    user_store, resource_store = _make_test_stores(uuid.uuid4().hex)
    app.router.lifespan_context = _patch_lifespan(user_store, resource_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, user_store, resource_store

    resource_store.close()
    user_store.close()
