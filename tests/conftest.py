"""Pytest configuration and shared fixtures for storage tests."""

import os
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Set config before package imports so the module-level engine never needs a server
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from oauth_sqlstore.db.session import create_engine, init_db
from oauth_sqlstore.schemas.oauth import AccessToken, AuthorizationGrant, Client
from oauth_sqlstore.services.storage import SQLStorage

CREATED_AT = datetime(2015, 3, 2, 6, 30, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite database file per test, foreign keys enforced, tables created."""
    eng = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'oauth.db'}", echo=False)
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def storage(session_maker):
    return SQLStorage(session_maker, timeout=None)


@pytest.fixture
def select_log(engine):
    """List of SELECT statements issued on the engine after the fixture is requested."""
    statements: list[str] = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT"):
            statements.append(statement)

    event.listen(engine.sync_engine, "before_cursor_execute", _record)
    yield statements
    event.remove(engine.sync_engine, "before_cursor_execute", _record)


@pytest_asyncio.fixture
async def oauth_client(storage):
    """Client stored with user data, returned as saved."""
    client = Client(id="testclient", secret="testsecret", redirect_uri="testredirect", user_data="testuserid")
    await storage.set_client(client)
    return client


@pytest_asyncio.fixture
async def grant(storage, oauth_client):
    grant = AuthorizationGrant(
        code="testcode",
        expires_in=100,
        scope="testscope",
        redirect_uri="testredirect",
        state="teststate",
        created_at=CREATED_AT,
        client=oauth_client,
    )
    await storage.save_authorize(grant)
    return grant


def make_token(
    access: str,
    refresh: str | None,
    client: Client,
    grant: AuthorizationGrant | None = None,
    previous: AccessToken | None = None,
    **fields,
) -> AccessToken:
    fields.setdefault("expires_in", 100)
    fields.setdefault("scope", "testscope")
    fields.setdefault("redirect_uri", "testredirect")
    fields.setdefault("created_at", CREATED_AT)
    return AccessToken(
        access_token=access,
        refresh_token=refresh,
        client=client,
        authorization_grant=grant,
        previous_access_token=previous,
        **fields,
    )
