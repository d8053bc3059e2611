"""Tests for client storage: set, get, remove."""

from unittest.mock import patch

import pytest
from cryptography.fernet import Fernet

from conftest import make_token
from oauth_sqlstore.config import settings
from oauth_sqlstore.core.errors import Conflict, MalformedPayload, NotFound
from oauth_sqlstore.models import OAuthClient
from oauth_sqlstore.schemas.oauth import Client


@pytest.mark.asyncio
async def test_set_and_get_client(storage):
    client = Client(id="c1", secret="s", redirect_uri="http://x", user_data={"owner": "alice", "tier": 2})
    await storage.set_client(client)
    loaded = await storage.get_client("c1")
    assert loaded == client


@pytest.mark.asyncio
async def test_client_without_user_data_loads_absent_payload(storage):
    await storage.set_client(Client(id="c1", secret="s", redirect_uri="http://x"))
    loaded = await storage.get_client("c1")
    assert loaded.user_data is None


@pytest.mark.asyncio
async def test_duplicate_client_conflicts_and_keeps_first(storage):
    await storage.set_client(Client(id="c1", secret="first", redirect_uri="http://x"))
    with pytest.raises(Conflict) as exc_info:
        await storage.set_client(Client(id="c1", secret="second", redirect_uri="http://y"))
    assert exc_info.value.operation == "set_client"
    loaded = await storage.get_client("c1")
    assert loaded.secret == "first"
    assert loaded.redirect_uri == "http://x"


@pytest.mark.asyncio
async def test_get_missing_client(storage):
    with pytest.raises(NotFound) as exc_info:
        await storage.get_client("nope")
    assert exc_info.value.operation == "get_client"
    assert str(exc_info.value).startswith("get_client: ")


@pytest.mark.asyncio
async def test_remove_client(storage, oauth_client):
    await storage.remove_client(oauth_client.id)
    with pytest.raises(NotFound):
        await storage.get_client(oauth_client.id)


@pytest.mark.asyncio
async def test_remove_missing_client(storage):
    with pytest.raises(NotFound):
        await storage.remove_client("nope")


@pytest.mark.asyncio
async def test_remove_client_referenced_by_token_is_rejected(storage, oauth_client):
    await storage.save_access(make_token("t1", "r1", oauth_client))
    with pytest.raises(Conflict) as exc_info:
        await storage.remove_client(oauth_client.id)
    assert exc_info.value.operation == "remove_client"
    # nothing cascaded
    token = await storage.load_access("t1")
    assert token.client.id == oauth_client.id


@pytest.mark.asyncio
async def test_remove_client_referenced_by_grant_is_rejected(storage, grant):
    with pytest.raises(Conflict):
        await storage.remove_client(grant.client.id)
    assert (await storage.load_authorize(grant.code)).client.id == grant.client.id


@pytest.mark.asyncio
async def test_secret_encrypted_at_rest(storage, session_maker):
    key = Fernet.generate_key().decode()
    with patch.object(settings, "encryption_key", key):
        await storage.set_client(Client(id="c1", secret="s3cret", redirect_uri="http://x"))
        async with session_maker() as session:
            row = await session.get(OAuthClient, "c1")
        assert row.secret != "s3cret"
        loaded = await storage.get_client("c1")
    assert loaded.secret == "s3cret"


@pytest.mark.asyncio
async def test_malformed_stored_user_data(storage, session_maker):
    async with session_maker() as session:
        session.add(OAuthClient(id="bad", secret="", redirect_uri="", user_data="{not json"))
        await session.commit()
    with pytest.raises(MalformedPayload) as exc_info:
        await storage.get_client("bad")
    assert exc_info.value.operation == "get_client"
