"""
Conversion between OAuth entities and table rows.
Optional references are NULL in the tables; the empty-string sentinel of older
rows is read back as None so it never reaches an entity.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, NamedTuple

from oauth_sqlstore.core.crypto import decrypt_secret, encrypt_secret
from oauth_sqlstore.core.errors import MalformedPayload
from oauth_sqlstore.models import AccessData, AuthorizeData, OAuthClient
from oauth_sqlstore.schemas.oauth import AccessToken, AuthorizationGrant, Client


class AccessRefs(NamedTuple):
    """Foreign keys of an access row, still unresolved."""

    client_id: str
    authorize_code: str | None
    previous_token: str | None


def encode_user_data(value: Any | None) -> str:
    """JSON text for the user data column; absent data is stored as ""."""
    if value is None:
        return ""
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise MalformedPayload(f"user data is not JSON serializable: {e}") from e


def decode_user_data(stored: str | None) -> Any | None:
    if not stored:
        return None
    try:
        return json.loads(stored)
    except ValueError as e:
        raise MalformedPayload(f"stored user data is not valid JSON: {e}") from e


def optional_key(value: str | None) -> str | None:
    return value or None


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def encode_client(client: Client) -> OAuthClient:
    return OAuthClient(
        id=client.id,
        secret=encrypt_secret(client.secret),
        redirect_uri=client.redirect_uri,
        user_data=encode_user_data(client.user_data),
    )


def decode_client(row: OAuthClient) -> Client:
    return Client(
        id=row.id,
        secret=decrypt_secret(row.secret),
        redirect_uri=row.redirect_uri,
        user_data=decode_user_data(row.user_data),
    )


def encode_grant(grant: AuthorizationGrant) -> AuthorizeData:
    return AuthorizeData(
        code=grant.code,
        expires_in=grant.expires_in,
        scope=grant.scope,
        redirect_uri=grant.redirect_uri,
        state=grant.state,
        created_at=_to_utc(grant.created_at),
        user_data=encode_user_data(grant.user_data),
        client_id=grant.client.id,
    )


def decode_grant(row: AuthorizeData, client: Client) -> AuthorizationGrant:
    return AuthorizationGrant(
        code=row.code,
        expires_in=row.expires_in,
        scope=row.scope,
        redirect_uri=row.redirect_uri,
        state=row.state,
        created_at=row.created_at,
        user_data=decode_user_data(row.user_data),
        client=client,
    )


def encode_access(token: AccessToken) -> AccessData:
    """Row for ``token``. The caller checks that a client is attached."""
    grant = token.authorization_grant
    previous = token.previous_access_token
    return AccessData(
        access_token=token.access_token,
        refresh_token=optional_key(token.refresh_token),
        expires_in=token.expires_in,
        scope=token.scope,
        redirect_uri=token.redirect_uri,
        created_at=_to_utc(token.created_at),
        user_data=encode_user_data(token.user_data),
        authorize_data_code=optional_key(grant.code) if grant is not None else None,
        prev_access_data_token=optional_key(previous.access_token) if previous is not None else None,
        client_id=token.client.id,
    )


def decode_access(row: AccessData) -> tuple[AccessToken, AccessRefs]:
    """Flat token (no relationships) plus its raw references."""
    token = AccessToken(
        access_token=row.access_token,
        refresh_token=optional_key(row.refresh_token),
        expires_in=row.expires_in,
        scope=row.scope,
        redirect_uri=row.redirect_uri,
        created_at=row.created_at,
        user_data=decode_user_data(row.user_data),
    )
    refs = AccessRefs(
        client_id=row.client_id,
        authorize_code=optional_key(row.authorize_data_code),
        previous_token=optional_key(row.prev_access_data_token),
    )
    return token, refs
