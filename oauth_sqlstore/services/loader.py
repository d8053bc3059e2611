"""
Entity loading on top of row access, with bounded relationship resolution.

An access token is resolved one level deep: its client, its authorization grant
(with the grant's client) and its immediate predecessor. The predecessor comes
back flat, so one load costs a fixed number of SELECTs however long the refresh
chain behind it is: four when the grant belongs to the token's own client, five
at most. Callers who need older tokens load them one by one.
"""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from oauth_sqlstore.core import codec
from oauth_sqlstore.core.codec import AccessRefs
from oauth_sqlstore.core.errors import NotFound
from oauth_sqlstore.db.rows import TableRows
from oauth_sqlstore.models import AccessData, AuthorizeData, OAuthClient
from oauth_sqlstore.schemas.oauth import AccessToken, AuthorizationGrant, Client, TokenKeyKind

logger = logging.getLogger(__name__)


class RecordLoader:
    """Reads clients, grants and tokens within one session (one public storage call)."""

    def __init__(self, session: AsyncSession):
        self.clients = TableRows(session, OAuthClient)
        self.grants = TableRows(session, AuthorizeData)
        self.tokens = TableRows(session, AccessData)
        # Clients already read during this call, so a grant owned by the token's
        # own client does not fetch the same row twice.
        self._seen_clients: dict[str, Client] = {}

    async def client(self, client_id: str) -> Client:
        if client_id in self._seen_clients:
            return self._seen_clients[client_id]
        row = await self.clients.first(OAuthClient.id, client_id)
        if row is None:
            raise NotFound(f"client {client_id!r} not found")
        client = codec.decode_client(row)
        self._seen_clients[client_id] = client
        return client

    async def grant(self, code: str) -> AuthorizationGrant:
        row = await self.grants.first(AuthorizeData.code, code)
        if row is None:
            raise NotFound(f"authorization code {code!r} not found")
        client = await self.client(row.client_id)
        return codec.decode_grant(row, client)

    async def flat_access(self, key: str, kind: TokenKeyKind) -> tuple[AccessToken, AccessRefs]:
        """Token row decoded without touching any other table."""
        if not key:
            raise NotFound(f"empty {kind.value} token")
        column = AccessData.refresh_token if kind is TokenKeyKind.REFRESH else AccessData.access_token
        row = await self.tokens.first(column, key)
        if row is None:
            raise NotFound(f"{kind.value} token not found")
        return codec.decode_access(row)

    async def access(self, key: str, kind: TokenKeyKind = TokenKeyKind.ACCESS) -> AccessToken:
        token, refs = await self.flat_access(key, kind)

        token.client = await self.client(refs.client_id)
        if refs.authorize_code is not None:
            token.authorization_grant = await self.grant(refs.authorize_code)
        if refs.previous_token is not None:
            # Depth 1: the predecessor's own references are never followed.
            previous, _ = await self.flat_access(refs.previous_token, TokenKeyKind.ACCESS)
            token.previous_access_token = previous
            logger.debug("Resolved predecessor of %s token one level deep", kind.value)
        return token
