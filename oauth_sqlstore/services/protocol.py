"""Storage contract an OAuth2 server engine calls during code issuance, exchange, refresh and revocation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from oauth_sqlstore.schemas.oauth import AccessToken, AuthorizationGrant, Client


@runtime_checkable
class OAuthStorage(Protocol):
    def clone(self) -> OAuthStorage: ...

    async def close(self) -> None: ...

    async def get_client(self, client_id: str) -> Client: ...

    async def save_authorize(self, grant: AuthorizationGrant) -> None: ...

    async def load_authorize(self, code: str) -> AuthorizationGrant: ...

    async def remove_authorize(self, code: str) -> None: ...

    async def save_access(self, token: AccessToken) -> None: ...

    async def load_access(self, token: str) -> AccessToken: ...

    async def remove_access(self, token: str) -> None: ...

    async def load_refresh(self, token: str) -> AccessToken: ...

    async def remove_refresh(self, token: str) -> None: ...
