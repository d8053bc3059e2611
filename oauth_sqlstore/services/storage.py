"""
SQL-backed storage for an OAuth2 server: clients, authorization codes and
access/refresh tokens.

Each public method is one unit of work in its own session and runs under a
deadline (``timeout=``, default OPERATION_TIMEOUT_SECONDS). Errors surface as
``oauth_sqlstore.core.errors`` types tagged with the operation name; nothing
is retried and no failure is swallowed.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from oauth_sqlstore.config import settings
from oauth_sqlstore.core import codec
from oauth_sqlstore.core.errors import InvalidReference, NotFound, StorageError, StoreError
from oauth_sqlstore.db.rows import TableRows
from oauth_sqlstore.models import AccessData, AuthorizeData, OAuthClient
from oauth_sqlstore.schemas.oauth import AccessToken, AuthorizationGrant, Client, TokenKeyKind
from oauth_sqlstore.services.loader import RecordLoader

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DEFAULT: Any = object()  # "use the storage-wide timeout"


class SQLStorage:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession] | None = None,
        timeout: float | None = _DEFAULT,
    ):
        if session_maker is None:
            from oauth_sqlstore.db.session import async_session_maker

            session_maker = async_session_maker
        self._session_maker = session_maker
        self.timeout = settings.operation_timeout_seconds if timeout is _DEFAULT else timeout

    def clone(self) -> SQLStorage:
        """Per-request copy for the protocol engine. There is no per-request state, so it is self."""
        return self

    async def close(self) -> None:
        """Nothing to release: sessions are closed by each call and the engine belongs to the caller."""

    async def _run(self, operation: str, work: Awaitable[T], timeout: float | None) -> T:
        deadline = self.timeout if timeout is _DEFAULT else timeout
        try:
            return await asyncio.wait_for(work, timeout=deadline)
        except StoreError as e:
            if e.operation is None:
                e.operation = operation
            raise
        except asyncio.TimeoutError as e:
            logger.error("%s timed out after %ss", operation, deadline)
            raise StorageError(f"timed out after {deadline}s", operation) from e
        except (SQLAlchemyError, OSError) as e:
            logger.error("%s failed: %s", operation, e)
            raise StorageError(str(e), operation) from e

    # -- clients ---------------------------------------------------------

    async def set_client(self, client: Client, *, timeout: float | None = _DEFAULT) -> None:
        """Insert a client. An existing id is a Conflict; clients are never overwritten."""
        await self._run("set_client", self._insert(OAuthClient, lambda: codec.encode_client(client)), timeout)
        logger.info("Saved client %s", client.id)

    async def get_client(self, client_id: str, *, timeout: float | None = _DEFAULT) -> Client:
        return await self._run("get_client", self._read(lambda loader: loader.client(client_id)), timeout)

    async def remove_client(self, client_id: str, *, timeout: float | None = _DEFAULT) -> None:
        await self._run("remove_client", self._delete(OAuthClient, OAuthClient.id, client_id, "client"), timeout)
        logger.info("Removed client %s", client_id)

    # -- authorization codes ---------------------------------------------

    async def save_authorize(self, grant: AuthorizationGrant, *, timeout: float | None = _DEFAULT) -> None:
        await self._run("save_authorize", self._insert(AuthorizeData, lambda: codec.encode_grant(grant)), timeout)
        logger.info("Saved authorization code for client %s", grant.client.id)

    async def load_authorize(self, code: str, *, timeout: float | None = _DEFAULT) -> AuthorizationGrant:
        return await self._run("load_authorize", self._read(lambda loader: loader.grant(code)), timeout)

    async def remove_authorize(self, code: str, *, timeout: float | None = _DEFAULT) -> None:
        await self._run(
            "remove_authorize", self._delete(AuthorizeData, AuthorizeData.code, code, "authorization code"), timeout
        )
        logger.info("Removed authorization code")

    # -- access tokens ---------------------------------------------------

    async def save_access(self, token: AccessToken, *, timeout: float | None = _DEFAULT) -> None:
        """Insert a token. Its client, grant and previous token must already be stored."""
        if token.client is None:
            raise InvalidReference("access token has no client", "save_access")
        await self._run("save_access", self._insert(AccessData, lambda: codec.encode_access(token)), timeout)
        logger.info(
            "Saved access token for client %s (refresh rotation: %s)",
            token.client.id,
            token.previous_access_token is not None,
        )

    async def load_access_token(
        self,
        key: str,
        kind: TokenKeyKind = TokenKeyKind.ACCESS,
        *,
        timeout: float | None = _DEFAULT,
    ) -> AccessToken:
        """Token looked up by access or refresh value, with client, grant and immediate predecessor resolved."""
        operation = "load_refresh" if kind is TokenKeyKind.REFRESH else "load_access"
        return await self._run(operation, self._read(lambda loader: loader.access(key, kind)), timeout)

    async def load_access(self, token: str, *, timeout: float | None = _DEFAULT) -> AccessToken:
        return await self.load_access_token(token, TokenKeyKind.ACCESS, timeout=timeout)

    async def load_refresh(self, token: str, *, timeout: float | None = _DEFAULT) -> AccessToken:
        return await self.load_access_token(token, TokenKeyKind.REFRESH, timeout=timeout)

    async def remove_access(self, token: str, *, timeout: float | None = _DEFAULT) -> None:
        await self._run(
            "remove_access", self._delete(AccessData, AccessData.access_token, token, "access token"), timeout
        )
        logger.info("Removed access token")

    async def remove_refresh(self, token: str, *, timeout: float | None = _DEFAULT) -> None:
        await self._run(
            "remove_refresh", self._delete(AccessData, AccessData.refresh_token, token, "refresh token"), timeout
        )
        logger.info("Removed access token by refresh token")

    async def walk_access_chain(
        self,
        token: str,
        max_depth: int | None = None,
        *,
        timeout: float | None = _DEFAULT,
    ) -> AsyncIterator[AccessToken]:
        """Yield ``token`` and then each predecessor, newest first, one load per step."""
        seen: set[str] = set()
        current: str | None = token
        depth = 0
        while current is not None and (max_depth is None or depth < max_depth):
            if current in seen:
                raise StorageError(
                    f"refresh chain loops back to an earlier token at depth {depth}", "walk_access_chain"
                )
            seen.add(current)
            loaded = await self.load_access(current, timeout=timeout)
            yield loaded
            previous = loaded.previous_access_token
            current = previous.access_token if previous is not None else None
            depth += 1

    # -- unit-of-work helpers --------------------------------------------

    async def _read(self, load: Callable[[RecordLoader], Awaitable[T]]) -> T:
        async with self._session_maker() as session:
            return await load(RecordLoader(session))

    async def _insert(self, model, make_row: Callable[[], Any]) -> None:
        row = make_row()
        async with self._session_maker() as session:
            async with session.begin():
                await TableRows(session, model).insert(row)

    async def _delete(self, model, column, key: str | None, what: str) -> None:
        if not key:
            raise NotFound(f"{what} not found")
        async with self._session_maker() as session:
            async with session.begin():
                if await TableRows(session, model).delete(column, key) == 0:
                    raise NotFound(f"{what} not found")
