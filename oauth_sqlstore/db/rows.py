"""
Point queries and statements against one table: select-by-key, insert-row, delete-by-key.
Integrity violations are translated into storage errors here, where it is known
whether the failing statement was an insert or a delete.
"""
from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from oauth_sqlstore.core.errors import Conflict, InvalidReference
from oauth_sqlstore.db.base import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

# SQLSTATE classes reported by PostgreSQL drivers
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"


def _violation_kind(exc: IntegrityError) -> str | None:
    """Return "unique", "foreign_key" or None for other integrity errors (NOT NULL, CHECK)."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == _UNIQUE_VIOLATION:
        return "unique"
    if sqlstate == _FOREIGN_KEY_VIOLATION:
        return "foreign_key"
    msg = str(orig if orig is not None else exc).lower()
    if "foreign key" in msg:
        return "foreign_key"
    if "unique" in msg or "duplicate key" in msg:
        return "unique"
    return None


class TableRows(Generic[ModelT]):
    """Row access for ``model`` inside an open session."""

    def __init__(self, session: AsyncSession, model: type[ModelT]):
        self.session = session
        self.model = model

    @property
    def table(self) -> str:
        return self.model.__tablename__

    async def first(self, column: InstrumentedAttribute, value: Any) -> ModelT | None:
        """First row whose ``column`` equals ``value``; keys are unique, so at most one is expected."""
        r = await self.session.execute(select(self.model).where(column == value).limit(1))
        return r.scalars().first()

    async def insert(self, row: ModelT) -> None:
        self.session.add(row)
        try:
            await self.session.flush()
        except IntegrityError as e:
            kind = _violation_kind(e)
            logger.warning("Insert into %s rejected (%s): %s", self.table, kind or "integrity", e.orig)
            if kind == "foreign_key":
                raise InvalidReference(f"{self.table}: referenced row does not exist") from e
            if kind == "unique":
                raise Conflict(f"{self.table}: row with the same key already exists") from e
            raise

    async def delete(self, column: InstrumentedAttribute, value: Any) -> int:
        """Delete rows whose ``column`` equals ``value``; returns the number of rows deleted."""
        try:
            r = await self.session.execute(delete(self.model).where(column == value))
        except IntegrityError as e:
            kind = _violation_kind(e)
            logger.warning("Delete from %s rejected (%s): %s", self.table, kind or "integrity", e.orig)
            if kind == "foreign_key":
                raise Conflict(f"{self.table}: row is still referenced by dependent rows") from e
            raise
        return r.rowcount
