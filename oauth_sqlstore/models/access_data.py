"""Access/refresh token rows.

``prev_access_data_token`` points at the token this one replaced on refresh.
It is provenance only: RESTRICT keeps a predecessor from being deleted while a
successor still names it, and the unique constraint lets at most one successor
claim a given predecessor.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oauth_sqlstore.db.base import Base


class AccessData(Base):
    __tablename__ = "access_data"

    access_token: Mapped[str] = mapped_column(String(255), primary_key=True)
    refresh_token: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    expires_in: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    scope: Mapped[str] = mapped_column(Text, nullable=False, default="")
    redirect_uri: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    user_data: Mapped[str] = mapped_column(Text, nullable=False, default="")
    authorize_data_code: Mapped[str | None] = mapped_column(
        ForeignKey("authorize_data.code", onupdate="CASCADE", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    prev_access_data_token: Mapped[str | None] = mapped_column(
        ForeignKey("access_data.access_token", onupdate="CASCADE", ondelete="RESTRICT"),
        nullable=True,
        unique=True,
    )
    client_id: Mapped[str] = mapped_column(
        ForeignKey("clients.id", onupdate="CASCADE", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
