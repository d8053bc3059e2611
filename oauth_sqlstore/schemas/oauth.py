"""OAuth2 entities handed to and returned by the storage layer."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenKeyKind(str, Enum):
    """Which column identifies the token in a lookup."""

    ACCESS = "access"
    REFRESH = "refresh"


class Client(BaseModel):
    id: str = Field(..., min_length=1)
    secret: str = ""
    redirect_uri: str = ""
    user_data: Any | None = None


class _Expiring(BaseModel):
    expires_in: int = 0  # seconds
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive timestamps
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    @property
    def expire_at(self) -> datetime:
        return self.created_at + timedelta(seconds=self.expires_in)

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expire_at < (now or utcnow())


class AuthorizationGrant(_Expiring):
    """Authorization code with its owning client resolved."""

    code: str = Field(..., min_length=1)
    client: Client
    scope: str = ""
    redirect_uri: str = ""
    state: str = ""
    user_data: Any | None = None


class AccessToken(_Expiring):
    """Access/refresh token pair.

    ``previous_access_token`` is the token this one replaced on refresh. A loaded
    token carries its predecessor one level deep only: the predecessor's own
    client, authorization_grant and previous_access_token are left as None.
    """

    access_token: str = Field(..., min_length=1)
    refresh_token: str | None = None
    scope: str = ""
    redirect_uri: str = ""
    user_data: Any | None = None
    client: Client | None = None
    authorization_grant: AuthorizationGrant | None = None
    previous_access_token: AccessToken | None = None


AccessToken.model_rebuild()
