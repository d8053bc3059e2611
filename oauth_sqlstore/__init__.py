from oauth_sqlstore.core.errors import (
    Conflict,
    InvalidReference,
    MalformedPayload,
    NotFound,
    StorageError,
    StoreError,
)
from oauth_sqlstore.schemas.oauth import AccessToken, AuthorizationGrant, Client, TokenKeyKind
from oauth_sqlstore.services.protocol import OAuthStorage
from oauth_sqlstore.services.storage import SQLStorage

__all__ = [
    "AccessToken",
    "AuthorizationGrant",
    "Client",
    "Conflict",
    "InvalidReference",
    "MalformedPayload",
    "NotFound",
    "OAuthStorage",
    "SQLStorage",
    "StorageError",
    "StoreError",
    "TokenKeyKind",
]
