from oauth_sqlstore.schemas.oauth import AccessToken, AuthorizationGrant, Client, TokenKeyKind

__all__ = ["AccessToken", "AuthorizationGrant", "Client", "TokenKeyKind"]
