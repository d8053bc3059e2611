from oauth_sqlstore.models.client import OAuthClient
from oauth_sqlstore.models.authorize_data import AuthorizeData
from oauth_sqlstore.models.access_data import AccessData

__all__ = [
    "OAuthClient",
    "AuthorizeData",
    "AccessData",
]
