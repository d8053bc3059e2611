from cryptography.fernet import Fernet, InvalidToken

from oauth_sqlstore.config import settings
from oauth_sqlstore.core.errors import MalformedPayload


def get_fernet() -> Fernet | None:
    if not settings.encrypts_secrets:
        return None
    return Fernet(settings.encryption_key.strip().encode())


def encrypt_secret(value: str) -> str:
    if not value:
        return ""
    f = get_fernet()
    if f is None:
        return value  # no key: plaintext
    return f.encrypt(value.encode()).decode()


def decrypt_secret(stored: str) -> str:
    if not stored:
        return ""
    f = get_fernet()
    if f is None:
        return stored
    try:
        return f.decrypt(stored.encode()).decode()
    except InvalidToken as e:
        raise MalformedPayload("client secret could not be decrypted with the configured key") from e
