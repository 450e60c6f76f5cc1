"""
Encryption of the Hail OAuth tokens stored in the configuration row.

Tokens are encrypted with Fernet. The key is derived from SECRET_KEY with
HKDF, so rotating SECRET_KEY makes stored tokens unreadable and Hail has to
be authorised again.
"""
import base64
from functools import lru_cache
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from hail_sync.core.config import settings
from hail_sync.core.logging_config import log_error

HKDF_INFO = b"hail-sync-token-encryption"


@lru_cache(maxsize=1)
def _fernet_for(secret_key: str) -> Fernet:
    if not secret_key:
        raise ValueError("SECRET_KEY must be set to store Hail tokens")

    derived = HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=HKDF_INFO).derive(
        secret_key.encode("utf-8")
    )
    # Fernet keys are 32 url-safe base64 encoded bytes
    return Fernet(base64.urlsafe_b64encode(derived))


def encrypt_token(token: str) -> str:
    if not token or not token.strip():
        raise ValueError("Cannot encrypt empty token")
    return _fernet_for(settings.secret_key).encrypt(token.encode("utf-8")).decode("utf-8")


def decrypt_token(encrypted_token: str) -> str:
    """
    Decrypt a value produced by encrypt_token.

    Raises:
        ValueError: the value is empty, corrupted or was encrypted under a
            different SECRET_KEY
    """
    if not encrypted_token or not encrypted_token.strip():
        raise ValueError("Cannot decrypt empty token")

    try:
        return _fernet_for(settings.secret_key).decrypt(encrypted_token.encode("utf-8")).decode("utf-8")
    except InvalidToken as e:
        log_error(e, action="token_decryption")
        raise ValueError(
            "Stored Hail token could not be decrypted (corrupted, or SECRET_KEY changed). "
            "Hail needs to be authorised again."
        ) from e


def encrypt_optional(token: Optional[str]) -> Optional[str]:
    return encrypt_token(token) if token else None


def decrypt_optional(encrypted_token: Optional[str]) -> Optional[str]:
    return decrypt_token(encrypted_token) if encrypted_token else None
