"""
Password and opaque token hashing.

Passwords use werkzeug's salted PBKDF2/scrypt hashes. Refresh tokens are
high-entropy random strings, so a plain SHA-256 digest is enough to avoid
storing them in clear.
"""

import base64
import hashlib
import secrets

from werkzeug.security import check_password_hash, generate_password_hash

REFRESH_TOKEN_BYTES = 64


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def generate_refresh_token() -> str:
    """Random URL-safe token for the refresh cookie."""
    return base64.urlsafe_b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode().rstrip("=")


def hash_token(token: str) -> str:
    """Hex SHA-256 digest used to look up refresh tokens."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
