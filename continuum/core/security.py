"""Security utilities: password hashing and session tokens."""

import hashlib
import hmac
import os
import secrets
import time
from typing import Any, Literal

from jose import JWTError, jwt

# Shared password hashing format/version marker.
PASSWORD_SCHEME = "pbkdf2_sha256"
PASSWORD_ITERATIONS = 390000

JWT_ALGORITHM = "HS256"

Role = Literal["admin", "client"]


def hash_password(password: str) -> str:
    """Create a PBKDF2-SHA256 password hash string.

    Stored format:
      pbkdf2_sha256$<iterations>$<salt_hex>$<hash_hex>

    Args:
        password: Plain-text password

    Returns:
        The encoded hash
    """
    salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        PASSWORD_ITERATIONS,
    )
    return f"{PASSWORD_SCHEME}${PASSWORD_ITERATIONS}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str | None) -> bool:
    """Verify a password against a stored PBKDF2 hash.

    Args:
        password: Plain-text password to check
        stored: Encoded hash, or None when the account has no password

    Returns:
        True if the password matches
    """
    if not stored or not stored.startswith(f"{PASSWORD_SCHEME}$"):
        return False

    try:
        _, iterations_raw, salt_hex, hash_hex = stored.split("$", 3)
        iterations = int(iterations_raw)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False

    computed = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        iterations,
    )
    return hmac.compare_digest(computed, expected)


def create_session_token(
    claims: dict[str, Any],
    secret: str,
    expires_in_seconds: int,
) -> str:
    """Sign a session token carrying ``claims``.

    Args:
        claims: Session payload (role, ids, email)
        secret: HMAC secret for the session type
        expires_in_seconds: Lifetime of the token

    Returns:
        Encoded HS256 JWT
    """
    now = int(time.time())
    payload = {**claims, "iat": now, "exp": now + expires_in_seconds}
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_session_token(
    token: str,
    secret: str,
    role: Role,
) -> dict[str, Any] | None:
    """Verify a session token and return its claims.

    Args:
        token: Encoded JWT from the session cookie
        secret: HMAC secret for the session type
        role: Role the token must carry

    Returns:
        The claims, or None when the signature, expiry or role does not check out
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("role") != role:
        return None
    return payload


def generate_token(nbytes: int = 32) -> str:
    """Generate a URL-safe random token (email verification, ids)."""
    return secrets.token_urlsafe(nbytes)
