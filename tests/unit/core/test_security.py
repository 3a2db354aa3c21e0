"""Tests for password hashing and session tokens."""

import time

from jose import jwt

from continuum.core.security import (
    JWT_ALGORITHM,
    create_session_token,
    decode_session_token,
    generate_token,
    hash_password,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_format(self) -> None:
        hashed = hash_password("s3cret-pass")

        scheme, iterations, salt, digest = hashed.split("$")
        assert scheme == "pbkdf2_sha256"
        assert int(iterations) > 0
        assert len(salt) == 32
        assert digest

    def test_verify_roundtrip(self) -> None:
        hashed = hash_password("s3cret-pass")

        assert verify_password("s3cret-pass", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_salts_differ(self) -> None:
        assert hash_password("same") != hash_password("same")

    def test_verify_rejects_malformed(self) -> None:
        assert verify_password("x", None) is False
        assert verify_password("x", "plain-text") is False
        assert verify_password("x", "pbkdf2_sha256$abc$zz$zz") is False


class TestSessionTokens:
    def test_roundtrip_with_role(self) -> None:
        token = create_session_token({"role": "admin", "userId": "admin-1"}, "secret", 60)

        claims = decode_session_token(token, "secret", "admin")

        assert claims is not None
        assert claims["userId"] == "admin-1"
        assert claims["exp"] - claims["iat"] == 60

    def test_wrong_secret(self) -> None:
        token = create_session_token({"role": "admin"}, "secret", 60)

        assert decode_session_token(token, "other", "admin") is None

    def test_wrong_role(self) -> None:
        """A client token is never accepted as an admin token."""
        token = create_session_token({"role": "client"}, "secret", 60)

        assert decode_session_token(token, "secret", "admin") is None

    def test_expired(self) -> None:
        now = int(time.time())
        token = jwt.encode(
            {"role": "admin", "iat": now - 120, "exp": now - 60},
            "secret",
            algorithm=JWT_ALGORITHM,
        )

        assert decode_session_token(token, "secret", "admin") is None

    def test_generate_token_unique(self) -> None:
        assert generate_token() != generate_token()
