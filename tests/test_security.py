"""
Unit tests for password hashing and access tokens.
"""
import time

from slidesync_api.app.core import security
from slidesync_api.app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    revoke_token,
    verify_password,
)


class TestPasswords:
    """Tests for PBKDF2 password hashing."""

    def test_hash_and_verify(self):
        hashed = hash_password("secret1")

        assert "$" in hashed
        assert verify_password("secret1", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_salt_differs(self):
        assert hash_password("secret1") != hash_password("secret1")

    def test_social_accounts_never_verify(self):
        """Accounts without a stored password reject every password."""
        assert verify_password("anything", None) is False
        assert verify_password("anything", "not-a-hash") is False
        assert verify_password("anything", "zz$zz") is False


class TestTokens:
    """Tests for the signed access tokens."""

    def test_round_trip_claims(self):
        token = create_access_token({"sub": "user@example.com"})
        payload = decode_access_token(token)

        assert payload["sub"] == "user@example.com"
        assert payload["exp"] > time.time()
        assert payload["jti"]

    def test_tampered_token_rejected(self):
        token = create_access_token({"sub": "user@example.com"})
        header, payload, signature = token.split(".")
        forged = create_access_token({"sub": "admin@example.com"}).split(".")[1]

        assert decode_access_token(f"{header}.{forged}.{signature}") is None
        assert decode_access_token("not.a.token") is None
        assert decode_access_token("garbage") is None

    def test_wrong_secret_rejected(self, monkeypatch):
        token = create_access_token({"sub": "user@example.com"})
        monkeypatch.setattr(security.settings, "secret_key", "another-secret")

        assert decode_access_token(token) is None

    def test_expired_token_rejected(self, monkeypatch):
        token = create_access_token({"sub": "user@example.com"}, expires_delta=60)
        later = time.time() + 120
        monkeypatch.setattr(security.time, "time", lambda: later)

        assert decode_access_token(token) is None

    def test_revoked_token_rejected(self):
        token = create_access_token({"sub": "user@example.com"})
        payload = decode_access_token(token)
        revoke_token(payload["jti"], payload["exp"])

        assert decode_access_token(token) is None
