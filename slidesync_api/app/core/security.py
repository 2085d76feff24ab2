"""
Security helpers for password hashing and bearer tokens.

Access tokens are compact HS256 JSON Web Tokens built with the standard
library: base64url segments signed with HMAC-SHA256 using
``SECRET_KEY``.  Each token carries ``sub`` (the email), ``exp`` and a
random ``jti``; signing out stores the ``jti`` in ``revoked_tokens``.
Passwords are stored as PBKDF2-HMAC-SHA256 digests with a random salt.
"""

import base64
import hashlib
import hmac
import json
import os
import secrets
import time
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .db import get_connection

PASSWORD_ITERATIONS = 100_000
TOKEN_HEADER = {"alg": "HS256", "typ": "JWT"}


def _b64_url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def _encode_segment(value: Dict[str, Any]) -> str:
    return _b64_url_encode(json.dumps(value, separators=(",", ":")).encode("utf-8"))


def _signature(header_b64: str, payload_b64: str) -> bytes:
    message = f"{header_b64}.{payload_b64}".encode("utf-8")
    return hmac.new(settings.secret_key.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(data: Dict[str, Any], expires_delta: Optional[int] = None) -> str:
    """Create a signed access token.

    Parameters
    ----------
    data : dict
        Claims to embed, normally ``{"sub": email}``.
    expires_delta : Optional[int]
        Lifetime in seconds.  Defaults to
        ``ACCESS_TOKEN_EXPIRE_MINUTES``.

    Returns
    -------
    str
        ``header.payload.signature``, sent by clients as
        ``Authorization: Bearer <token>``.
    """
    claims = dict(data)
    claims["exp"] = int(time.time()) + (expires_delta or settings.access_token_expire_minutes * 60)
    claims.setdefault("jti", secrets.token_hex(16))
    header_b64 = _encode_segment(TOKEN_HEADER)
    payload_b64 = _encode_segment(claims)
    return f"{header_b64}.{payload_b64}.{_b64_url_encode(_signature(header_b64, payload_b64))}"


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the claims of a valid token.

    ``None`` if the token is malformed, forged, expired or revoked.
    """
    try:
        header_b64, payload_b64, signature_b64 = token.split(".")
        signature = _b64_url_decode(signature_b64)
        claims = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except ValueError:
        return None
    if not hmac.compare_digest(_signature(header_b64, payload_b64), signature):
        return None
    if not isinstance(claims, dict) or not isinstance(claims.get("exp"), int):
        return None
    if claims["exp"] < int(time.time()):
        return None
    if claims.get("jti") and is_token_revoked(claims["jti"]):
        return None
    return claims


def revoke_token(jti: str, expires_at: int) -> None:
    """Remember a token id as signed out until it would have expired."""
    conn = get_connection()
    try:
        conn.execute(
            "INSERT OR IGNORE INTO revoked_tokens (jti, expires_at) VALUES (?, ?)",
            (jti, int(expires_at)),
        )
        # Expired entries can never match a valid token again.
        conn.execute("DELETE FROM revoked_tokens WHERE expires_at < ?", (int(time.time()),))
        conn.commit()
    finally:
        conn.close()


def is_token_revoked(jti: str) -> bool:
    conn = get_connection()
    try:
        row = conn.execute("SELECT jti FROM revoked_tokens WHERE jti = ?", (jti,)).fetchone()
        return row is not None
    finally:
        conn.close()


security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Dict[str, Any]:
    """Dependency resolving the bearer token to the signed-in user.

    Raises HTTP 401 when the header is missing, the token is invalid,
    expired or revoked, or the account is gone or disabled.  Returns
    the token claims plus ``user_id`` and ``subscription_tier``; the
    tier is read from the database on every request so an upgrade
    applies to tokens issued before it.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Invalid or expired token")
    conn = get_connection()
    try:
        user_row = conn.execute(
            "SELECT id, subscription_tier, disabled FROM users WHERE email = ?",
            (payload.get("sub"),),
        ).fetchone()
    finally:
        conn.close()
    if not user_row:
        raise _unauthorized("User no longer exists")
    if user_row["disabled"]:
        raise _unauthorized("User account disabled")
    payload["user_id"] = user_row["id"]
    payload["subscription_tier"] = user_row["subscription_tier"]
    return payload


def is_premium(current_user: Dict[str, Any]) -> bool:
    return current_user.get("subscription_tier") == "premium"


def _pbkdf2(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PASSWORD_ITERATIONS)


def hash_password(password: str) -> str:
    """Return ``"<salt hex>$<digest hex>"`` for a new password."""
    salt = os.urandom(16)
    return f"{salt.hex()}${_pbkdf2(password, salt).hex()}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a password against a stored ``hash_password`` value.

    Accounts created through a social provider have no password and
    never verify.
    """
    salt_hex, sep, digest_hex = (hashed_password or "").partition("$")
    if not sep:
        return False
    try:
        salt = bytes.fromhex(salt_hex)
        stored = bytes.fromhex(digest_hex)
    except ValueError:
        return False
    return hmac.compare_digest(_pbkdf2(plain_password, salt), stored)
