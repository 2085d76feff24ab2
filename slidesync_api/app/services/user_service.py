"""
Business logic for users.

``UserService`` persists accounts in the ``users`` table: sign-up with
email and password, credential checks, Google sign-in, profile updates
and the subscription tier switch used by the payment flow.
"""

import logging
import sqlite3
from typing import Any, Dict, Optional

import httpx

from slidesync_api.app.core.config import settings
from slidesync_api.app.core.db import get_connection
from slidesync_api.app.core.security import hash_password, verify_password
from slidesync_api.app.schemas.user import UserCreate, UserRead
from slidesync_api.app.services.activity_service import ActivityService

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, email, full_name, avatar_url, subscription_tier, social_provider, created_at"


def _row_to_user(row: sqlite3.Row) -> UserRead:
    return UserRead(
        id=row["id"],
        email=row["email"],
        full_name=row["full_name"],
        avatar_url=row["avatar_url"],
        subscription_tier=row["subscription_tier"],
        social_provider=row["social_provider"],
        created_at=row["created_at"],
    )


class UserService:
    """Service for working with user accounts."""

    @classmethod
    async def create_user(cls, data: UserCreate) -> UserRead:
        """Register a new user with a hashed password.

        Raises ``ValueError`` if the email is already registered.
        """
        logger.info("Registering user %s", data.email)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if cursor.execute("SELECT id FROM users WHERE email = ?", (data.email,)).fetchone():
                raise ValueError("User already registered")
            cursor.execute(
                "INSERT INTO users (email, full_name, password) VALUES (?, ?, ?)",
                (data.email, data.full_name, hash_password(data.password)),
            )
            user_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
        finally:
            conn.close()
        await ActivityService.record(user_id, "signup", "user", user_id, {"provider": "internal"})
        return _row_to_user(row)

    @classmethod
    async def authenticate(cls, email: str, password: str) -> Optional[UserRead]:
        """Return the user if the email/password pair is valid, otherwise ``None``.

        Disabled accounts never authenticate.
        """
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {USER_COLUMNS}, password, disabled FROM users WHERE email = ?",
                (email,),
            ).fetchone()
        finally:
            conn.close()
        if not row or row["disabled"]:
            return None
        if not verify_password(password, row["password"]):
            return None
        return _row_to_user(row)

    @classmethod
    async def get_user_by_id(cls, user_id: int) -> Optional[UserRead]:
        """Retrieve a user by ID."""
        conn = get_connection()
        try:
            row = conn.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
            return _row_to_user(row) if row else None
        finally:
            conn.close()

    @classmethod
    async def update_user(cls, user_id: int, updates: Dict[str, Any]) -> UserRead:
        """Update profile fields (``full_name``, ``avatar_url``, ``password``).

        Raises ``LookupError`` if the user does not exist.
        """
        allowed = {"full_name", "avatar_url", "password"}
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if not cursor.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone():
                raise LookupError(f"User {user_id} not found")
            fields = []
            values = []
            for key, value in updates.items():
                if key not in allowed:
                    continue
                if key == "password":
                    if not value:
                        continue
                    value = hash_password(value)
                fields.append(f"{key} = ?")
                values.append(value)
            if fields:
                values.append(user_id)
                cursor.execute(
                    f"UPDATE users SET {', '.join(fields)}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    tuple(values),
                )
                conn.commit()
            row = cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
        finally:
            conn.close()
        changed = sorted(k for k in updates if k in allowed)
        await ActivityService.record(user_id, "update", "user", user_id, {"fields": changed})
        return _row_to_user(row)

    @classmethod
    async def set_subscription_tier(cls, user_id: int, tier: str) -> None:
        """Switch a user between the ``free`` and ``premium`` tiers."""
        if tier not in {"free", "premium"}:
            raise ValueError(f"Unknown subscription tier: {tier}")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE users SET subscription_tier = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (tier, user_id),
            )
            if cursor.rowcount == 0:
                raise LookupError(f"User {user_id} not found")
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s is now on the %s tier", user_id, tier)

    @classmethod
    async def social_login(
        cls,
        provider: str,
        social_id: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> UserRead:
        """Find or create the account for an external identity.

        Lookup order: the ``(provider, social_id)`` pair, then an existing
        account with the same email (which gets linked), then a new
        account without a password.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute(
                f"SELECT {USER_COLUMNS}, disabled FROM users WHERE social_provider = ? AND social_id = ?",
                (provider, social_id),
            ).fetchone()
            if row is None and email:
                row = cursor.execute(
                    f"SELECT {USER_COLUMNS}, disabled FROM users WHERE email = ?",
                    (email,),
                ).fetchone()
                if row is not None:
                    cursor.execute(
                        "UPDATE users SET social_provider = ?, social_id = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                        (provider, social_id, row["id"]),
                    )
                    conn.commit()
            if row is not None:
                if row["disabled"]:
                    raise PermissionError("User account disabled")
                return _row_to_user(row)

            email_value = email or f"{provider}-{social_id}@users.noreply.slidesync.app"
            cursor.execute(
                "INSERT INTO users (email, full_name, avatar_url, social_provider, social_id) "
                "VALUES (?, ?, ?, ?, ?)",
                (email_value, full_name, avatar_url, provider, social_id),
            )
            user_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
        finally:
            conn.close()
        await ActivityService.record(user_id, "signup", "user", user_id, {"provider": provider})
        return _row_to_user(row)

    @classmethod
    async def google_login(cls, id_token: str) -> UserRead:
        """Verify a Google ID token and sign the matching user in."""
        claims = cls._verify_google_token(id_token)
        return await cls.social_login(
            "google",
            claims["sub"],
            email=(claims.get("email") or "").lower() or None,
            full_name=claims.get("name"),
            avatar_url=claims.get("picture"),
        )

    @classmethod
    def _verify_google_token(cls, id_token: str) -> Dict[str, Any]:
        """Validate an ID token with Google's ``tokeninfo`` endpoint.

        Raises ``PermissionError`` if Google rejects the token, the
        audience does not match ``GOOGLE_CLIENT_ID`` or the email is not
        verified.  Network errors propagate to the caller.
        """
        response = httpx.get(settings.google_tokeninfo_url, params={"id_token": id_token}, timeout=10)
        if response.status_code != 200:
            logger.warning("Google rejected ID token: HTTP %s", response.status_code)
            raise PermissionError("Invalid Google credential")
        claims = response.json()
        if settings.google_client_id and claims.get("aud") != settings.google_client_id:
            raise PermissionError("Google credential was issued for another application")
        if claims.get("email") and str(claims.get("email_verified")).lower() != "true":
            raise PermissionError("Google account email is not verified")
        if not claims.get("sub"):
            raise PermissionError("Invalid Google credential")
        return claims
