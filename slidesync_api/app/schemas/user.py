"""
Pydantic models for user data.

Defines schemas for signing up, signing in, reading and updating a
user.  Passwords are accepted on input only and never returned.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


def _check_email(value: str) -> str:
    value = value.strip().lower()
    local, _, domain = value.partition("@")
    if not local or "." not in domain or " " in value:
        raise ValueError("Invalid email address")
    return value


class UserBase(BaseModel):
    email: str = Field(..., examples=["user@example.com"])
    full_name: Optional[str] = Field(None, examples=["Jane Doe"])

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class UserCreate(UserBase):
    """Schema for signing up with email and password."""

    password: str = Field(..., min_length=6, examples=["strongpassword"])


class UserLogin(BaseModel):
    """Schema for signing in with email and password."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class GoogleLogin(BaseModel):
    """Payload for Google sign-in.

    ``id_token`` is the credential returned by Google Identity Services
    in the browser.  It is verified server side before a session token
    is issued.
    """

    id_token: str = Field(..., min_length=10)


class UserRead(UserBase):
    """Schema for reading a user from the API."""

    id: int
    avatar_url: Optional[str] = None
    subscription_tier: Literal["free", "premium"] = "free"
    social_provider: str = "internal"
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class UserUpdate(BaseModel):
    """Profile fields a user may change.  Only provided fields are updated."""

    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Optional[UserRead] = None


class AuthStatus(BaseModel):
    """Which sign-in providers are available on this deployment."""

    password: bool = True
    google: bool = False
    google_client_id: Optional[str] = None
