"""
Authentication endpoints for API v1.

Sign-up and sign-in with email and password, Google sign-in, sign-out
(token revocation) and the current user's profile.  Every successful
sign-in returns a bearer token together with the user record.
"""

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from slidesync_api.app.core.config import settings
from slidesync_api.app.core.security import create_access_token, get_current_user, revoke_token
from slidesync_api.app.schemas.user import AuthStatus, GoogleLogin, Token, UserCreate, UserLogin, UserRead, UserUpdate
from slidesync_api.app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_for(user: UserRead) -> Token:
    return Token(access_token=create_access_token({"sub": user.email}), user=user)


@router.post("/signup", response_model=Token, status_code=status.HTTP_201_CREATED)
async def sign_up(user: UserCreate) -> Token:
    """Register a new account and sign it in.

    Returns 409 if the email is already registered.  Email format and
    the minimum password length are checked by the schema (422).
    """
    try:
        created = await UserService.create_user(user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return _token_for(created)


@router.post("/login", response_model=Token)
async def sign_in(credentials: UserLogin) -> Token:
    """Exchange email and password for a bearer token."""
    user = await UserService.authenticate(credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _token_for(user)


@router.post("/google", response_model=Token)
async def sign_in_with_google(payload: GoogleLogin) -> Token:
    """Sign in with a Google ID token.

    The token is verified with Google.  An account is created on first
    sign-in, or linked to an existing account with the same email.
    """
    try:
        user = await UserService.google_login(payload.id_token)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except httpx.HTTPError as e:
        logger.error("Google token verification failed: %s", e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not verify Google credential")
    return _token_for(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(current_user: dict = Depends(get_current_user)) -> None:
    """Revoke the token used for this request."""
    if current_user.get("jti"):
        revoke_token(current_user["jti"], current_user["exp"])
    return None


@router.get("/me", response_model=UserRead)
async def read_me(current_user: dict = Depends(get_current_user)) -> UserRead:
    user = await UserService.get_user_by_id(current_user["user_id"])
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.patch("/me", response_model=UserRead)
async def update_me(body: UserUpdate, current_user: dict = Depends(get_current_user)) -> UserRead:
    """Update the current user's name, avatar or password."""
    try:
        return await UserService.update_user(current_user["user_id"], body.model_dump(exclude_unset=True))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/status", response_model=AuthStatus)
async def auth_status() -> AuthStatus:
    """Report which sign-in methods this deployment supports."""
    return AuthStatus(
        password=True,
        google=bool(settings.google_client_id),
        google_client_id=settings.google_client_id or None,
    )
