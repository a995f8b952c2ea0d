"""
User endpoints for API v1.

Registration and login are public.  Refresh reads the refresh token
from the ``Authorization`` header itself; every other route needs a
valid access token.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from library_api.app.core.security import Identity, get_bearer_token, get_current_user
from library_api.app.schemas.common import DataResponse
from library_api.app.schemas.user import (
    LogoutRequest,
    TokenRefresh,
    UserLogin,
    UserProfile,
    UserRead,
    UserRegister,
    UserUpdate,
    UserWithTokens,
)
from library_api.app.services.token_service import TokenService
from library_api.app.services.user_service import UserService

router = APIRouter()


@router.post(
    "/register",
    response_model=DataResponse[UserRead],
    status_code=status.HTTP_201_CREATED,
)
def register_user(user: UserRegister) -> dict:
    """Register a new user and return it without credentials."""
    return {"data": UserService.register(user)}


@router.post("/login", response_model=DataResponse[UserWithTokens])
def login_user(credentials: UserLogin) -> dict:
    """Check username and password and return the user with a token pair."""
    return {"data": UserService.login(credentials)}


@router.post("/refresh", response_model=TokenRefresh)
def refresh_token(token: Optional[str] = Depends(get_bearer_token)) -> dict:
    """Exchange the bearer refresh token for a new access token."""
    return TokenService.refresh(token)


@router.get("/current", response_model=DataResponse[UserProfile])
def get_current(identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": UserService.get_profile(identity)}


@router.patch("/current", response_model=DataResponse[UserRead])
def update_current(data: UserUpdate, identity: Identity = Depends(get_current_user)) -> dict:
    """Update only the supplied fields of the caller's account."""
    return {"data": UserService.update_fields(identity, data)}


@router.delete("/logout", response_model=DataResponse[bool])
def logout(
    body: Optional[LogoutRequest] = Body(None),
    identity: Identity = Depends(get_current_user),
) -> dict:
    """Revoke the presented access token (and the refresh token in the body, if any)."""
    refresh = body.refresh_token if body is not None else None
    return {"data": TokenService.logout(identity.user_id, identity.token, refresh)}
