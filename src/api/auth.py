"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Response, status
from fastapi.responses import JSONResponse

from src.api.dependencies import CurrentIdentity, get_auth_service
from src.config import get_settings
from src.exceptions import UnauthorizedError
from src.schemas.auth import (
    LoginResponse,
    MessageResponse,
    ProfileUpdate,
    UserLogin,
    UserRegister,
    UserResponse,
)
from src.services.auth import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])

TOKEN_COOKIE = "token"  # noqa: S105


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Register a new user."""
    return auth.register(
        user_data.name,
        user_data.email,
        user_data.password,
        profile_picture=user_data.profile_picture,
    )


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: UserLogin,
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Login with email and password."""
    claims, token = auth.login(credentials.email, credentials.password)

    response.set_cookie(
        TOKEN_COOKIE,
        token,
        httponly=True,
        samesite="strict",
        secure=get_settings().is_production,
    )
    return LoginResponse(**claims.to_payload(), token=token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[str | None, Cookie()] = None,
):
    """Logout by clearing the token cookie (the token itself is not revoked)."""
    try:
        auth.logout(token)
    except UnauthorizedError as e:
        error_response = JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content=e.to_dict())
        error_response.delete_cookie(TOKEN_COOKIE, httponly=True, samesite="strict")
        return error_response

    response.delete_cookie(TOKEN_COOKIE, httponly=True, samesite="strict")
    return MessageResponse(message="Logged out successfully")


@router.put("/profile", response_model=UserResponse)
def update_profile(
    profile: ProfileUpdate,
    identity: CurrentIdentity,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Update the current user's name and/or profile picture."""
    return auth.update_profile(
        identity,
        name=profile.name,
        profile_picture=profile.profile_picture,
    )
