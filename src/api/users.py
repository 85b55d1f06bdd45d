"""User API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.api.dependencies import CurrentIdentity, get_auth_service
from src.schemas.auth import IdentityResponse, UserResponse
from src.services.auth import AuthService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=IdentityResponse)
def get_me(identity: CurrentIdentity):
    """Get the identity carried by the caller's token.

    This reflects the claims at login time, not later profile edits.
    """
    return identity


@router.get("/me/profile", response_model=UserResponse)
def get_my_profile(
    identity: CurrentIdentity,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Get the caller's stored profile."""
    return auth.get_user(identity.id)
