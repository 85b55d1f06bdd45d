"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import (
    IdentityResponse,
    LoginResponse,
    MessageResponse,
    ProfileUpdate,
    UserLogin,
    UserRegister,
    UserResponse,
)
from src.schemas.post import (
    AuthorResponse,
    FavouriterResponse,
    LikeResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "ProfileUpdate",
    "IdentityResponse",
    "LoginResponse",
    "UserResponse",
    "MessageResponse",
    "PostCreate",
    "PostUpdate",
    "PostResponse",
    "LikeResponse",
    "AuthorResponse",
    "FavouriterResponse",
]
