"""FastAPI dependencies for authentication, services and database."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.database import get_db
from src.exceptions import UnauthorizedError
from src.repositories.posts import PostRepository
from src.repositories.users import UserRepository
from src.services.auth import AuthService, make_password_context
from src.services.blob_store import BlobStore, get_blob_store
from src.services.engagement import EngagementService
from src.services.tokens import Claims, TokenService, get_token_service

security = HTTPBearer(auto_error=False)


@lru_cache
def get_password_context() -> CryptContext:
    """Get the shared bcrypt context."""
    return make_password_context(get_settings().bcrypt_rounds)


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> Claims:
    """Get the caller's identity from the bearer token."""
    if credentials is None:
        raise UnauthorizedError()
    return tokens.verify(credentials.credentials)


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    blobs: Annotated[BlobStore, Depends(get_blob_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthService:
    """Get auth service with dependencies."""
    return AuthService(
        UserRepository(db),
        tokens,
        blobs,
        get_password_context(),
        profile_folder=settings.profile_folder,
    )


def get_engagement_service(
    db: Annotated[Session, Depends(get_db)],
    blobs: Annotated[BlobStore, Depends(get_blob_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> EngagementService:
    """Get engagement service with dependencies."""
    return EngagementService(PostRepository(db), blobs, settings)


CurrentIdentity = Annotated[Claims, Depends(get_current_identity)]
