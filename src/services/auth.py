"""Authentication service for registration, login and profile handling."""

import logging

from passlib.context import CryptContext

from src.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    UnauthorizedError,
)
from src.models.user import User
from src.repositories.users import UserRepository
from src.services.blob_store import BlobStore, delete_quietly
from src.services.tokens import Claims, TokenService

logger = logging.getLogger(__name__)


def make_password_context(rounds: int) -> CryptContext:
    """Build a bcrypt context with the given cost factor."""
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


class AuthService:
    """Service for credential issuance and the caller's own profile."""

    def __init__(
        self,
        users: UserRepository,
        tokens: TokenService,
        blobs: BlobStore,
        pwd_context: CryptContext,
        profile_folder: str = "profiles",
    ):
        self.users = users
        self.tokens = tokens
        self.blobs = blobs
        self.pwd_context = pwd_context
        self.profile_folder = profile_folder

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        return self.pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Hash a password."""
        return self.pwd_context.hash(password)

    def register(
        self,
        name: str,
        email: str,
        password: str,
        profile_picture: str | None = None,
    ) -> User:
        """Create a new user, rejecting an email that is already taken."""
        if self.users.get_by_email(email):
            raise ConflictError("User with this email already exists")

        picture_url = picture_ref = None
        if profile_picture:
            stored = self.blobs.upload(profile_picture, self.profile_folder)
            picture_url, picture_ref = stored.url, stored.ref

        user = self.users.add(
            name=name,
            email=email,
            password_hash=self.get_password_hash(password),
            profile_picture=picture_url,
            profile_picture_ref=picture_ref,
        )
        logger.info(f"Registered user {user.id}")
        return user

    def login(self, email: str, password: str) -> tuple[Claims, str]:
        """Check credentials and issue a token for the user's current identity."""
        user = self.users.get_by_email(email)
        if not user or not self.verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        claims = Claims(id=user.id, name=user.name, email=user.email)
        return claims, self.tokens.issue(claims)

    def logout(self, token: str | None) -> Claims:
        """Check the token being discarded; nothing is revoked server-side."""
        if not token:
            raise UnauthorizedError()
        return self.tokens.verify(token)

    def get_user(self, user_id: int) -> User:
        """Get a user by id."""
        user = self.users.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(
        self,
        identity: Claims,
        name: str | None = None,
        profile_picture: str | None = None,
    ) -> User:
        """Update the caller's own name and/or profile picture.

        The existing picture is kept unless a new one is supplied; a replaced
        picture is removed from the blob store on a best-effort basis.
        """
        user = self.get_user(identity.id)

        fields: dict[str, str] = {}
        if name is not None:
            fields["name"] = name

        old_ref = None
        if profile_picture:
            stored = self.blobs.upload(profile_picture, self.profile_folder)
            old_ref = user.profile_picture_ref
            fields["profile_picture"] = stored.url
            fields["profile_picture_ref"] = stored.ref

        user = self.users.update(user, **fields)
        delete_quietly(self.blobs, old_ref)
        return user
