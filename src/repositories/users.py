"""Credential store: persistence for user records."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.exceptions import ConflictError
from src.models.user import User


class UserRepository:
    """Look up, insert and update users."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> User | None:
        """Get a user by id."""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> User | None:
        """Get a user by exact email match."""
        return self.db.query(User).filter(User.email == email).first()

    def add(
        self,
        name: str,
        email: str,
        password_hash: str,
        profile_picture: str | None = None,
        profile_picture_ref: str | None = None,
    ) -> User:
        """Insert a new user; the unique email index settles concurrent sign-ups."""
        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            profile_picture=profile_picture,
            profile_picture_ref=profile_picture_ref,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("User with this email already exists") from e
        self.db.refresh(user)
        return user

    def update(self, user: User, **fields) -> User:
        """Apply field changes to a user and persist them."""
        for field, value in fields.items():
            setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        return user
