"""Authentication schemas."""

from typing import Annotated

from email_validator import validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def check_email(value: str) -> str:
    """Validate an email address but keep it exactly as given.

    Emails are matched byte-for-byte, so the normalized form is discarded.
    """
    validate_email(value, check_deliverability=False)
    return value


Email = Annotated[str, AfterValidator(check_email)]


class UserRegister(BaseModel):
    """User registration request."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: Email = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    profile_picture: str | None = Field(None, alias="profilePicture")


class UserLogin(BaseModel):
    """User login request."""

    email: Email = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class ProfileUpdate(BaseModel):
    """Partial update of the caller's own profile."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(None, min_length=1, max_length=255)
    profile_picture: str | None = Field(None, alias="profilePicture", min_length=1)


class IdentityResponse(BaseModel):
    """Claims carried by the caller's token."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class LoginResponse(IdentityResponse):
    """Login response with the issued token."""

    token: str


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    email: str
    profile_picture: str | None = Field(None, alias="profilePicture")


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
