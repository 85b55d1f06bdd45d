"""Post schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    """Create a new post."""

    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)  # base64 data URI


class PostUpdate(BaseModel):
    """Update a post."""

    name: str | None = Field(None, min_length=1, max_length=255)
    location: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    image: str | None = Field(None, min_length=1)


class AuthorResponse(BaseModel):
    """Post author as shown next to a post."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    email: str
    profile_picture: str | None = Field(None, alias="profilePicture")


class FavouriterResponse(BaseModel):
    """A user who likes a post."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class PostResponse(BaseModel):
    """Post response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    location: str
    description: str
    image: str
    visited: int
    user_id: int
    created_at: datetime
    updated_at: datetime
    user: AuthorResponse
    likes: int = 0
    favourited_by: list[FavouriterResponse] = []


class LikeResponse(PostResponse):
    """Post after a like toggle, with the caller's new state."""

    liked: bool
