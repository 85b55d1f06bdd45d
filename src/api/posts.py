"""Post API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import CurrentIdentity, get_engagement_service
from src.schemas.auth import MessageResponse
from src.schemas.post import LikeResponse, PostCreate, PostResponse, PostUpdate
from src.services.engagement import EngagementService

router = APIRouter(prefix="/api/posts", tags=["posts"])

Engagement = Annotated[EngagementService, Depends(get_engagement_service)]


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    post_data: PostCreate,
    identity: CurrentIdentity,
    engagement: Engagement,
):
    """Create a new post with an image."""
    return engagement.create_post(
        identity,
        name=post_data.name,
        location=post_data.location,
        description=post_data.description,
        image=post_data.image,
    )


@router.get("", response_model=list[PostResponse])
def get_posts(
    identity: CurrentIdentity,
    engagement: Engagement,
    search: str | None = Query(default=None, description="Keyword in name, location or description"),
):
    """Get all posts, newest first, optionally filtered by keyword."""
    return engagement.list_posts(search)


@router.get("/latest", response_model=list[PostResponse])
def get_latest(identity: CurrentIdentity, engagement: Engagement):
    """Get the newest posts."""
    return engagement.latest()


@router.get("/recommendation", response_model=list[PostResponse])
def get_recommendation(identity: CurrentIdentity, engagement: Engagement):
    """Get a random selection of distinct posts."""
    return engagement.recommend()


@router.get("/popular", response_model=list[PostResponse])
def get_popular(identity: CurrentIdentity, engagement: Engagement):
    """Get all posts ranked by visits, then likes."""
    return engagement.popular()


@router.get("/me", response_model=list[PostResponse])
def get_my_posts(
    identity: CurrentIdentity,
    engagement: Engagement,
    search: str | None = Query(default=None, description="Keyword in name, location or description"),
):
    """Get the current user's posts."""
    return engagement.my_posts(identity, search)


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: int, identity: CurrentIdentity, engagement: Engagement):
    """Get a post; every successful read counts as a visit."""
    return engagement.view(post_id)


@router.post("/{post_id}/like", response_model=LikeResponse)
def toggle_like(post_id: int, identity: CurrentIdentity, engagement: Engagement):
    """Like the post, or unlike it if the caller already likes it."""
    post, liked = engagement.toggle_like(post_id, identity)
    return LikeResponse(**PostResponse.model_validate(post).model_dump(), liked=liked)


@router.put("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: int,
    post_data: PostUpdate,
    identity: CurrentIdentity,
    engagement: Engagement,
):
    """Update a post, optionally replacing its image."""
    return engagement.update_post(
        post_id,
        identity,
        name=post_data.name,
        location=post_data.location,
        description=post_data.description,
        image=post_data.image,
    )


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(post_id: int, identity: CurrentIdentity, engagement: Engagement):
    """Delete a post."""
    engagement.delete_post(post_id, identity)
    return MessageResponse(message="Post deleted successfully")
