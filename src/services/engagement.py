"""Engagement engine: post creation, likes, visits, ranking and search."""

import logging
import random

from src.config import Settings
from src.exceptions import ForbiddenError, NotFoundError
from src.models.post import Post
from src.repositories.posts import PostRepository
from src.services.blob_store import BlobStore, delete_quietly
from src.services.tokens import Claims

logger = logging.getLogger(__name__)


class EngagementService:
    """Service for posts and how users engage with them."""

    def __init__(self, posts: PostRepository, blobs: BlobStore, settings: Settings):
        self.posts = posts
        self.blobs = blobs
        self.settings = settings

    def _get_or_404(self, post_id: int) -> Post:
        post = self.posts.get(post_id)
        if not post:
            raise NotFoundError("Post not found")
        return post

    def _check_can_modify(self, post: Post, identity: Claims) -> None:
        """Apply the configured ownership policy for update and delete.

        "open" lets any authenticated caller modify any post.
        """
        if self.settings.post_ownership_policy == "strict" and post.user_id != identity.id:
            raise ForbiddenError("You can only modify your own posts")

    def create_post(
        self,
        identity: Claims,
        name: str,
        location: str,
        description: str,
        image: str,
    ) -> Post:
        """Upload the image, then store the post.

        A failed upload creates nothing. A failed insert after a successful
        upload leaves the blob in place.
        """
        stored = self.blobs.upload(image, self.settings.post_folder)
        post = self.posts.add(
            name=name,
            location=location,
            description=description,
            image=stored.url,
            image_ref=stored.ref,
            user_id=identity.id,
        )
        logger.info(f"User {identity.id} created post {post.id}")
        return post

    def latest(self) -> list[Post]:
        """Get the newest posts."""
        return self.posts.newest(self.settings.latest_size)

    def list_posts(self, search: str | None = None) -> list[Post]:
        """Get all posts, or the posts matching a keyword, newest first."""
        posts = self.posts.search(keyword=search)
        if not posts:
            raise NotFoundError("No posts found" if search else "There are no posts yet")
        return posts

    def my_posts(self, identity: Claims, search: str | None = None) -> list[Post]:
        """Get the caller's own posts, optionally filtered by keyword."""
        posts = self.posts.search(keyword=search, user_id=identity.id)
        if not posts:
            raise NotFoundError("No posts found" if search else "You have no posts yet")
        return posts

    def view(self, post_id: int) -> Post:
        """Get a post and count the visit."""
        if not self.posts.increment_visits(post_id):
            raise NotFoundError("Post not found")
        return self._get_or_404(post_id)

    def toggle_like(self, post_id: int, identity: Claims) -> tuple[Post, bool]:
        """Like the post if the caller does not like it yet, otherwise unlike it.

        Returns the refreshed post and whether the caller likes it now.
        """
        self._get_or_404(post_id)
        liked = self.posts.toggle_favourite(post_id, identity.id)
        logger.info(f"User {identity.id} {'liked' if liked else 'unliked'} post {post_id}")
        return self._get_or_404(post_id), liked

    def popular(self) -> list[Post]:
        """Get every post ranked by visits, then likes."""
        return self.posts.popular()

    def recommend(self, rng: random.Random | None = None) -> list[Post]:
        """Pick distinct posts uniformly at random, without replacement.

        Only the sampled rows are loaded. Fewer posts than the target size
        returns all of them, shuffled; no posts returns an empty list.
        """
        rng = rng or random.Random()
        post_ids = self.posts.ids_newest_first()
        sample_size = min(self.settings.recommendation_size, len(post_ids))
        return self.posts.get_many(rng.sample(post_ids, sample_size))

    def update_post(
        self,
        post_id: int,
        identity: Claims,
        name: str | None = None,
        location: str | None = None,
        description: str | None = None,
        image: str | None = None,
    ) -> Post:
        """Apply a partial update, replacing the image when a new one is given."""
        post = self._get_or_404(post_id)
        self._check_can_modify(post, identity)

        fields = {
            key: value
            for key, value in (("name", name), ("location", location), ("description", description))
            if value is not None
        }

        old_ref = None
        if image:
            stored = self.blobs.upload(image, self.settings.post_folder)
            old_ref = post.image_ref
            fields["image"] = stored.url
            fields["image_ref"] = stored.ref

        post = self.posts.update(post, **fields)
        delete_quietly(self.blobs, old_ref)
        return post

    def delete_post(self, post_id: int, identity: Claims) -> None:
        """Delete a post and, best effort, its image."""
        post = self._get_or_404(post_id)
        self._check_can_modify(post, identity)

        image_ref = post.image_ref
        self.posts.delete(post)
        logger.info(f"User {identity.id} deleted post {post_id}")
        delete_quietly(self.blobs, image_ref)
