"""Post store: persistence for posts and the favourites relation."""

import logging

from sqlalchemy import and_, delete, func, insert, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, joinedload, selectinload

from src.models.post import Post, favourites

logger = logging.getLogger(__name__)


class PostRepository:
    """Post CRUD plus the atomic counter and relation primitives."""

    def __init__(self, db: Session):
        self.db = db

    def _query(self) -> Query:
        return self.db.query(Post).options(
            joinedload(Post.user),
            selectinload(Post.favourited_by),
        )

    @staticmethod
    def _newest_first(query: Query) -> Query:
        return query.order_by(Post.created_at.desc(), Post.id.desc())

    def add(self, **fields) -> Post:
        """Insert a new post and return it with its author loaded."""
        post = Post(**fields)
        self.db.add(post)
        self.db.commit()
        return self.get(post.id)

    def get(self, post_id: int) -> Post | None:
        """Get a post with author and favouriting users."""
        return self._query().filter(Post.id == post_id).first()

    def newest(self, limit: int) -> list[Post]:
        """Get the most recently created posts."""
        return self._newest_first(self._query()).limit(limit).all()

    def search(self, keyword: str | None = None, user_id: int | None = None) -> list[Post]:
        """Get posts newest first, optionally filtered by author and keyword.

        A keyword matches when it is contained in the name, the location or
        the description of a post.
        """
        query = self._query()
        if user_id is not None:
            query = query.filter(Post.user_id == user_id)
        if keyword:
            query = query.filter(
                or_(
                    Post.name.contains(keyword, autoescape=True),
                    Post.location.contains(keyword, autoescape=True),
                    Post.description.contains(keyword, autoescape=True),
                )
            )
        return self._newest_first(query).all()

    def popular(self) -> list[Post]:
        """Get every post ranked by visits, then by favourite count."""
        like_count = (
            select(func.count())
            .select_from(favourites)
            .where(favourites.c.post_id == Post.id)
            .correlate(Post)
            .scalar_subquery()
        )
        return (
            self._query()
            .order_by(Post.visited.desc(), like_count.desc(), Post.id.asc())
            .all()
        )

    def ids_newest_first(self) -> list[int]:
        """Get every post id, newest first."""
        rows = self._newest_first(self.db.query(Post.id)).all()
        return [post_id for (post_id,) in rows]

    def get_many(self, post_ids: list[int]) -> list[Post]:
        """Get posts by id, in the order the ids were given."""
        if not post_ids:
            return []
        by_id = {post.id: post for post in self._query().filter(Post.id.in_(post_ids)).all()}
        return [by_id[post_id] for post_id in post_ids if post_id in by_id]

    def increment_visits(self, post_id: int) -> bool:
        """Add one to the visit counter in a single UPDATE.

        Returns False when no post has that id.
        """
        updated = (
            self.db.query(Post)
            .filter(Post.id == post_id)
            .update({Post.visited: Post.visited + 1}, synchronize_session=False)
        )
        self.db.commit()
        return updated > 0

    def toggle_favourite(self, post_id: int, user_id: int) -> bool:
        """Flip the (user, post) favourite pair.

        Returns True when the pair is present afterwards. Removal and insertion
        are each a single statement guarded by the composite primary key, so
        concurrent toggles of the same pair end in the state of some serial
        order of those toggles.
        """
        pair = and_(favourites.c.post_id == post_id, favourites.c.user_id == user_id)

        removed = self.db.execute(delete(favourites).where(pair)).rowcount
        if removed:
            self.db.commit()
            return False

        try:
            self.db.execute(insert(favourites).values(post_id=post_id, user_id=user_id))
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if self.db.execute(select(favourites).where(pair)).first() is None:
                # Not a duplicate pair: the user or post row is gone
                logger.warning(f"Like on post {post_id} by user {user_id} rejected by the database")
                raise
            # Another request inserted the pair first; this toggle undoes it
            logger.info(f"Concurrent like on post {post_id} by user {user_id}, removing pair")
            self.db.execute(delete(favourites).where(pair))
            self.db.commit()
            return False
        return True

    def update(self, post: Post, **fields) -> Post:
        """Apply field changes to a post and persist them."""
        for field, value in fields.items():
            setattr(post, field, value)
        self.db.commit()
        return self.get(post.id)

    def delete(self, post: Post) -> None:
        """Delete a post; its favourite pairs go with it."""
        self.db.delete(post)
        self.db.commit()
