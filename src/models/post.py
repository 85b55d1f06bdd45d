"""Post model and the favourites association."""

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin

# Many-to-many "like" relation; the composite key keeps one row per (user, post)
favourites = Table(
    "favourites",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
)


class Post(Base, TimestampMixin):
    """A shared photo post."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    image = Column(String(1024), nullable=False)
    image_ref = Column(String(512), nullable=True)  # blob store key
    visited = Column(Integer, nullable=False, default=0, server_default="0")
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships
    user = relationship("User", backref="posts")
    favourited_by = relationship(
        "User",
        secondary=favourites,
        backref="favourites",
        order_by="User.id",
    )

    @property
    def likes(self) -> int:
        """Like count, derived from the relation."""
        return len(self.favourited_by)
